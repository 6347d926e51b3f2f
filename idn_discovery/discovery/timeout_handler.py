"""Deadline tracking for a discovery round."""

import math
import time
from typing import Optional


class Deadline:
    """A fixed point in time a discovery round must not run past.

    Computed once when started; receiving datagrams never moves it.
    """

    def __init__(self, timeout: float):
        """Initialize deadline.

        Args:
            timeout: Budget in seconds, measured from start().
        """
        if not math.isfinite(timeout) or timeout <= 0:
            raise ValueError(f"Timeout must be a positive finite number, got {timeout}")
        self.timeout = timeout
        self._start_time: Optional[float] = None

    @property
    def started(self) -> bool:
        return self._start_time is not None

    @property
    def elapsed(self) -> float:
        """Seconds elapsed since start."""
        if self._start_time is None:
            return 0.0
        return time.monotonic() - self._start_time

    @property
    def remaining(self) -> float:
        """Seconds remaining before the deadline."""
        return max(0.0, self.timeout - self.elapsed)

    @property
    def is_expired(self) -> bool:
        """Whether the deadline has passed. Never true before start()."""
        return self.started and self.elapsed >= self.timeout

    def start(self) -> "Deadline":
        """Start the clock. Starting twice keeps the first start time."""
        if self._start_time is None:
            self._start_time = time.monotonic()
        return self

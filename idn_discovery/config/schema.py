"""Configuration data models for IDN server discovery."""

from dataclasses import asdict, dataclass, field
from typing import Any

from ..protocol.hello import HELLO_UDP_PORT
from ..transport.broadcast import DEFAULT_RECEIVE_BUFFER


# Default collection window in seconds
DEFAULT_TIMEOUT = 0.5


@dataclass
class DiscoveryConfig:
    """Settings for a discovery round."""
    client_group: int = 0
    timeout: float = DEFAULT_TIMEOUT
    port: int = HELLO_UDP_PORT
    query_services: bool = True
    skip_loopback: bool = True
    receive_buffer: int = DEFAULT_RECEIVE_BUFFER

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ValidationError:
    """A single validation error."""
    path: str
    message: str
    severity: str = "error"  # "error" or "warning"


@dataclass
class ValidationResult:
    """Result of configuration validation."""
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[ValidationError] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    def __str__(self) -> str:
        if self.valid:
            msg = "Valid"
            if self.warnings:
                msg += f" ({self.warning_count} warnings)"
            return msg
        return f"Invalid: {self.error_count} errors, {self.warning_count} warnings"

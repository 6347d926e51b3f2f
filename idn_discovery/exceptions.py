"""Exception hierarchy for IDN server discovery.

Runtime failures derive from DiscoveryError. Caller misuse (bad client
group, touching a released server list) derives from the matching built-in
exception instead, so it never gets mixed up with network trouble.
"""

from typing import Optional


class DiscoveryError(Exception):
    """Base class for runtime discovery failures."""


class DiscoverySetupError(DiscoveryError):
    """Discovery round could not be set up (e.g. no usable network stack).

    Attributes:
        errno: OS error number of the underlying failure, if known.
    """

    def __init__(self, message: str, errno: Optional[int] = None):
        super().__init__(message)
        self.errno = errno

    @property
    def error_code(self) -> int:
        """Non-zero error code for callers using the (list, code) contract."""
        return self.errno or 1


class DecodeError(DiscoveryError, ValueError):
    """Datagram is not a well-formed IDN-Hello response."""


class InvalidClientGroupError(ValueError):
    """Client group outside 0..15."""


class ServerListReleasedError(RuntimeError):
    """Server list used or released after it was released."""

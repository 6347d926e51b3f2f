"""Transport module - interface enumeration and UDP broadcast sockets."""

from .broadcast import DEFAULT_RECEIVE_BUFFER, BroadcastTransport, poll
from .interfaces import LocalInterface, list_interfaces, local_networks

__all__ = [
    "DEFAULT_RECEIVE_BUFFER",
    "BroadcastTransport",
    "poll",
    "LocalInterface",
    "list_interfaces",
    "local_networks",
]

"""UDP broadcast transport bound to one local interface.

One BroadcastTransport owns one non-blocking UDP socket bound to the
address of a single local interface, so replies can be attributed to the
interface they arrived on. poll() waits for readability across several
transports at once.
"""

import ipaddress
import selectors
import socket
import time
from typing import Optional, Sequence

from .interfaces import LocalInterface


# Largest UDP payload; service maps can exceed one Ethernet MTU
DEFAULT_RECEIVE_BUFFER = 65535


class BroadcastTransport:
    """Broadcast-capable UDP socket bound to a local interface."""

    def __init__(
        self,
        interface: LocalInterface,
        sock: socket.socket,
        receive_buffer: int = DEFAULT_RECEIVE_BUFFER,
    ):
        self.interface = interface
        self.receive_buffer = receive_buffer
        self._sock: Optional[socket.socket] = sock

    @classmethod
    def open(
        cls,
        interface: LocalInterface,
        port: int = 0,
        receive_buffer: int = DEFAULT_RECEIVE_BUFFER,
    ) -> "BroadcastTransport":
        """Open a transport on an interface.

        Args:
            interface: Local interface to bind to.
            port: Local UDP port. Default: 0 (ephemeral).
            receive_buffer: Maximum datagram size to receive.

        Raises:
            OSError: If the socket cannot be created, configured or bound.
        """
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
            sock.bind((str(interface.address), port))
            sock.setblocking(False)
        except OSError:
            sock.close()
            raise
        return cls(interface, sock, receive_buffer)

    @property
    def name(self) -> str:
        return self.interface.name

    @property
    def is_open(self) -> bool:
        return self._sock is not None

    def fileno(self) -> int:
        return self._socket().fileno()

    def send(self, data: bytes, destination: ipaddress.IPv4Address, port: int) -> None:
        """Send a datagram.

        Raises:
            OSError: If the datagram cannot be sent.
        """
        self._socket().sendto(data, (str(destination), port))

    def receive(self) -> tuple[bytes, ipaddress.IPv4Address]:
        """Receive one pending datagram.

        Returns:
            Tuple of (payload, sender address).

        Raises:
            BlockingIOError: If no datagram is pending.
            OSError: On other socket errors.
        """
        data, addr = self._socket().recvfrom(self.receive_buffer)
        return data, ipaddress.IPv4Address(addr[0])

    def close(self) -> None:
        """Close the socket. Closing twice is a no-op.

        Raises:
            OSError: If the OS reports a failure while closing.
        """
        sock, self._sock = self._sock, None
        if sock is not None:
            sock.close()

    def _socket(self) -> socket.socket:
        if self._sock is None:
            raise OSError(f"Transport on {self.interface.name} is closed")
        return self._sock

    def __repr__(self) -> str:
        state = "open" if self.is_open else "closed"
        return f"<BroadcastTransport {self.interface} {state}>"

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


def poll(transports: Sequence[BroadcastTransport], timeout: float) -> list[BroadcastTransport]:
    """Wait until at least one transport is readable or the timeout elapses.

    Args:
        transports: Open transports to watch.
        timeout: Maximum wait in seconds.

    Returns:
        Readable transports (empty on timeout or when nothing is watched).
    """
    if not transports:
        time.sleep(max(0.0, timeout))
        return []

    with selectors.DefaultSelector() as selector:
        for transport in transports:
            selector.register(transport, selectors.EVENT_READ)
        events = selector.select(max(0.0, timeout))

    return [key.fileobj for key, _mask in events]

"""Discovery orchestrator - runs one IDN-Hello scan round.

Coordinates the round:
1. Enumerate local IPv4 interfaces
2. Open one broadcast transport per interface
3. Send one scan probe per transport
4. Collect replies from all transports until the deadline
5. Merge replies per device
6. Close transports and hand the result to the caller
"""

import ipaddress
import logging
from typing import Callable, Optional, Sequence

from ..config.schema import DiscoveryConfig
from ..exceptions import DecodeError, DiscoverySetupError
from ..models import DecodedReply, DeviceIdentity
from ..protocol.hello import (
    ScanResponse,
    ServiceMapResponse,
    check_client_group,
    decode_response,
    encode_probe,
    encode_service_map_request,
)
from ..transport.broadcast import BroadcastTransport, poll
from ..transport.interfaces import LocalInterface, list_interfaces, local_networks
from .builder import ResultBuilder, ServerList
from .merger import ResponseMerger
from .timeout_handler import Deadline

logger = logging.getLogger(__name__)


class _RoundState:
    """Bookkeeping for service map queries within one round."""

    def __init__(self, client_group: int):
        self.client_group = client_group
        self.queried: set[DeviceIdentity] = set()
        # Request sequence -> (transport, queried address, identity)
        self.pending: dict[
            int, tuple[BroadcastTransport, ipaddress.IPv4Address, DeviceIdentity]
        ] = {}
        self.datagrams = 0
        self.discarded = 0


class DiscoveryOrchestrator:
    """Runs discovery rounds over all local interfaces.

    Each call to discover() owns its own transports and inventory, so one
    orchestrator can run any number of rounds one after another.
    """

    def __init__(
        self,
        config: Optional[DiscoveryConfig] = None,
        list_interfaces: Callable[[], Sequence[LocalInterface]] = list_interfaces,
        open_transport: Callable[..., BroadcastTransport] = BroadcastTransport.open,
        poll: Callable[[Sequence[BroadcastTransport], float], list] = poll,
    ):
        """Initialize orchestrator.

        Args:
            config: Discovery settings. Default: DiscoveryConfig().
            list_interfaces: Interface enumerator.
            open_transport: Opens a transport for an interface.
            poll: Readiness wait across transports.
        """
        self.config = config or DiscoveryConfig()
        self._list_interfaces = list_interfaces
        self._open_transport = open_transport
        self._poll = poll
        self._builder = ResultBuilder()
        self._sequence = 0

    def discover(
        self,
        client_group: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> ServerList:
        """Discover IDN servers on all local interfaces.

        Args:
            client_group: Client group 0..15. Default: config.client_group.
            timeout: Collection window in seconds. Default: config.timeout.

        Returns:
            ServerList in first-discovered order (may be empty).

        Raises:
            InvalidClientGroupError: If client_group is outside 0..15.
            ValueError: If timeout is not positive.
            DiscoverySetupError: If local interfaces cannot be enumerated.
        """
        if client_group is None:
            client_group = self.config.client_group
        check_client_group(client_group)
        deadline = Deadline(self.config.timeout if timeout is None else timeout)

        try:
            interfaces = list(self._list_interfaces())
        except OSError as e:
            raise DiscoverySetupError(
                f"Interface enumeration failed: {e}", errno=e.errno
            ) from e

        merger = ResponseMerger(local_networks(interfaces))
        state = _RoundState(client_group)
        transports = self._open_transports(interfaces, client_group)

        try:
            deadline.start()
            self._collect(transports, merger, deadline, state)
        finally:
            self._close_transports(transports)

        servers = self._builder.finalize(merger.inventory)
        logger.info(
            f"Discovery finished after {deadline.elapsed:.3f}s: {len(servers)} servers, "
            f"{state.datagrams} datagrams ({state.discarded} discarded) "
            f"on {len(transports)} interfaces"
        )
        return servers

    def _open_transports(
        self,
        interfaces: Sequence[LocalInterface],
        client_group: int,
    ) -> list[BroadcastTransport]:
        """Open a transport per usable interface and send the scan probe."""
        transports = []

        for interface in interfaces:
            if interface.is_loopback and self.config.skip_loopback:
                logger.debug(f"Skipping loopback interface {interface}")
                continue

            try:
                transport = self._open_transport(
                    interface, receive_buffer=self.config.receive_buffer
                )
            except OSError as e:
                logger.warning(f"Cannot open socket on {interface}: {e}")
                continue

            transports.append(transport)
            self._send(
                transport,
                encode_probe(client_group, self._next_sequence()),
                interface.broadcast_address,
            )

        if not transports:
            logger.warning("No interface available for discovery")
        return transports

    def _collect(
        self,
        transports: list[BroadcastTransport],
        merger: ResponseMerger,
        deadline: Deadline,
        state: _RoundState,
    ) -> None:
        """Receive and merge replies until the deadline passes."""
        while not deadline.is_expired:
            ready = self._poll(transports, deadline.remaining)

            for transport in ready:
                try:
                    data, sender = transport.receive()
                except BlockingIOError:
                    continue
                except OSError as e:
                    logger.debug(f"Receive failed on {transport.name}: {e}")
                    continue

                state.datagrams += 1
                self._handle_datagram(transport, data, sender, merger, state)

    def _handle_datagram(
        self,
        transport: BroadcastTransport,
        data: bytes,
        sender: ipaddress.IPv4Address,
        merger: ResponseMerger,
        state: _RoundState,
    ) -> None:
        """Decode one datagram and fold it into the inventory."""
        try:
            message = decode_response(data)
        except DecodeError as e:
            state.discarded += 1
            logger.debug(f"Discarding datagram from {sender} on {transport.name}: {e}")
            return

        if isinstance(message, ScanResponse):
            merger.fold(
                DecodedReply(
                    identity=message.identity,
                    host_name=message.host_name,
                    addresses=[sender],
                ),
                transport.name,
            )
            if self.config.query_services and message.identity not in state.queried:
                state.queried.add(message.identity)
                sequence = self._next_sequence()
                state.pending[sequence] = (transport, sender, message.identity)
                self._send(
                    transport,
                    encode_service_map_request(state.client_group, sequence),
                    sender,
                )

        elif isinstance(message, ServiceMapResponse):
            query = state.pending.get(message.sequence)
            if query is None or query[:2] != (transport, sender):
                state.discarded += 1
                logger.debug(
                    f"Unsolicited service map (sequence {message.sequence}) "
                    f"from {sender} on {transport.name}"
                )
                return
            del state.pending[message.sequence]
            identity = query[2]
            merger.fold(
                DecodedReply(
                    identity=identity,
                    services=message.services,
                    relays=message.relays,
                ),
                transport.name,
            )

    def _send(
        self,
        transport: BroadcastTransport,
        data: bytes,
        destination: ipaddress.IPv4Address,
    ) -> None:
        try:
            transport.send(data, destination, self.config.port)
        except OSError as e:
            logger.warning(f"Send to {destination} on {transport.name} failed: {e}")

    def _close_transports(self, transports: list[BroadcastTransport]) -> None:
        for transport in transports:
            try:
                transport.close()
            except OSError as e:
                logger.warning(f"Closing socket on {transport.name} failed: {e}")

    def _next_sequence(self) -> int:
        self._sequence = (self._sequence + 1) & 0xFFFF
        return self._sequence


def discover(
    client_group: int = 0,
    timeout: Optional[float] = None,
    config: Optional[DiscoveryConfig] = None,
) -> ServerList:
    """Discover IDN servers with a fresh orchestrator.

    Args:
        client_group: Client group 0..15.
        timeout: Collection window in seconds. Default: config.timeout.
        config: Discovery settings.

    Returns:
        ServerList the caller must release exactly once.
    """
    return DiscoveryOrchestrator(config).discover(client_group, timeout)


def get_server_list(
    client_group: int,
    timeout_ms: int,
    config: Optional[DiscoveryConfig] = None,
) -> tuple[ServerList, int]:
    """Discover IDN servers, reporting setup failures as an error code.

    Args:
        client_group: Client group 0..15.
        timeout_ms: Collection window in milliseconds.
        config: Discovery settings.

    Returns:
        Tuple of (servers, error_code). error_code 0 means success; an
        empty list is a valid success.

    Raises:
        InvalidClientGroupError: If client_group is outside 0..15.
        ValueError: If timeout_ms is not positive.
    """
    try:
        servers = discover(client_group, timeout_ms / 1000.0, config)
    except DiscoverySetupError as e:
        logger.error(str(e))
        return ServerList([]), e.error_code
    return servers, 0

"""Response merger - folds per-interface replies into one inventory.

A device answers on every interface it can hear the probe on, so the same
unit ID usually arrives several times per round. Replies are merged by unit
ID: scalar fields keep the first value seen, address flags only ever get
set, and services refer to relays of the same server by index.
"""

import ipaddress
import logging
from typing import Iterable, Optional

from ..models import (
    AddressRecord,
    DecodedReply,
    DeviceIdentity,
    RelayRecord,
    ServerRecord,
    ServiceRecord,
)

logger = logging.getLogger(__name__)


class Inventory:
    """Servers of the running round, keyed by identity in first-seen order."""

    def __init__(self):
        self._servers: dict[DeviceIdentity, ServerRecord] = {}

    def get(self, identity: DeviceIdentity) -> Optional[ServerRecord]:
        return self._servers.get(identity)

    def get_or_create(self, identity: DeviceIdentity) -> ServerRecord:
        server = self._servers.get(identity)
        if server is None:
            server = ServerRecord(identity=identity)
            self._servers[identity] = server
            logger.debug(f"New server {identity}")
        return server

    def detach(self) -> list[ServerRecord]:
        """Hand over all servers and leave the inventory empty."""
        servers = list(self._servers.values())
        self._servers = {}
        return servers

    def __len__(self) -> int:
        return len(self._servers)

    def __contains__(self, identity: DeviceIdentity) -> bool:
        return identity in self._servers


class ResponseMerger:
    """Folds decoded replies into an Inventory."""

    def __init__(self, local_networks: Iterable[ipaddress.IPv4Network] = ()):
        """Initialize merger.

        Args:
            local_networks: Subnets attached to this host (all interfaces).
                Addresses outside all of them are flagged unreachable.
        """
        self.local_networks = list(local_networks)
        self.inventory = Inventory()

    def fold(self, reply: DecodedReply, source_interface: str) -> ServerRecord:
        """Merge one decoded reply received on source_interface.

        Args:
            reply: Decoded reply.
            source_interface: Name of the local interface it arrived on.

        Returns:
            The (new or existing) ServerRecord for the reply's identity.
        """
        server = self.inventory.get_or_create(reply.identity)

        if server.host_name is None and reply.host_name:
            server.host_name = reply.host_name

        for address in reply.addresses:
            self._merge_address(server, address, source_interface)

        # Relays first: services of this reply may refer to relays it introduces
        for relay in reply.relays:
            index = server.find_relay_index(relay.relay_number)
            if index is None:
                server.relays.append(
                    RelayRecord(relay_number=relay.relay_number, relay_name=relay.name)
                )
            elif server.relays[index].relay_name is None and relay.name:
                server.relays[index].relay_name = relay.name

        for service in reply.services:
            existing = server.find_service(service.service_id)
            if existing is not None:
                if existing.parent_relay is None and service.relay_number:
                    existing.parent_relay = server.find_relay_index(service.relay_number)
                continue

            parent_relay = None
            if service.relay_number:
                parent_relay = server.find_relay_index(service.relay_number)
                if parent_relay is None:
                    logger.debug(
                        f"Server {server.identity}: service {service.service_id} refers "
                        f"to unknown relay {service.relay_number}"
                    )

            server.services.append(ServiceRecord(
                service_id=service.service_id,
                service_type=service.service_type,
                service_name=service.name,
                flags=service.flags,
                parent_relay=parent_relay,
            ))

        return server

    def is_reachable(self, address: ipaddress.IPv4Address) -> bool:
        """Whether address lies in any locally attached subnet."""
        return any(address in network for network in self.local_networks)

    def _merge_address(
        self,
        server: ServerRecord,
        address: ipaddress.IPv4Address,
        source_interface: str,
    ) -> None:
        record = server.find_address(address)

        if record is None:
            record = AddressRecord(
                address=address,
                unreachable=not self.is_reachable(address),
                interfaces=[source_interface],
            )
            server.addresses.append(record)
            if record.unreachable:
                logger.debug(f"Server {server.identity}: {address} is not in a local subnet")
            return

        if source_interface in record.interfaces:
            # Retransmission on the same interface
            return

        record.interfaces.append(source_interface)
        if not record.ambiguous:
            record.ambiguous = True
            logger.debug(
                f"Server {server.identity}: {address} seen via "
                f"{', '.join(record.interfaces)}"
            )

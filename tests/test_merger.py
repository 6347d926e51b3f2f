"""Tests for idn_discovery.discovery.merger — folding replies per device."""

from __future__ import annotations

import ipaddress

from idn_discovery.discovery.merger import Inventory, ResponseMerger
from idn_discovery.models import (
    DecodedRelay,
    DecodedReply,
    DecodedService,
    DeviceIdentity,
    ServiceType,
)

LAN = ipaddress.IPv4Network("192.168.1.0/24")
LAB = ipaddress.IPv4Network("10.0.0.0/24")

DEVICE = DeviceIdentity(b"\x01\xa2\xb3")
OTHER = DeviceIdentity(b"\x01\xc4\xd5")


def _addr(text: str) -> ipaddress.IPv4Address:
    return ipaddress.IPv4Address(text)


def _reply(identity=DEVICE, host_name=None, addresses=("192.168.1.20",), services=(), relays=()):
    return DecodedReply(
        identity=identity,
        host_name=host_name,
        addresses=[_addr(a) for a in addresses],
        services=list(services),
        relays=list(relays),
    )


def _merger() -> ResponseMerger:
    return ResponseMerger([LAN, LAB])


# ---------------------------------------------------------------------------
# Identity and host name
# ---------------------------------------------------------------------------


class TestIdentity:
    def test_new_identity_creates_server(self) -> None:
        merger = _merger()
        server = merger.fold(_reply(host_name="laser-1"), "eth0")
        assert server.identity == DEVICE
        assert server.host_name == "laser-1"
        assert DEVICE in merger.inventory

    def test_same_identity_merged(self) -> None:
        merger = _merger()
        first = merger.fold(_reply(), "eth0")
        second = merger.fold(_reply(addresses=("10.0.0.20",)), "eth1")
        assert first is second
        assert len(merger.inventory) == 1

    def test_distinct_identities(self) -> None:
        merger = _merger()
        merger.fold(_reply(DEVICE), "eth0")
        merger.fold(_reply(OTHER, addresses=("192.168.1.21",)), "eth0")
        assert len(merger.inventory) == 2

    def test_host_name_first_seen_wins(self) -> None:
        merger = _merger()
        merger.fold(_reply(host_name="first"), "eth0")
        server = merger.fold(_reply(host_name="second"), "eth1")
        assert server.host_name == "first"

    def test_host_name_filled_when_unknown(self) -> None:
        merger = _merger()
        merger.fold(_reply(host_name=None), "eth0")
        server = merger.fold(_reply(host_name="late"), "eth0")
        assert server.host_name == "late"


# ---------------------------------------------------------------------------
# Addresses
# ---------------------------------------------------------------------------


class TestAddresses:
    def test_idempotent_fold(self) -> None:
        merger = _merger()
        merger.fold(_reply(), "eth0")
        server = merger.fold(_reply(), "eth0")
        assert len(server.addresses) == 1
        record = server.addresses[0]
        assert record.ambiguous is False
        assert record.unreachable is False
        assert record.interfaces == ["eth0"]

    def test_cross_interface_duplicate_is_ambiguous(self) -> None:
        merger = _merger()
        merger.fold(_reply(), "eth0")
        server = merger.fold(_reply(), "eth1")
        assert len(server.addresses) == 1
        assert server.addresses[0].ambiguous is True
        assert server.addresses[0].interfaces == ["eth0", "eth1"]

    def test_ambiguity_is_monotonic(self) -> None:
        merger = _merger()
        merger.fold(_reply(), "eth0")
        merger.fold(_reply(), "eth1")
        server = merger.fold(_reply(), "eth0")
        server = merger.fold(_reply(addresses=()), "eth0")
        assert server.addresses[0].ambiguous is True

    def test_address_outside_local_subnets_is_unreachable(self) -> None:
        merger = _merger()
        server = merger.fold(_reply(addresses=("172.16.5.5",)), "eth0")
        assert server.addresses[0].unreachable is True

    def test_reachability_uses_all_local_subnets(self) -> None:
        merger = _merger()
        # Arrived on the LAN interface but lies in the lab subnet
        server = merger.fold(_reply(addresses=("10.0.0.20",)), "eth0")
        assert server.addresses[0].unreachable is False

    def test_no_local_networks_means_unreachable(self) -> None:
        merger = ResponseMerger()
        server = merger.fold(_reply(), "eth0")
        assert server.addresses[0].unreachable is True

    def test_arrival_order_kept(self) -> None:
        merger = _merger()
        merger.fold(_reply(addresses=("10.0.0.20",)), "eth1")
        server = merger.fold(_reply(addresses=("192.168.1.20",)), "eth0")
        assert [str(a.address) for a in server.addresses] == ["10.0.0.20", "192.168.1.20"]


# ---------------------------------------------------------------------------
# Services and relays
# ---------------------------------------------------------------------------


class TestServicesAndRelays:
    def test_service_linked_to_relay_from_same_reply(self) -> None:
        merger = _merger()
        server = merger.fold(_reply(
            relays=[DecodedRelay(1, "Relay A")],
            services=[DecodedService(1, ServiceType.LASER_PROJECTOR, "Projector", relay_number=1)],
        ), "eth0")
        relay = server.parent_relay_of(server.services[0])
        assert relay is server.relays[0]
        assert relay.relay_name == "Relay A"

    def test_unknown_relay_leaves_parent_unset(self) -> None:
        merger = _merger()
        server = merger.fold(_reply(
            services=[DecodedService(1, ServiceType.LASER_PROJECTOR, "Projector", relay_number=3)],
        ), "eth0")
        assert len(server.services) == 1
        assert server.services[0].parent_relay is None

    def test_root_service_has_no_parent(self) -> None:
        merger = _merger()
        server = merger.fold(_reply(
            relays=[DecodedRelay(1, "Relay A")],
            services=[DecodedService(1, 0x80, "Projector", relay_number=0)],
        ), "eth0")
        assert server.services[0].parent_relay is None

    def test_relay_from_earlier_reply_resolves(self) -> None:
        merger = _merger()
        merger.fold(_reply(relays=[DecodedRelay(2, "Relay B")]), "eth0")
        server = merger.fold(_reply(
            services=[DecodedService(5, 0x80, "Projector", relay_number=2)],
        ), "eth1")
        assert server.parent_relay_of(server.services[0]).relay_name == "Relay B"

    def test_service_deduplicated_first_seen_wins(self) -> None:
        merger = _merger()
        merger.fold(_reply(services=[DecodedService(1, 0x80, "first")]), "eth0")
        server = merger.fold(_reply(services=[DecodedService(1, 0x42, "second")]), "eth1")
        assert len(server.services) == 1
        assert server.services[0].service_name == "first"
        assert server.services[0].service_type == 0x80

    def test_relay_deduplicated_first_name_wins(self) -> None:
        merger = _merger()
        merger.fold(_reply(relays=[DecodedRelay(1, "first")]), "eth0")
        server = merger.fold(_reply(relays=[DecodedRelay(1, "second")]), "eth1")
        assert len(server.relays) == 1
        assert server.relays[0].relay_name == "first"

    def test_parent_relays_always_point_into_same_server(self) -> None:
        merger = _merger()
        merger.fold(_reply(
            relays=[DecodedRelay(1, "A"), DecodedRelay(2, "B")],
            services=[
                DecodedService(1, 0x80, "one", relay_number=2),
                DecodedService(2, 0x80, "two", relay_number=9),
                DecodedService(3, 0x80, "three", relay_number=1),
            ],
        ), "eth0")
        merger.fold(_reply(OTHER, relays=[DecodedRelay(1, "C")],
                           services=[DecodedService(1, 0x80, "x", relay_number=1)]), "eth0")
        for server in merger.inventory.detach():
            for service in server.services:
                if service.parent_relay is not None:
                    assert 0 <= service.parent_relay < len(server.relays)


# ---------------------------------------------------------------------------
# Inventory
# ---------------------------------------------------------------------------


class TestInventory:
    def test_detach_keeps_first_seen_order_and_empties(self) -> None:
        inventory = Inventory()
        inventory.get_or_create(OTHER)
        inventory.get_or_create(DEVICE)
        inventory.get_or_create(OTHER)
        servers = inventory.detach()
        assert [s.identity for s in servers] == [OTHER, DEVICE]
        assert len(inventory) == 0
        assert inventory.get(OTHER) is None

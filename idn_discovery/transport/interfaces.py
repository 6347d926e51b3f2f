"""Local IPv4 interface enumeration."""

import ipaddress
import socket
from dataclasses import dataclass
from typing import Iterable, Optional

import psutil


@dataclass(frozen=True)
class LocalInterface:
    """An IPv4 address configured on a local network interface."""
    name: str
    address: ipaddress.IPv4Address
    netmask: ipaddress.IPv4Address

    @property
    def network(self) -> ipaddress.IPv4Network:
        """Attached subnet of this interface."""
        return ipaddress.IPv4Interface(f"{self.address}/{self.netmask}").network

    @property
    def broadcast_address(self) -> ipaddress.IPv4Address:
        """Directed broadcast address of the attached subnet."""
        return self.network.broadcast_address

    @property
    def is_loopback(self) -> bool:
        return self.address.is_loopback

    def __str__(self) -> str:
        return f"{self.name} ({self.address}/{self.network.prefixlen})"


def list_interfaces() -> list[LocalInterface]:
    """List all IPv4 addresses of all local interfaces.

    Returns:
        One LocalInterface per IPv4 address, in the order the OS reports them.

    Raises:
        OSError: If the interface table cannot be read.
    """
    interfaces = []

    for name, addrs in psutil.net_if_addrs().items():
        for addr in addrs:
            if addr.family != socket.AF_INET:
                continue
            interface = _to_interface(name, addr.address, addr.netmask)
            if interface is not None:
                interfaces.append(interface)

    return interfaces


def local_networks(interfaces: Iterable[LocalInterface]) -> list[ipaddress.IPv4Network]:
    """Union of the subnets attached to the given interfaces (deduplicated)."""
    networks: list[ipaddress.IPv4Network] = []
    for interface in interfaces:
        if interface.network not in networks:
            networks.append(interface.network)
    return networks


def _to_interface(name: str, address: str, netmask: Optional[str]) -> Optional[LocalInterface]:
    try:
        ip = ipaddress.IPv4Address(address)
        mask = ipaddress.IPv4Address(netmask or "255.255.255.255")
        # Rejects non-contiguous masks
        ipaddress.IPv4Network(f"0.0.0.0/{mask}")
    except ValueError:
        return None
    return LocalInterface(name=name, address=ip, netmask=mask)

"""Data models for discovered IDN servers.

Defines the records a discovery round produces (servers, addresses,
services, relays) and the decoded replies the merger folds into them.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from ipaddress import IPv4Address
from typing import Optional, Union


MIN_IDENTITY_LENGTH = 1
MAX_IDENTITY_LENGTH = 255

CLIENT_GROUP_MIN = 0
CLIENT_GROUP_MAX = 15


class ServiceType(IntEnum):
    """Well-known IDN-Hello service type codes."""
    LASER_PROJECTOR = 0x80

    @classmethod
    def from_code(cls, code: int) -> Union["ServiceType", int]:
        """Map a raw service type code, keeping unknown codes as int."""
        try:
            return cls(code)
        except ValueError:
            return code


@dataclass(frozen=True)
class DeviceIdentity:
    """Opaque unit ID of a device, compared over its full byte range."""
    value: bytes

    def __post_init__(self):
        if not isinstance(self.value, (bytes, bytearray)):
            raise TypeError(f"Identity must be bytes, got {type(self.value).__name__}")
        if not MIN_IDENTITY_LENGTH <= len(self.value) <= MAX_IDENTITY_LENGTH:
            raise ValueError(
                f"Identity must be {MIN_IDENTITY_LENGTH}-{MAX_IDENTITY_LENGTH} bytes, "
                f"got {len(self.value)}"
            )
        object.__setattr__(self, "value", bytes(self.value))

    def __len__(self) -> int:
        return len(self.value)

    def __str__(self) -> str:
        hex_bytes = self.value.hex().upper()
        if len(self.value) == 1:
            return hex_bytes
        return f"{hex_bytes[:2]}-{hex_bytes[2:]}"


@dataclass
class AddressRecord:
    """A network address a server was seen at."""
    address: IPv4Address
    ambiguous: bool = False
    unreachable: bool = False
    interfaces: list[str] = field(default_factory=list)

    @property
    def comment(self) -> str:
        """Short annotation used in listings (ambiguity takes precedence)."""
        if self.ambiguous:
            return "ambiguous"
        if self.unreachable:
            return "unreachable"
        return ""


@dataclass
class RelayRecord:
    """A relay owned by a server; services refer to it by index."""
    relay_number: int
    relay_name: Optional[str] = None


@dataclass
class ServiceRecord:
    """A service offered by a server."""
    service_id: int
    service_type: Union[ServiceType, int]
    service_name: Optional[str] = None
    flags: int = 0
    parent_relay: Optional[int] = None  # index into ServerRecord.relays


@dataclass
class ServerRecord:
    """One discovered device."""
    identity: DeviceIdentity
    host_name: Optional[str] = None
    addresses: list[AddressRecord] = field(default_factory=list)
    services: list[ServiceRecord] = field(default_factory=list)
    relays: list[RelayRecord] = field(default_factory=list)

    def find_address(self, address: IPv4Address) -> Optional[AddressRecord]:
        for record in self.addresses:
            if record.address == address:
                return record
        return None

    def find_service(self, service_id: int) -> Optional[ServiceRecord]:
        for record in self.services:
            if record.service_id == service_id:
                return record
        return None

    def find_relay_index(self, relay_number: int) -> Optional[int]:
        for index, record in enumerate(self.relays):
            if record.relay_number == relay_number:
                return index
        return None

    def parent_relay_of(self, service: ServiceRecord) -> Optional[RelayRecord]:
        """Resolve a service's relay reference within this server."""
        if service.parent_relay is None:
            return None
        return self.relays[service.parent_relay]

    def to_dict(self) -> dict:
        """Convert to a JSON-serializable dictionary."""
        return {
            "identity": str(self.identity),
            "host_name": self.host_name,
            "addresses": [
                {
                    "address": str(a.address),
                    "ambiguous": a.ambiguous,
                    "unreachable": a.unreachable,
                    "interfaces": list(a.interfaces),
                }
                for a in self.addresses
            ],
            "services": [
                {
                    "service_id": s.service_id,
                    "service_name": s.service_name,
                    "service_type": int(s.service_type),
                    "flags": s.flags,
                    "relay": (
                        self.relays[s.parent_relay].relay_number
                        if s.parent_relay is not None else None
                    ),
                }
                for s in self.services
            ],
            "relays": [
                {"relay_number": r.relay_number, "relay_name": r.relay_name}
                for r in self.relays
            ],
        }


@dataclass
class DecodedRelay:
    """Relay entry as announced in a single reply."""
    relay_number: int
    name: Optional[str] = None


@dataclass
class DecodedService:
    """Service entry as announced in a single reply."""
    service_id: int
    service_type: Union[ServiceType, int]
    name: Optional[str] = None
    relay_number: int = 0  # 0 = attached to the root, no relay
    flags: int = 0


@dataclass
class DecodedReply:
    """Everything one datagram told us about one device."""
    identity: DeviceIdentity
    host_name: Optional[str] = None
    addresses: list[IPv4Address] = field(default_factory=list)
    services: list[DecodedService] = field(default_factory=list)
    relays: list[DecodedRelay] = field(default_factory=list)

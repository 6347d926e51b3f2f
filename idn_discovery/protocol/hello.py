"""IDN-Hello message codec.

Encodes scan and service map requests and decodes the matching responses.

Every message starts with a 4 byte header:
    command (u8), flags (u8), sequence (u16, network byte order)

The client group travels in the low nibble of the header flags.
"""

import struct
from dataclasses import dataclass, field
from typing import Optional, Union

from ..exceptions import DecodeError, InvalidClientGroupError
from ..models import (
    CLIENT_GROUP_MAX,
    CLIENT_GROUP_MIN,
    DecodedRelay,
    DecodedService,
    DeviceIdentity,
    ServiceType,
)


# Default IDN-Hello UDP port
HELLO_UDP_PORT = 7255

CMD_SCAN_REQUEST = 0x10
CMD_SCAN_RESPONSE = 0x11
CMD_SERVICEMAP_REQUEST = 0x12
CMD_SERVICEMAP_RESPONSE = 0x13

FLAGS_GROUP_MASK = 0x0F

HEADER = struct.Struct("!BBH")
SCAN_RESPONSE = struct.Struct("!BBBB16s20s")
SERVICEMAP_HEADER = struct.Struct("!BBBB")
SERVICEMAP_ENTRY = struct.Struct("!BBBB20s")


@dataclass
class ScanResponse:
    """Decoded scan response: who the device is."""
    sequence: int
    identity: DeviceIdentity
    host_name: Optional[str] = None
    protocol_version: int = 0
    status: int = 0


@dataclass
class ServiceMapResponse:
    """Decoded service map response: what the device offers."""
    sequence: int
    relays: list[DecodedRelay] = field(default_factory=list)
    services: list[DecodedService] = field(default_factory=list)


HelloResponse = Union[ScanResponse, ServiceMapResponse]


def check_client_group(client_group: int) -> int:
    """Validate a client group selector.

    Raises:
        InvalidClientGroupError: If the group is not an int in 0..15.
    """
    if isinstance(client_group, bool) or not isinstance(client_group, int):
        raise InvalidClientGroupError(
            f"Client group must be an integer, got {type(client_group).__name__}"
        )
    if not CLIENT_GROUP_MIN <= client_group <= CLIENT_GROUP_MAX:
        raise InvalidClientGroupError(
            f"Client group must be {CLIENT_GROUP_MIN}-{CLIENT_GROUP_MAX}, got {client_group}"
        )
    return client_group


def encode_probe(client_group: int, sequence: int = 0) -> bytes:
    """Encode a broadcast scan request for the given client group."""
    check_client_group(client_group)
    return HEADER.pack(CMD_SCAN_REQUEST, client_group & FLAGS_GROUP_MASK, sequence & 0xFFFF)


def encode_service_map_request(client_group: int, sequence: int = 0) -> bytes:
    """Encode a unicast service map request."""
    check_client_group(client_group)
    return HEADER.pack(
        CMD_SERVICEMAP_REQUEST, client_group & FLAGS_GROUP_MASK, sequence & 0xFFFF
    )


def decode_response(data: bytes) -> HelloResponse:
    """Decode a scan or service map response datagram.

    Args:
        data: Raw datagram payload.

    Returns:
        ScanResponse or ServiceMapResponse.

    Raises:
        DecodeError: If the datagram is short, truncated or not a response.
    """
    if len(data) < HEADER.size:
        raise DecodeError(f"Datagram too short for header ({len(data)} bytes)")

    command, _flags, sequence = HEADER.unpack_from(data)
    body = data[HEADER.size:]

    if command == CMD_SCAN_RESPONSE:
        return _decode_scan_response(body, sequence)
    if command == CMD_SERVICEMAP_RESPONSE:
        return _decode_service_map_response(body, sequence)

    raise DecodeError(f"Unexpected command 0x{command:02X}")


def _decode_scan_response(body: bytes, sequence: int) -> ScanResponse:
    if len(body) < SCAN_RESPONSE.size:
        raise DecodeError(f"Scan response truncated ({len(body)} bytes)")

    struct_size, version, status, _reserved, unit_id, host_name = SCAN_RESPONSE.unpack_from(body)
    if struct_size < SCAN_RESPONSE.size or struct_size > len(body):
        raise DecodeError(f"Invalid scan response size {struct_size}")

    id_length = unit_id[0]
    if id_length < 1 or id_length > len(unit_id) - 1:
        raise DecodeError(f"Invalid unit ID length {id_length}")

    return ScanResponse(
        sequence=sequence,
        identity=DeviceIdentity(unit_id[1:1 + id_length]),
        host_name=_decode_name(host_name),
        protocol_version=version,
        status=status,
    )


def _decode_service_map_response(body: bytes, sequence: int) -> ServiceMapResponse:
    if len(body) < SERVICEMAP_HEADER.size:
        raise DecodeError(f"Service map response truncated ({len(body)} bytes)")

    struct_size, entry_size, relay_count, service_count = SERVICEMAP_HEADER.unpack_from(body)
    if struct_size < SERVICEMAP_HEADER.size:
        raise DecodeError(f"Invalid service map header size {struct_size}")
    if entry_size < SERVICEMAP_ENTRY.size:
        raise DecodeError(f"Invalid service map entry size {entry_size}")

    needed = struct_size + entry_size * (relay_count + service_count)
    if len(body) < needed:
        raise DecodeError(
            f"Service map response truncated ({len(body)} of {needed} bytes)"
        )

    response = ServiceMapResponse(sequence=sequence)
    offset = struct_size

    for _ in range(relay_count):
        _service_id, _service_type, _flags, relay_number, name = (
            SERVICEMAP_ENTRY.unpack_from(body, offset)
        )
        response.relays.append(DecodedRelay(relay_number=relay_number, name=_decode_name(name)))
        offset += entry_size

    for _ in range(service_count):
        service_id, service_type, flags, relay_number, name = (
            SERVICEMAP_ENTRY.unpack_from(body, offset)
        )
        response.services.append(DecodedService(
            service_id=service_id,
            service_type=ServiceType.from_code(service_type),
            name=_decode_name(name),
            relay_number=relay_number,
            flags=flags,
        ))
        offset += entry_size

    return response


def _decode_name(raw: bytes) -> Optional[str]:
    """Decode a NUL-padded name field; empty names become None."""
    name = raw.split(b"\x00", 1)[0].decode("utf-8", errors="replace").strip()
    return name or None

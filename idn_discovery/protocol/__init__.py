"""Protocol module - IDN-Hello message codec."""

from .hello import (
    HELLO_UDP_PORT,
    HelloResponse,
    ScanResponse,
    ServiceMapResponse,
    check_client_group,
    decode_response,
    encode_probe,
    encode_service_map_request,
)

__all__ = [
    "HELLO_UDP_PORT",
    "HelloResponse",
    "ScanResponse",
    "ServiceMapResponse",
    "check_client_group",
    "decode_response",
    "encode_probe",
    "encode_service_map_request",
]

"""IDN server discovery.

Finds IDN servers on all local IPv4 networks with an IDN-Hello broadcast
scan and merges their replies into one record per device.
"""

from .config import DiscoveryConfig
from .discovery import (
    DiscoveryOrchestrator,
    ServerList,
    discover,
    get_server_list,
    release,
)
from .exceptions import (
    DecodeError,
    DiscoveryError,
    DiscoverySetupError,
    InvalidClientGroupError,
    ServerListReleasedError,
)
from .models import (
    AddressRecord,
    DeviceIdentity,
    RelayRecord,
    ServerRecord,
    ServiceRecord,
    ServiceType,
)

__version__ = "0.1.0"

__all__ = [
    "DiscoveryConfig",
    "DiscoveryOrchestrator",
    "ServerList",
    "discover",
    "get_server_list",
    "release",
    "DecodeError",
    "DiscoveryError",
    "DiscoverySetupError",
    "InvalidClientGroupError",
    "ServerListReleasedError",
    "AddressRecord",
    "DeviceIdentity",
    "RelayRecord",
    "ServerRecord",
    "ServiceRecord",
    "ServiceType",
]

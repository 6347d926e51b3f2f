"""Discovery module - scan round orchestration, reply merging and results."""

from .builder import ResultBuilder, ServerList, release
from .merger import Inventory, ResponseMerger
from .orchestrator import DiscoveryOrchestrator, discover, get_server_list
from .timeout_handler import Deadline

__all__ = [
    "ResultBuilder",
    "ServerList",
    "release",
    "Inventory",
    "ResponseMerger",
    "DiscoveryOrchestrator",
    "discover",
    "get_server_list",
    "Deadline",
]

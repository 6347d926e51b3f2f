"""Result builder - hands the finished inventory over to the caller."""

from typing import Iterator

from ..exceptions import ServerListReleasedError
from ..models import ServerRecord
from .merger import Inventory


class ServerList:
    """Servers found by one discovery round, in first-discovered order.

    The caller owns the list and releases it exactly once, either with
    release() or by using it as a context manager. Any access after
    release raises ServerListReleasedError.
    """

    def __init__(self, servers: list[ServerRecord]):
        self._servers = servers
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        """Drop every record reachable from this list."""
        if self._released:
            raise ServerListReleasedError("Server list already released")
        for server in self._servers:
            server.addresses.clear()
            server.services.clear()
            server.relays.clear()
        self._servers.clear()
        self._released = True

    def to_list(self) -> list[dict]:
        """Convert all servers to JSON-serializable dictionaries."""
        return [server.to_dict() for server in self._records()]

    def _records(self) -> list[ServerRecord]:
        if self._released:
            raise ServerListReleasedError("Server list used after release")
        return self._servers

    def __len__(self) -> int:
        return len(self._records())

    def __iter__(self) -> Iterator[ServerRecord]:
        return iter(list(self._records()))

    def __getitem__(self, index: int) -> ServerRecord:
        return self._records()[index]

    def __bool__(self) -> bool:
        return bool(self._records())

    def __repr__(self) -> str:
        if self._released:
            return "<ServerList released>"
        return f"<ServerList {len(self._servers)} servers>"

    def __enter__(self):
        return self

    def __exit__(self, *args):
        if not self._released:
            self.release()


class ResultBuilder:
    """Turns a round's inventory into a caller-owned ServerList."""

    def finalize(self, inventory: Inventory) -> ServerList:
        """Detach all servers from inventory, leaving it empty for the next round."""
        return ServerList(inventory.detach())


def release(server_list: ServerList) -> None:
    """Release a server list returned by a discovery round."""
    server_list.release()

"""Plain text listing of discovered servers.

One line per server, followed by one indented line per service:

    01-A2B3C4(laser-1) at 192.168.1.20, 10.0.0.20 (ambiguous)
      1: Projector@Relay A
      2: <unnamed>
"""

from typing import Iterable

from ..models import ServerRecord


# Longest line written, ellipsis included
MAX_LINE_LENGTH = 199
ELLIPSIS = "..."

HEADER_TITLE = "IDN server list"
HEADER_RULE = "-" * 60


def truncate_line(text: str, limit: int = MAX_LINE_LENGTH) -> str:
    """Cut text to limit characters, marking truncation with dots.

    The last len(ELLIPSIS) characters are held back for the dots, so text
    longer than limit - len(ELLIPSIS) is always cut.
    """
    if len(text) <= limit - len(ELLIPSIS):
        return text
    if limit <= len(ELLIPSIS):
        return "." * max(0, limit)
    return text[:limit - len(ELLIPSIS)] + ELLIPSIS


def format_server(server: ServerRecord) -> str:
    """Format the summary line of a server."""
    line = str(server.identity)

    if server.host_name:
        line += f"({server.host_name})"

    for i, record in enumerate(server.addresses):
        line += " at " if i == 0 else ", "
        line += str(record.address)
        if record.comment:
            line += f" ({record.comment})"

    return truncate_line(line)


def format_services(server: ServerRecord) -> list[str]:
    """Format one line per service of a server."""
    id_width = 1
    if len(server.services) >= 10:
        id_width += 1
    if len(server.services) >= 100:
        id_width += 1

    lines = []
    for service in server.services:
        line = f"  {service.service_id:>{id_width}}: {service.service_name or '<unnamed>'}"

        relay = server.parent_relay_of(service)
        if relay is not None:
            line += f"@{relay.relay_name or '<blank>'}"

        lines.append(truncate_line(line))
    return lines


class TextReporter:
    """Renders a server list the way the command line prints it."""

    def render(self, servers: Iterable[ServerRecord], header: bool = True) -> list[str]:
        """Render servers to output lines.

        Args:
            servers: Discovered servers.
            header: If True, start with the title and a rule line.

        Returns:
            List of lines without trailing newlines.
        """
        lines = [HEADER_TITLE, HEADER_RULE] if header else []
        for server in servers:
            lines.append(format_server(server))
            lines.extend(format_services(server))
        return lines

    def to_text(self, servers: Iterable[ServerRecord], header: bool = True) -> str:
        return "\n".join(self.render(servers, header=header))

"""JSON report generator for discovery results.

Generates structured JSON reports from a discovery round.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from ..config.schema import DiscoveryConfig
from ..discovery.builder import ServerList


class JsonReporter:
    """Generates JSON reports from discovery results."""

    def generate(
        self,
        servers: ServerList,
        config: DiscoveryConfig,
        duration_ms: int = 0,
        error: Optional[str] = None,
    ) -> dict[str, Any]:
        """Generate a JSON report from a discovery round.

        Args:
            servers: Discovered servers (not yet released).
            config: Settings the round ran with.
            duration_ms: Round duration in milliseconds.
            error: Overall error message if the round failed.

        Returns:
            Report dictionary ready for JSON serialization.
        """
        server_dicts = servers.to_list()

        return {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "status": "failed" if error else "ok",
            "client_group": config.client_group,
            "timeout": config.timeout,
            "summary": {
                "servers": len(server_dicts),
                "addresses": sum(len(s["addresses"]) for s in server_dicts),
                "services": sum(len(s["services"]) for s in server_dicts),
                "duration_ms": duration_ms,
            },
            "servers": server_dicts,
            "error": error,
        }

    def save(self, report: dict[str, Any], path: Path) -> Path:
        """Save report to a JSON file.

        Args:
            report: Report dictionary.
            path: Output file path.

        Returns:
            Path to the saved file.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(report, f, indent=2, ensure_ascii=False)

        return path

    def to_json_string(self, report: dict[str, Any], pretty: bool = True) -> str:
        """Convert report to JSON string."""
        if pretty:
            return json.dumps(report, indent=2, ensure_ascii=False)
        return json.dumps(report, ensure_ascii=False)

    def generate_cli_output(
        self,
        report: dict[str, Any],
        report_path: Optional[str] = None,
    ) -> dict[str, Any]:
        """Wrap a report in the command line JSON envelope.

        {
            "success": bool,
            "command": "discover",
            "data": { ... },
            "message": str
        }
        """
        summary = report["summary"]
        success = report["status"] == "ok"

        data: dict[str, Any] = {
            "servers": report["servers"],
            "duration_ms": summary["duration_ms"],
        }

        if report_path:
            data["report_path"] = report_path

        if not success:
            message = f"Discovery failed: {report['error']}"
        elif summary["servers"] == 0:
            message = "No IDN servers found"
        else:
            message = f"Found {summary['servers']} IDN server(s)"

        return {
            "success": success,
            "command": "discover",
            "data": data,
            "message": message,
        }


def error_output(message: str, **extra) -> dict[str, Any]:
    """Command line JSON envelope for a failure without a report."""
    return {
        "success": False,
        "command": "discover",
        "data": extra or None,
        "message": message,
    }

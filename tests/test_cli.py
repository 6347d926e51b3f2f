"""Tests for idn_discovery.cli — command line entry point."""

from __future__ import annotations

import json
from ipaddress import IPv4Address
from unittest.mock import patch

from click.testing import CliRunner

from idn_discovery.cli import apply_overrides, main
from idn_discovery.config import DiscoveryConfig
from idn_discovery.discovery.builder import ServerList
from idn_discovery.exceptions import DiscoverySetupError
from idn_discovery.models import (
    AddressRecord,
    DeviceIdentity,
    RelayRecord,
    ServerRecord,
    ServiceRecord,
)


def _servers() -> ServerList:
    return ServerList([
        ServerRecord(
            identity=DeviceIdentity(b"\x01\xa2\xb3"),
            host_name="laser-1",
            addresses=[AddressRecord(IPv4Address("192.168.1.20"), interfaces=["eth0"])],
            relays=[RelayRecord(1, "Relay A")],
            services=[ServiceRecord(1, 0x80, "Projector", parent_relay=0)],
        )
    ])


def _run(args, servers=None, side_effect=None):
    with patch("idn_discovery.cli.DiscoveryOrchestrator") as orchestrator_cls:
        orchestrator = orchestrator_cls.return_value
        if side_effect is not None:
            orchestrator.discover.side_effect = side_effect
        else:
            orchestrator.discover.return_value = servers if servers is not None else _servers()
        result = CliRunner().invoke(main, args)
    return result, orchestrator_cls


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


class TestOutput:
    def test_text_listing(self) -> None:
        result, _ = _run([])
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0] == "IDN server list"
        assert lines[2] == "01-A2B3(laser-1) at 192.168.1.20"
        assert lines[3] == "  1: Projector@Relay A"

    def test_empty_listing(self) -> None:
        result, _ = _run([], servers=ServerList([]))
        assert result.exit_code == 0
        assert result.output.splitlines() == ["IDN server list", "-" * 60]

    def test_json_output(self) -> None:
        result, _ = _run(["--json"])
        assert result.exit_code == 0
        output = json.loads(result.output)
        assert output["success"] is True
        assert output["command"] == "discover"
        assert output["message"] == "Found 1 IDN server(s)"
        assert output["data"]["servers"][0]["host_name"] == "laser-1"

    def test_report_saved(self, tmp_path) -> None:
        report_path = tmp_path / "report.json"
        result, _ = _run(["--json", "--report", str(report_path)])
        assert result.exit_code == 0
        assert json.loads(result.output)["data"]["report_path"] == str(report_path)
        assert json.loads(report_path.read_text())["summary"]["servers"] == 1

    def test_results_released_after_output(self) -> None:
        servers = _servers()
        result, _ = _run([], servers=servers)
        assert result.exit_code == 0
        assert servers.released is True


# ---------------------------------------------------------------------------
# Options and configuration
# ---------------------------------------------------------------------------


class TestOptions:
    def test_options_reach_config(self) -> None:
        result, orchestrator_cls = _run(
            ["-g", "5", "-t", "250", "--port", "17255", "--no-services", "--include-loopback"]
        )
        assert result.exit_code == 0
        config = orchestrator_cls.call_args[0][0]
        assert config.client_group == 5
        assert config.timeout == 0.25
        assert config.port == 17255
        assert config.query_services is False
        assert config.skip_loopback is False

    def test_config_file_with_override(self, tmp_path) -> None:
        path = tmp_path / "idn.yaml"
        path.write_text("discovery:\n  client_group: 2\n  timeout: 1.0\n")
        result, orchestrator_cls = _run(["--config", str(path), "-t", "100"])
        assert result.exit_code == 0
        config = orchestrator_cls.call_args[0][0]
        assert config.client_group == 2
        assert config.timeout == 0.1

    def test_invalid_group_rejected(self) -> None:
        result, orchestrator_cls = _run(["-g", "16"])
        assert result.exit_code == 1
        assert "client_group" in result.output
        orchestrator_cls.assert_not_called()

    def test_invalid_group_json(self) -> None:
        result, _ = _run(["--json", "-g", "20"])
        assert result.exit_code == 1
        output = json.loads(result.output)
        assert output["success"] is False
        assert output["message"].startswith("Invalid configuration")

    def test_nan_timeout_in_config_rejected(self, tmp_path) -> None:
        path = tmp_path / "idn.yaml"
        path.write_text("timeout: .nan\n")
        result, orchestrator_cls = _run(["--config", str(path)])
        assert result.exit_code == 1
        assert "timeout" in result.output
        orchestrator_cls.assert_not_called()

    def test_missing_config_file(self, tmp_path) -> None:
        result, _ = _run(["--config", str(tmp_path / "missing.yaml")])
        assert result.exit_code == 1
        assert "Failed to load config" in result.output

    def test_apply_overrides_keeps_unset_values(self) -> None:
        config = apply_overrides(DiscoveryConfig(client_group=3, timeout=2.0))
        assert config.client_group == 3
        assert config.timeout == 2.0
        assert config.query_services is True


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


class TestFailures:
    def test_setup_error(self) -> None:
        result, _ = _run([], side_effect=DiscoverySetupError("no interfaces", errno=19))
        assert result.exit_code == 1
        assert "Discovery failed: no interfaces" in result.output

    def test_setup_error_json(self) -> None:
        result, _ = _run(["--json"], side_effect=DiscoverySetupError("no interfaces"))
        assert result.exit_code == 1
        output = json.loads(result.output)
        assert output["success"] is False
        assert "duration_ms" in output["data"]

    def test_interrupted(self) -> None:
        result, _ = _run([], side_effect=KeyboardInterrupt())
        assert result.exit_code == 130

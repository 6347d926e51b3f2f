"""CLI entry point for IDN server discovery.

Usage:
    idn-discovery [options]
    python -m idn_discovery [options]
"""

import json
import logging
import sys
import time
from pathlib import Path
from typing import Optional

import click

from .config import DiscoveryConfig, parse_config, validate_config
from .discovery import DiscoveryOrchestrator
from .exceptions import DiscoverySetupError
from .reporting import JsonReporter, TextReporter, error_output

logger = logging.getLogger(__name__)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--config", "config_path", type=click.Path(dir_okay=False),
              help="YAML configuration file.")
@click.option("-g", "--group", "client_group", type=int,
              help="Client group 0-15 (default: 0).")
@click.option("-t", "--timeout", "timeout_ms", type=int,
              help="Collection window in milliseconds (default: 500).")
@click.option("--port", type=int, help="IDN-Hello UDP port (default: 7255).")
@click.option("--no-services", is_flag=True, help="Skip service map queries.")
@click.option("--include-loopback", is_flag=True, help="Also probe loopback interfaces.")
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON.")
@click.option("--pretty", is_flag=True, help="Pretty print JSON output.")
@click.option("--report", "report_path", type=click.Path(dir_okay=False),
              help="Also save a JSON report to this file.")
@click.option("-v", "--verbose", is_flag=True, help="Log debug details to stderr.")
def main(
    config_path: Optional[str],
    client_group: Optional[int],
    timeout_ms: Optional[int],
    port: Optional[int],
    no_services: bool,
    include_loopback: bool,
    as_json: bool,
    pretty: bool,
    report_path: Optional[str],
    verbose: bool,
):
    """Discover IDN servers on all local networks."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = parse_config(config_path) if config_path else DiscoveryConfig()
    except (FileNotFoundError, ValueError) as e:
        fail(f"Failed to load config: {e}", as_json)

    apply_overrides(
        config,
        client_group=client_group,
        timeout_ms=timeout_ms,
        port=port,
        no_services=no_services,
        include_loopback=include_loopback,
    )

    validation = validate_config(config)
    for warning in validation.warnings:
        logger.warning(f"{warning.path}: {warning.message}")
    if not validation.valid:
        errors_str = "; ".join(f"{e.path}: {e.message}" for e in validation.errors)
        fail(f"Invalid configuration: {errors_str}", as_json)

    start_time = time.time()

    try:
        servers = DiscoveryOrchestrator(config).discover()
    except DiscoverySetupError as e:
        duration_ms = int((time.time() - start_time) * 1000)
        fail(f"Discovery failed: {e}", as_json, duration_ms=duration_ms)
    except KeyboardInterrupt:
        fail("Discovery interrupted by user", as_json, exit_code=130)

    duration_ms = int((time.time() - start_time) * 1000)

    with servers:
        reporter = JsonReporter()
        saved_path = None

        if as_json or report_path:
            report = reporter.generate(servers, config, duration_ms=duration_ms)
            if report_path:
                saved_path = str(reporter.save(report, Path(report_path)))

        if as_json:
            output = reporter.generate_cli_output(report, saved_path)
            click.echo(reporter.to_json_string(output, pretty=pretty))
        else:
            for line in TextReporter().render(servers):
                click.echo(line)
            if saved_path:
                click.echo(f"Report saved: {saved_path}", err=True)


def apply_overrides(
    config: DiscoveryConfig,
    client_group: Optional[int] = None,
    timeout_ms: Optional[int] = None,
    port: Optional[int] = None,
    no_services: bool = False,
    include_loopback: bool = False,
) -> DiscoveryConfig:
    """Apply command line options on top of file/default settings."""
    if client_group is not None:
        config.client_group = client_group
    if timeout_ms is not None:
        config.timeout = timeout_ms / 1000.0
    if port is not None:
        config.port = port
    if no_services:
        config.query_services = False
    if include_loopback:
        config.skip_loopback = False
    return config


def fail(message: str, as_json: bool, exit_code: int = 1, **extra):
    """Report an error in the selected output format and exit."""
    if as_json:
        click.echo(json.dumps(error_output(message, **extra), ensure_ascii=False))
    else:
        click.echo(f"Error: {message}", err=True)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()

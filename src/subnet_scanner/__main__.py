"""CLI entry point for Subnet Scanner."""

import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import click

from .config import Config
from .console import ConsoleListener
from .discovery.coordinator import ScanCoordinator
from .discovery.update_channel import UpdateChannel
from .models.common import ScanState
from .utils.log_setup import configure_logging


@click.group()
@click.option(
    "--config-file", "-c",
    type=click.Path(exists=True, dir_okay=False, resolve_path=True),
    help="Path to a JSON configuration file.",
    envvar="SUBNET_SCANNER_CONFIG_FILE"
)
@click.option(
    "--log-level", "-l",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Override the logging level (e.g., DEBUG, INFO).",
)
@click.option(
    "--log-format",
    type=click.Choice(["console", "json"], case_sensitive=False),
    default=None,
    help="Override logging format.",
)
@click.pass_context
def cli(ctx: click.Context, config_file: Optional[str], log_level: Optional[str], log_format: Optional[str]) -> None:
    """Subnet Scanner - finds hosts with an open TCP port on an IPv4 subnet."""
    try:
        if config_file:
            cfg = Config.from_file(Path(config_file))
        else:
            cfg = Config()
    except Exception as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        sys.exit(1)

    if log_level:
        cfg.logging.level = log_level.upper()
    if log_format:
        cfg.logging.format = log_format.lower()

    ctx.ensure_object(dict)
    ctx.obj["config"] = cfg


def _endpoint_records(coordinator: ScanCoordinator) -> List[Dict[str, Any]]:
    return [
        {"host": ep.host, "port": ep.port, "name": ep.name}
        for ep in coordinator.results
    ]


@cli.command()
@click.argument("address", required=False)
@click.option("--prefix", "-p", default=None, help="CIDR prefix length (clamped to 1-30, unparsable values fall back to the configured default).")
@click.option("--port", type=click.IntRange(1, 65535), default=None, help="TCP port to probe.")
@click.option("--timeout", type=click.FloatRange(min=0, min_open=True, max=30), default=None, help="Per-probe timeout in seconds.")
@click.option("--workers", type=click.IntRange(1, 1024), default=None, help="Maximum concurrent probes.")
@click.option("--quiet", "-q", is_flag=True, help="Do not print the progress line.")
@click.option(
    "--output-file", "-o",
    type=click.Path(dir_okay=False, writable=True, resolve_path=True),
    help="Write found endpoints to this JSON file instead of stdout.",
)
@click.pass_context
def scan(
    ctx: click.Context,
    address: Optional[str],
    prefix: Optional[str],
    port: Optional[int],
    timeout: Optional[float],
    workers: Optional[int],
    quiet: bool,
    output_file: Optional[str],
) -> None:
    """Scan the subnet around ADDRESS for hosts with an open port."""
    config: Config = ctx.obj["config"]
    if port is not None:
        config.scan.port = port
    if timeout is not None:
        config.scan.probe_timeout_seconds = timeout
    if workers is not None:
        config.scan.max_workers = workers

    configure_logging(config.logging)
    target = address or config.scan.default_address
    listener = ConsoleListener(show_progress=not quiet)

    records: List[Dict[str, Any]] = []
    final_state: Optional[ScanState] = None
    write_error: Optional[OSError] = None

    async def run_scan() -> None:
        nonlocal records, final_state, write_error
        channel = UpdateChannel(drain_interval=config.scan.drain_interval_seconds)
        coordinator = ScanCoordinator(app_config=config, channel=channel)
        channel.start_consumer(listener)
        try:
            state = await coordinator.start(target, prefix)
            if state is ScanState.RUNNING:
                final_state = await coordinator.wait()
            records = _endpoint_records(coordinator)
            if output_file and final_state is not None:
                try:
                    _write_records(output_file, records)
                except OSError as e:
                    write_error = e
                else:
                    for endpoint in coordinator.results:
                        coordinator.consume_result(endpoint)
        finally:
            await coordinator.close()
            await channel.stop_consumer()

    try:
        asyncio.run(run_scan())
    except KeyboardInterrupt:
        click.echo("\nScan interrupted by user.", err=True)
        sys.exit(130)
    except Exception as e:
        click.echo(f"An unexpected error occurred during the scan: {e}", err=True)
        sys.exit(1)

    if write_error is not None:
        click.echo(f"Error writing output file {output_file}: {write_error}", err=True)
        sys.exit(1)

    if final_state is None:
        # Rejected input; the listener already printed why.
        sys.exit(2)

    if output_file:
        click.echo(f"{len(records)} endpoint(s) written to {output_file}", err=True)
    else:
        click.echo(json.dumps(records, indent=2))


def _write_records(output_file: str, records: List[Dict[str, Any]]) -> None:
    with open(output_file, "w", encoding="utf-8") as f:
        json.dump(records, f, indent=2)


@cli.command()
def version() -> None:
    """Show version information."""
    from . import __version__
    click.echo(f"Subnet Scanner v{__version__}")


@cli.command()
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Show current configuration."""
    config: Config = ctx.obj["config"]
    click.echo(config.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()

"""Entry point for the health check service."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

import uvicorn
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.table import Table

from healthcheck.config import settings
from healthcheck.errors import ConfigurationError
from healthcheck.health_check import HealthCheck, validate_check_config
from healthcheck.loader import load_check_file

console = Console()
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
)

SEVERITY_LABELS = {1: "high", 2: "medium", 3: "low"}


def render_table(health_check: HealthCheck) -> Table:
    """Rich table of the current check snapshots."""
    gtg = "[green]good to go[/green]" if health_check.is_ok() else "[red]NOT good to go[/red]"
    table = Table(title=f"Health checks — {gtg}")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Severity")
    table.add_column("Status")
    table.add_column("Output")
    table.add_column("Updated", style="dim")
    for snap in health_check.to_json():
        status = "[green]OK[/green]" if snap["ok"] else "[bold red]NOT OK[/bold red]"
        table.add_row(
            snap["id"],
            snap["name"],
            SEVERITY_LABELS.get(snap["severity"], str(snap["severity"])),
            status,
            snap["checkOutput"],
            snap["lastUpdated"],
        )
    return table


def run_server(checks_file: str) -> None:
    """Start the FastAPI server."""
    from healthcheck.api.server import create_app

    console.print(Panel(f"Serving health checks from {checks_file}", style="bold green"))
    uvicorn.run(
        create_app(checks_file=checks_file),
        host=settings.api_host,
        port=settings.api_port,
    )


async def watch(checks_file: str, refresh: float) -> None:
    """Run the checks and redraw their status until interrupted."""
    health_check = HealthCheck.from_file(checks_file)
    try:
        with Live(render_table(health_check), console=console, refresh_per_second=4) as live:
            while True:
                await asyncio.sleep(refresh)
                live.update(render_table(health_check))
    finally:
        health_check.stop()


def run_validate(checks_file: str) -> bool:
    """Validate every check in a file without starting any of them."""
    try:
        configs = load_check_file(checks_file)
    except ConfigurationError as e:
        console.print(f"[red]{e}[/red]")
        return False

    valid = True
    for index, config in enumerate(configs, start=1):
        label = config.get("id") or f"#{index}"
        try:
            validate_check_config(config)
        except ConfigurationError as e:
            valid = False
            console.print(f"[red]✗[/red] {label}: {e}")
        else:
            console.print(f"[green]✓[/green] {label} ({config.get('type')})")
    return valid


def main() -> None:
    parser = argparse.ArgumentParser(description="Health check aggregator")
    parser.add_argument(
        "--checks", default=settings.checks_file,
        help=f"YAML check file (default: {settings.checks_file})",
    )
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("serve", help="Serve /__health, /__gtg and /__about")

    watch_parser = sub.add_parser("watch", help="Run the checks and show live status")
    watch_parser.add_argument(
        "--refresh", type=float, default=settings.watch_interval,
        help="Seconds between redraws",
    )

    sub.add_parser("validate", help="Validate the check file without running it")

    args = parser.parse_args()

    if args.command == "serve":
        run_server(args.checks)
    elif args.command == "watch":
        try:
            asyncio.run(watch(args.checks, args.refresh))
        except KeyboardInterrupt:
            pass
        except ConfigurationError as e:
            console.print(f"[red]{e}[/red]")
            sys.exit(1)
    elif args.command == "validate":
        sys.exit(0 if run_validate(args.checks) else 1)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()

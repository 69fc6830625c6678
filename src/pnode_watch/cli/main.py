# Copyright 2026 The pnode-watch Authors
# SPDX-License-Identifier: Apache-2.0

"""
pnode-watch Command Line Interface.

Usage:
    pnode-watch nodes       Aggregated node list with network summary
    pnode-watch node        Version, stats and pods of one live node
    pnode-watch probe       Liveness check of a single endpoint
    pnode-watch serve       Run the HTTP API
"""

from __future__ import annotations

import asyncio
import json
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from pnode_watch.config import Settings

app = typer.Typer(
    name="pnode-watch",
    help="Aggregated view of the pNode storage network",
    no_args_is_help=True,
)

console = Console()
error_console = Console(stderr=True)

_STATUS_STYLE = {"online": "green", "warning": "yellow", "offline": "red"}


def run_async(coro):
    """Run async function in sync context."""
    return asyncio.run(coro)


# ============================================================================
# NODES COMMAND
# ============================================================================


async def _collect_nodes(settings: Settings, diagnostics: bool):
    from pnode_watch.core.aggregator import NodeAggregator
    from pnode_watch.core.rpc import RPCClient

    async with RPCClient(settings) as client:
        return await NodeAggregator(client).get_nodes(diagnostics=diagnostics)


@app.command()
def nodes(
    json_output: Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")] = False,
    diagnostics: Annotated[
        bool,
        typer.Option("--diagnostics", "-d", help="Show the per-endpoint attempt trail"),
    ] = False,
    limit: Annotated[
        int, typer.Option("--limit", "-l", help="Maximum rows in the table (0 = all)")
    ] = 25,
):
    """
    List nodes reported by the first responsive pRPC endpoint.

    Falls back to demo data when no endpoint answers.

    Example:
        pnode-watch nodes
        pnode-watch nodes --diagnostics
        pnode-watch nodes --json
    """
    from pnode_watch.core.fallback import DEMO_SOURCE, generate_demo_nodes
    from pnode_watch.core.models import NodesResult
    from pnode_watch.core.summary import (
        format_bytes,
        format_time_ago,
        format_uptime,
        network_stats,
        node_status,
        storage_distribution,
        uptime_distribution,
        version_distribution,
    )

    settings = Settings.from_env()
    result = run_async(_collect_nodes(settings, diagnostics))

    if isinstance(result, NodesResult):
        records = result.records
        source = result.source
        live = True
        trail = result.diagnostics
        errors: list[str] = []
    else:
        records = generate_demo_nodes()
        source = DEMO_SOURCE
        live = False
        trail = result.diagnostics
        errors = result.errors

    if json_output:
        output = {
            "live": live,
            "source": source,
            "count": len(records),
            "nodes": [r.to_dict() for r in records],
            "stats": network_stats(records).model_dump(),
            "versions": [v.model_dump() for v in version_distribution(records)],
            "uptime": [b.model_dump() for b in uptime_distribution(records)],
            "top_storage": [s.model_dump() for s in storage_distribution(records)],
        }
        if diagnostics or not live:
            output["diagnostics"] = trail
        if errors:
            output["errors"] = errors
        console.print_json(json.dumps(output))
        return

    if not live:
        console.print("[bold yellow]Demo mode:[/bold yellow] all pRPC endpoints unavailable\n")
        for err in errors:
            error_console.print(f"  [dim]{err}[/dim]")
        console.print()

    stats = network_stats(records)
    console.print(f"[bold]Source:[/bold] {source}")
    console.print(
        f"[green]{stats.total_nodes} node(s)[/green], {stats.active_nodes} active, "
        f"{format_bytes(stats.used_storage)} used of {format_bytes(stats.total_storage)}, "
        f"avg usage {stats.avg_storage_usage}%\n"
    )

    table = Table(show_header=True, header_style="bold")
    table.add_column("Pubkey")
    table.add_column("Address")
    table.add_column("Status")
    table.add_column("Version")
    table.add_column("Uptime", justify="right")
    table.add_column("Last Seen", justify="right")
    table.add_column("Committed", justify="right")
    table.add_column("Usage %", justify="right")
    table.add_column("Credits", justify="right")

    shown = records if limit <= 0 else records[:limit]
    for record in shown:
        status = node_status(record.last_seen_timestamp)
        table.add_row(
            record.pubkey or "-",
            record.address or "-",
            f"[{_STATUS_STYLE[status]}]{status}[/{_STATUS_STYLE[status]}]",
            record.version or "-",
            format_uptime(record.uptime),
            format_time_ago(record.last_seen_timestamp),
            format_bytes(record.storage_committed),
            f"{record.storage_usage_percent:.2f}",
            str(record.credits) if record.credits is not None else "-",
        )
    console.print(table)
    if len(shown) < len(records):
        console.print(f"[dim]... {len(records) - len(shown)} more[/dim]")

    if diagnostics and trail:
        console.print("\n[bold]Diagnostics[/bold]")
        for entry in trail:
            console.print(f"  [dim]{json.dumps(entry)}[/dim]")


# ============================================================================
# NODE COMMAND
# ============================================================================


async def _fetch_detail(settings: Settings, ip: str | None):
    from pnode_watch.core.detail import get_node_detail
    from pnode_watch.core.rpc import RPCClient

    async with RPCClient(settings) as client:
        return await get_node_detail(client, ip)


@app.command()
def node(
    ip: Annotated[str | None, typer.Option("--ip", help="Preferred node address")] = None,
    json_output: Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")] = False,
):
    """
    Show version, stats and pods of one live node.

    Example:
        pnode-watch node
        pnode-watch node --ip 173.212.203.145
    """
    from pnode_watch.core.errors import PNodeError

    settings = Settings.from_env()
    try:
        detail = run_async(_fetch_detail(settings, ip))
    except PNodeError as e:
        error_console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(1) from None

    if json_output:
        console.print_json(json.dumps(detail.to_dict()))
        return

    version = detail.version.get("version") if isinstance(detail.version, dict) else detail.version
    pods = detail.pods if isinstance(detail.pods, dict) else {}
    console.print(f"\n[bold]Node {detail.ip}[/bold] (version {version or '-'})\n")

    table = Table(show_header=True, header_style="bold")
    table.add_column("Metric")
    table.add_column("Value")
    for key, value in detail.stats.items():
        if isinstance(value, dict):
            continue
        table.add_row(key, str(value))
    console.print(table)
    console.print(f"\n[dim]Known pods: {pods.get('total_count', len(pods.get('pods') or []))}[/dim]")


# ============================================================================
# PROBE COMMAND
# ============================================================================


async def _probe(settings: Settings, address: str, timeout: float | None) -> bool:
    from pnode_watch.core.rpc import RPCClient

    async with RPCClient(settings) as client:
        return await client.probe(address, timeout=timeout)


@app.command()
def probe(
    address: Annotated[str, typer.Argument(help="Endpoint URL, host:port or bare IP")],
    timeout: Annotated[
        float | None, typer.Option("--timeout", "-t", help="Probe timeout in seconds")
    ] = None,
):
    """
    Check whether an endpoint answers get-version.

    Example:
        pnode-watch probe 173.212.203.145
        pnode-watch probe http://10.0.0.1:6000 --timeout 5
    """
    settings = Settings.from_env()
    ok = run_async(_probe(settings, address, timeout))
    if ok:
        console.print(f"[green]✓ {address} is responding[/green]")
        return
    console.print(f"[red]✗ {address} did not respond[/red]")
    raise typer.Exit(1)


# ============================================================================
# SERVE COMMAND
# ============================================================================


@app.command()
def serve(
    host: Annotated[str | None, typer.Option("--host", help="Bind address")] = None,
    port: Annotated[int | None, typer.Option("--port", "-p", help="Bind port")] = None,
):
    """Run the HTTP API (/api/pnodes, /api/pnode)."""
    from pnode_watch.server.app import run

    settings = Settings.from_env()
    overrides = {}
    if host is not None:
        overrides["host"] = host
    if port is not None:
        overrides["port"] = port
    if overrides:
        settings = settings.model_copy(update=overrides)
    run(settings)


# ============================================================================
# VERSION
# ============================================================================


def version_callback(value: bool):
    if value:
        from pnode_watch import __version__

        console.print(f"pnode-watch version {__version__}")
        raise typer.Exit()


def quiet_callback(value: bool):
    if value:
        from pnode_watch.utils.logging import silence_logging

        silence_logging()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", callback=version_callback, is_eager=True, help="Show version"),
    ] = None,
    quiet: Annotated[
        bool | None,
        typer.Option("--quiet", "-q", callback=quiet_callback, is_eager=True, help="Suppress logs"),
    ] = None,
):
    """
    pnode-watch: aggregated view of the pNode storage network.

    Polls known pRPC endpoints, merges pod credits and deduplicates peers.
    """
    from dotenv import load_dotenv

    load_dotenv()

    if not quiet:
        import logging

        from pnode_watch.utils.logging import configure_logging

        configure_logging(logging.WARNING)


if __name__ == "__main__":
    app()

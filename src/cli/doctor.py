"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from adapters.cache_writer import read_snapshot_cache
from cli.ui_components import build_probe_table, format_age, print_failure
from core.config import AppSettings, load_settings
from core.domain.errors import CacheReadError, ConfigError, SnapshotValidationError
from core.services.refresh_pipeline import probe_seeds

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console(soft_wrap=True)
_err_console = Console(stderr=True, soft_wrap=True)


def _check_cache(settings: AppSettings) -> tuple[str, str]:
    try:
        cached = read_snapshot_cache(settings.cache_path)
    except CacheReadError as exc:
        return "MISSING", str(exc)
    except SnapshotValidationError as exc:
        return "INVALID", str(exc)
    status = "OK" if cached.snapshot.node_count >= settings.min_node_count else "LOW"
    return status, f"{cached.snapshot.node_count} nodes, {format_age(cached.age_seconds())} old"


@app.command()
def run() -> None:
    """Show the effective configuration and probe every seed endpoint."""

    try:
        settings = load_settings()
    except ConfigError as exc:
        print_failure(_err_console, exc)
        raise typer.Exit(code=1) from exc

    table = Table(title="snode-cache Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    table.add_row("Seeds", "OK" if settings.seed_urls else "FAIL", f"{len(settings.seed_urls)} configured")
    table.add_row("Timeout", "OK", f"{settings.request_timeout_seconds:g}s per seed")
    table.add_row("Minimum nodes", "OK", str(settings.min_node_count))
    table.add_row("TLS verification", "DISABLED", "seed certificates are not checked against public roots")

    cache_status, cache_detail = _check_cache(settings)
    table.add_row("Cache file", cache_status, escape(f"{settings.cache_path}: {cache_detail}"))

    _console.print(table)

    probes = asyncio.run(probe_seeds(settings=settings))
    _console.print(build_probe_table(probes))

    if not any(probe.ok for probe in probes):
        _console.print("\n[red]No seed endpoint answered with a valid snapshot.[/red]")
        raise typer.Exit(code=1)

"""snode-cache command line interface.

Commands:
- `refresh`: race the seeds, rewrite the cache file, enforce the minimum count.
- `inspect`: validate the current cache file and show its age.
- `doctor run`: configuration and per-seed diagnostics.

All failures of a run end in one handler that prints a categorized message
and exits with code 1.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape

from adapters.cache_writer import read_snapshot_cache
from cli import doctor
from cli.ui_components import (
    build_cache_table,
    print_banner,
    print_failure,
    print_sample_node,
)
from core.config import load_settings
from core.domain.errors import InsufficientNodeCountError, SnodeCacheError
from core.services.refresh_pipeline import RefreshHooks, refresh_cache

app = typer.Typer(
    no_args_is_help=True,
    help="Refresh the local service node cache from the seed endpoints.",
)
app.add_typer(doctor.app, name="doctor")

_console = Console(soft_wrap=True)
_err_console = Console(stderr=True, soft_wrap=True)


def _build_hooks(*, quiet: bool) -> RefreshHooks:
    if quiet:
        return RefreshHooks()

    def seed_failed(url: str, exc: Exception) -> None:
        _console.print(f"[dim]{escape(url)} failed: {escape(str(exc))}[/dim]")

    return RefreshHooks(
        info=lambda message: _console.print(escape(message)),
        seed_started=lambda url: _console.print(f"Trying {escape(url)}..."),
        seed_succeeded=lambda url: _console.print(f"Successfully fetched from {escape(url)}"),
        seed_failed=seed_failed,
    )


@app.command()
def refresh(
    seed: Optional[List[str]] = typer.Option(
        None,
        "--seed",
        help="Seed endpoint URL (repeatable). Replaces the configured list.",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        min=0.001,
        help="Per-seed request deadline in seconds.",
    ),
    min_nodes: Optional[int] = typer.Option(
        None,
        "--min-nodes",
        min=0,
        help="Minimum number of nodes for the run to succeed.",
    ),
    cache_path: Optional[Path] = typer.Option(
        None,
        "--cache-path",
        help="Cache file to (re)write.",
    ),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print the final result."),
) -> None:
    """Fetch the active service nodes and rewrite the cache file."""

    if not quiet:
        print_banner(_console)

    try:
        settings = load_settings(
            seed_urls=list(seed) if seed else None,
            request_timeout_seconds=timeout,
            min_node_count=min_nodes,
            cache_path=cache_path,
        )
        result = asyncio.run(refresh_cache(settings=settings, hooks=_build_hooks(quiet=quiet)))
    except SnodeCacheError as exc:
        print_failure(_err_console, exc)
        raise typer.Exit(code=1) from exc

    _console.print(f"✅ Found {result.node_count} service nodes (minimum: {settings.min_node_count})")
    if not quiet:
        print_sample_node(_console, result.sample_node)


@app.command()
def inspect(
    cache_path: Optional[Path] = typer.Option(
        None,
        "--cache-path",
        help="Cache file to inspect.",
    ),
    min_nodes: Optional[int] = typer.Option(
        None,
        "--min-nodes",
        min=0,
        help="Minimum number of nodes expected in the cache.",
    ),
) -> None:
    """Validate the current cache file and show what consumers will read."""

    try:
        settings = load_settings(cache_path=cache_path, min_node_count=min_nodes)
        cached = read_snapshot_cache(settings.cache_path)
    except SnodeCacheError as exc:
        print_failure(_err_console, exc)
        raise typer.Exit(code=1) from exc

    _console.print(build_cache_table(cached, min_node_count=settings.min_node_count))
    nodes = cached.snapshot.service_node_states
    print_sample_node(_console, nodes[0] if nodes else None)

    if cached.snapshot.node_count < settings.min_node_count:
        print_failure(
            _err_console,
            InsufficientNodeCountError(
                node_count=cached.snapshot.node_count,
                min_node_count=settings.min_node_count,
            ),
        )
        raise typer.Exit(code=1)


def run() -> None:
    app()


if __name__ == "__main__":
    run()

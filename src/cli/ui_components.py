"""UI components for the CLI (Rich).

Tables and panels shared by `refresh`, `inspect` and `doctor`.
"""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from rich.align import Align
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from adapters.cache_writer import CachedSnapshot
from core.domain.errors import (
    AllSeedsFailedError,
    ConfigError,
    InsufficientNodeCountError,
    SnapshotValidationError,
    SnodeCacheError,
)
from core.domain.models import ServiceNodeRecord
from core.services.refresh_pipeline import SeedProbe


def print_banner(console: Console) -> None:
    """Print the welcome banner (skipped in quiet mode)."""

    title = Text("snode-cache", style="bold cyan")
    subtitle = Text("Service node cache refresh • seed race", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def print_sample_node(console: Console, node: ServiceNodeRecord | None) -> None:
    if node is None:
        return
    console.print("\nSample node:")
    console.print_json(data=node.model_dump(mode="json"))


def format_age(seconds: float) -> str:
    """Compact human age, e.g. `3h 12m`."""

    total = int(seconds)
    days, rem = divmod(total, 86_400)
    hours, rem = divmod(rem, 3_600)
    minutes, secs = divmod(rem, 60)
    if days:
        return f"{days}d {hours}h"
    if hours:
        return f"{hours}h {minutes}m"
    if minutes:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def build_failures_table(failures: Sequence[tuple[str, Exception]]) -> Table:
    """One row per failed seed."""

    table = Table(title="Seed failures")
    table.add_column("Seed", style="cyan", no_wrap=True)
    table.add_column("Kind", style="yellow")
    table.add_column("Error", style="red")
    for url, exc in failures:
        table.add_row(escape(url), type(exc).__name__, escape(str(exc)))
    return table


def build_cache_table(cached: CachedSnapshot, *, min_node_count: int, now: datetime | None = None) -> Table:
    table = Table(title="Service node cache")
    table.add_column("Field", style="bright_green", no_wrap=True)
    table.add_column("Value", style="white")
    table.add_row("Path", escape(str(cached.path)))
    table.add_row("Nodes", f"{cached.snapshot.node_count} (minimum: {min_node_count})")
    table.add_row("Height", str(cached.snapshot.height))
    table.add_row("Modified", cached.modified_at.isoformat(timespec="seconds"))
    table.add_row("Age", format_age(cached.age_seconds(now)))
    return table


def build_probe_table(probes: Sequence[SeedProbe]) -> Table:
    table = Table(title="Seed endpoints")
    table.add_column("Seed", style="cyan", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Time", style="dim")
    table.add_column("Details", style="dim")
    for probe in probes:
        if probe.snapshot is not None:
            details = f"{probe.snapshot.node_count} nodes @ height {probe.snapshot.height}"
            status = "OK"
        else:
            details = f"{type(probe.error).__name__}: {probe.error}"
            status = "FAIL"
        table.add_row(escape(probe.seed_url), status, f"{probe.elapsed_seconds:.2f}s", escape(details))
    return table


def print_failure(console: Console, exc: SnodeCacheError) -> None:
    """Categorized one-line report for any failed run."""

    if isinstance(exc, ConfigError):
        console.print(f"❌ Configuration error: {escape(str(exc))}")
    elif isinstance(exc, SnapshotValidationError):
        console.print(f"❌ Validation error: {escape(str(exc))}")
    elif isinstance(exc, AllSeedsFailedError):
        console.print(f"❌ All seeds failed ({len(exc.failures)} tried)")
        if exc.failures:
            console.print(build_failures_table(exc.failures))
    elif isinstance(exc, InsufficientNodeCountError):
        console.print(f"❌ Only {exc.node_count} nodes found (minimum: {exc.min_node_count})")
    else:
        console.print(f"❌ Error: {escape(str(exc))}")

"""Cache refresh orchestration.

fetch -> write -> minimum-count check, as one linear pipeline. The CLI
delegates the whole flow here and only deals with presentation; progress is
reported through `RefreshHooks` so nothing in this module prints.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

import httpx

from adapters.cache_writer import write_snapshot_cache
from adapters.http_client import build_async_client
from adapters.seed_client import SeedClient
from core.config import AppSettings
from core.domain.errors import InsufficientNodeCountError, SeedError, SeedTimeoutError
from core.domain.models import ServiceNodeRecord, SnapshotResult
from core.services.seed_race import RaceHooks, race_seeds


@dataclass
class RefreshHooks:
    """Optional callbacks for UI layers (progress, warnings)."""

    info: Callable[[str], None] | None = None
    seed_started: Callable[[str], None] | None = None
    seed_succeeded: Callable[[str], None] | None = None
    seed_failed: Callable[[str, Exception], None] | None = None

    def race_hooks(self) -> RaceHooks:
        return RaceHooks(
            seed_started=self.seed_started,
            seed_succeeded=self.seed_succeeded,
            seed_failed=self.seed_failed,
        )


@dataclass(frozen=True)
class RefreshResult:
    """Output of a successful refresh."""

    snapshot: SnapshotResult
    seed_url: str
    cache_path: Path
    node_count: int

    @property
    def sample_node(self) -> ServiceNodeRecord | None:
        nodes = self.snapshot.service_node_states
        return nodes[0] if nodes else None


async def fetch_snapshot(
    *,
    settings: AppSettings,
    hooks: RefreshHooks | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> tuple[str, SnapshotResult]:
    """Race the configured seeds and return `(winning_url, snapshot)`."""

    hooks = hooks or RefreshHooks()
    async with build_async_client(settings, transport=transport) as client:
        source = SeedClient(client, timeout_seconds=settings.request_timeout_seconds)
        outcome = await race_seeds(
            settings.seed_urls,
            source,
            timeout_seconds=settings.request_timeout_seconds,
            hooks=hooks.race_hooks(),
        )
    return outcome.seed_url, outcome.snapshot


async def refresh_cache(
    *,
    settings: AppSettings,
    hooks: RefreshHooks | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> RefreshResult:
    """Refresh the service node cache file.

    The file is written before the minimum-count check, so a run that ends
    in `InsufficientNodeCountError` still leaves the smaller snapshot on disk.
    """

    hooks = hooks or RefreshHooks()
    if hooks.info:
        hooks.info("Fetching fresh service node data...")

    seed_url, snapshot = await fetch_snapshot(settings=settings, hooks=hooks, transport=transport)

    node_count = write_snapshot_cache(snapshot=snapshot, cache_path=settings.cache_path)
    if hooks.info:
        hooks.info(f"Cached {node_count} nodes to {settings.cache_path}")

    if node_count < settings.min_node_count:
        raise InsufficientNodeCountError(node_count=node_count, min_node_count=settings.min_node_count)

    return RefreshResult(
        snapshot=snapshot,
        seed_url=seed_url,
        cache_path=settings.cache_path,
        node_count=node_count,
    )


@dataclass(frozen=True)
class SeedProbe:
    """Independent health check of one seed endpoint."""

    seed_url: str
    elapsed_seconds: float
    snapshot: SnapshotResult | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.snapshot is not None


async def probe_seeds(
    *,
    settings: AppSettings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[SeedProbe]:
    """Query every seed to completion (no race) and report each outcome in seed order."""

    async with build_async_client(settings, transport=transport) as client:
        source = SeedClient(client, timeout_seconds=settings.request_timeout_seconds)

        async def probe(url: str) -> SeedProbe:
            started = time.perf_counter()
            try:
                snapshot = await asyncio.wait_for(
                    source.fetch_snapshot(url),
                    timeout=settings.request_timeout_seconds,
                )
            except asyncio.TimeoutError:
                error = SeedTimeoutError(seed_url=url, timeout_seconds=settings.request_timeout_seconds)
                return SeedProbe(seed_url=url, elapsed_seconds=time.perf_counter() - started, error=error)
            except SeedError as exc:
                return SeedProbe(seed_url=url, elapsed_seconds=time.perf_counter() - started, error=exc)
            return SeedProbe(seed_url=url, elapsed_seconds=time.perf_counter() - started, snapshot=snapshot)

        return list(await asyncio.gather(*(probe(url) for url in settings.seed_urls)))

"""Race the seed endpoints for the first usable snapshot.

Every seed gets its own task and its own deadline. The first task that
returns a validated snapshot wins; failures and timeouts simply drop out of
the race. Once a winner is known, the remaining tasks are cancelled.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Callable, Sequence

from core.domain.errors import AllSeedsFailedError, EmptyResultError, SeedError, SeedTimeoutError
from core.domain.models import SnapshotResult
from core.interfaces.seed_source import SeedSource


@dataclass
class RaceHooks:
    """Optional callbacks for UI layers (progress, failures)."""

    seed_started: Callable[[str], None] | None = None
    seed_succeeded: Callable[[str], None] | None = None
    seed_failed: Callable[[str, Exception], None] | None = None


@dataclass(frozen=True)
class RaceOutcome:
    """Winning snapshot and where it came from."""

    seed_url: str
    snapshot: SnapshotResult
    failures: list[tuple[str, Exception]] = field(default_factory=list)


async def _attempt(source: SeedSource, seed_url: str, timeout_seconds: float) -> SnapshotResult:
    try:
        return await asyncio.wait_for(source.fetch_snapshot(seed_url), timeout=timeout_seconds)
    except asyncio.TimeoutError as exc:
        raise SeedTimeoutError(seed_url=seed_url, timeout_seconds=timeout_seconds) from exc


async def _cancel_pending(tasks: Sequence[asyncio.Task[SnapshotResult]]) -> None:
    pending = [task for task in tasks if not task.done()]
    for task in pending:
        task.cancel()
    # Losers that finish anyway are discarded.
    await asyncio.gather(*pending, return_exceptions=True)


async def race_seeds(
    seed_urls: Sequence[str],
    source: SeedSource,
    *,
    timeout_seconds: float,
    hooks: RaceHooks | None = None,
) -> RaceOutcome:
    """Return the first snapshot any seed delivers.

    Raises `AllSeedsFailedError` when every seed fails or times out, and
    `EmptyResultError` when the winner has no usable node.
    """

    hooks = hooks or RaceHooks()
    urls = list(seed_urls)
    if not urls:
        raise AllSeedsFailedError([])

    tasks: list[asyncio.Task[SnapshotResult]] = []
    for url in urls:
        if hooks.seed_started:
            hooks.seed_started(url)
        tasks.append(asyncio.create_task(_attempt(source, url, timeout_seconds)))
    url_by_task = dict(zip(tasks, urls))

    failures: dict[asyncio.Task[SnapshotResult], Exception] = {}
    winner: tuple[str, SnapshotResult] | None = None
    try:
        pending: set[asyncio.Task[SnapshotResult]] = set(tasks)
        while pending and winner is None:
            done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
            # Tasks finishing together are considered in seed order.
            for task in sorted(done, key=tasks.index):
                url = url_by_task[task]
                exc = task.exception()
                if exc is None:
                    winner = (url, task.result())
                    break
                if not isinstance(exc, Exception):
                    raise exc
                if not isinstance(exc, SeedError):
                    # Unexpected bugs in a source count as a failed seed too.
                    exc = SeedError(f"{type(exc).__name__}: {exc}", seed_url=url)
                failures[task] = exc
                if hooks.seed_failed:
                    hooks.seed_failed(url, exc)
    finally:
        await _cancel_pending(tasks)

    ordered_failures = [(url, failures[task]) for task, url in zip(tasks, urls) if task in failures]
    if winner is None:
        raise AllSeedsFailedError(ordered_failures)

    seed_url, snapshot = winner
    if hooks.seed_succeeded:
        hooks.seed_succeeded(seed_url)
    if not snapshot.service_node_states:
        raise EmptyResultError(seed_url=seed_url)
    return RaceOutcome(seed_url=seed_url, snapshot=snapshot, failures=ordered_failures)

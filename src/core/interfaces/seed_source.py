"""Contract for seed sources.

`Protocol` keeps the race independent of the HTTP adapter, so tests can race
plain coroutines instead of real endpoints.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.models import SnapshotResult


@runtime_checkable
class SeedSource(Protocol):
    """Minimal contract for fetching a snapshot from one seed endpoint.

    Design rules:
    - `fetch_snapshot` is async because it performs network I/O.
    - It returns a validated `SnapshotResult` or raises a `SeedError`.
    """

    async def fetch_snapshot(self, seed_url: str) -> SnapshotResult:
        """Query `seed_url` and return its validated snapshot."""

        ...

"""Failure taxonomy of a cache refresh.

Per-seed errors (`SeedError` subclasses) stay inside the seed race; only the
fatal ones below reach the CLI, which maps them to an exit code.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Sequence


class SnodeCacheError(Exception):
    """Base class for every error raised by snode-cache."""


class SeedError(SnodeCacheError):
    """A single seed endpoint failed; the race goes on without it."""

    def __init__(self, message: str, *, seed_url: str | None = None) -> None:
        super().__init__(message)
        self.seed_url = seed_url


class SeedTransportError(SeedError):
    """Connection failure or non-2xx HTTP status."""


class SeedTimeoutError(SeedError):
    """The seed did not answer before its deadline."""

    def __init__(self, *, seed_url: str, timeout_seconds: float) -> None:
        super().__init__(
            f"timed out after {timeout_seconds:g}s",
            seed_url=seed_url,
        )
        self.timeout_seconds = timeout_seconds


class SnapshotValidationError(SeedError):
    """Payload does not match the expected snapshot shape.

    `location` is the dotted path of the first mismatch
    (e.g. `result.service_node_states.3.pubkey_ed25519`).
    """

    def __init__(
        self,
        message: str,
        *,
        location: str = "",
        errors: Sequence[dict[str, Any]] = (),
        seed_url: str | None = None,
    ) -> None:
        super().__init__(message, seed_url=seed_url)
        self.location = location
        self.errors = list(errors)


class AllSeedsFailedError(SnodeCacheError):
    """No seed endpoint produced a usable response."""

    def __init__(self, failures: Sequence[tuple[str, Exception]]) -> None:
        self.failures = list(failures)
        if self.failures:
            details = "; ".join(f"{url}: {exc}" for url, exc in self.failures)
            message = f"All seeds failed ({details})"
        else:
            message = "All seeds failed (no seed endpoints configured)"
        super().__init__(message)


class EmptyResultError(SnodeCacheError):
    """The winning seed returned no usable nodes."""

    def __init__(self, *, seed_url: str) -> None:
        super().__init__(f"No valid nodes found (from {seed_url})")
        self.seed_url = seed_url


class InsufficientNodeCountError(SnodeCacheError):
    """The cache was written but holds fewer nodes than required."""

    def __init__(self, *, node_count: int, min_node_count: int) -> None:
        super().__init__(f"Only {node_count} nodes found (minimum: {min_node_count})")
        self.node_count = node_count
        self.min_node_count = min_node_count


class CacheWriteError(SnodeCacheError):
    """Deleting or writing the cache file failed."""

    def __init__(self, message: str, *, path: Path) -> None:
        super().__init__(message)
        self.path = path


class CacheReadError(SnodeCacheError):
    """The cache file is missing or unreadable."""

    def __init__(self, message: str, *, path: Path) -> None:
        super().__init__(message)
        self.path = path


class ConfigError(SnodeCacheError):
    """A setting from the environment, `.env` or the command line is invalid."""

    def __init__(self, message: str, *, field: str = "") -> None:
        super().__init__(message)
        self.field = field

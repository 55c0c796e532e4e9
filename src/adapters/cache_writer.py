"""Service node cache file (JSON).

The file mirrors the validated snapshot: `service_node_states` first,
`height` second, pretty-printed. Downstream consumers judge the snapshot's
age from the file timestamps, so each write deletes the old file first.
No temp-file-then-rename: a crash mid-write may leave a truncated file.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from core.domain.errors import CacheReadError, CacheWriteError, SnapshotValidationError
from core.domain.models import SnapshotResult
from core.services.schema_validator import parse_snapshot


@dataclass(frozen=True)
class CachedSnapshot:
    """A cache file as found on disk."""

    snapshot: SnapshotResult
    path: Path
    modified_at: datetime

    def age_seconds(self, now: datetime | None = None) -> float:
        now = now or datetime.now(timezone.utc)
        return max((now - self.modified_at).total_seconds(), 0.0)


def serialize_snapshot(snapshot: SnapshotResult) -> str:
    payload = snapshot.model_dump(mode="json")
    return json.dumps(payload, ensure_ascii=False, indent=2) + "\n"


def write_snapshot_cache(*, snapshot: SnapshotResult, cache_path: Path) -> int:
    """Replace `cache_path` with `snapshot` and return the number of nodes written."""

    try:
        cache_path.parent.mkdir(parents=True, exist_ok=True)
        cache_path.unlink(missing_ok=True)
    except OSError as exc:
        raise CacheWriteError(f"Could not remove {cache_path}: {exc}", path=cache_path) from exc

    try:
        cache_path.write_text(serialize_snapshot(snapshot), encoding="utf-8")
    except OSError as exc:
        raise CacheWriteError(f"Could not write {cache_path}: {exc}", path=cache_path) from exc

    return snapshot.node_count


def read_snapshot_cache(cache_path: Path) -> CachedSnapshot:
    """Load and validate an existing cache file."""

    try:
        raw = cache_path.read_text(encoding="utf-8")
        modified_at = datetime.fromtimestamp(cache_path.stat().st_mtime, tz=timezone.utc)
    except FileNotFoundError as exc:
        raise CacheReadError(f"No cache file at {cache_path}", path=cache_path) from exc
    except OSError as exc:
        raise CacheReadError(f"Could not read {cache_path}: {exc}", path=cache_path) from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise SnapshotValidationError(f"{cache_path} is not valid JSON: {exc}") from exc

    return CachedSnapshot(snapshot=parse_snapshot(data), path=cache_path, modified_at=modified_at)

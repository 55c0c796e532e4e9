"""Schema validation for seed payloads and cache files.

Pure functions: decoded JSON in, `SnapshotResult` out, or a
`SnapshotValidationError` naming the first field that did not match.
A single malformed node rejects the whole payload; nodes whose IP is empty
or the `0.0.0.0` sentinel are filtered out afterwards instead.
"""

from __future__ import annotations

from typing import Iterable

from pydantic import BaseModel, ValidationError

from core.domain.errors import SnapshotValidationError
from core.domain.models import SeedResponse, SnapshotResult, filter_usable_nodes


def _format_location(loc: Iterable[object]) -> str:
    return ".".join(str(part) for part in loc) or "<root>"


def _validate(model: type[BaseModel], payload: object, *, seed_url: str | None) -> BaseModel:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        errors = exc.errors(include_url=False)
        first = errors[0]
        location = _format_location(first.get("loc", ()))
        raise SnapshotValidationError(
            f"{location}: {first.get('msg', 'invalid value')}",
            location=location,
            errors=errors,
            seed_url=seed_url,
        ) from exc


def parse_seed_response(payload: object, *, seed_url: str | None = None) -> SnapshotResult:
    """Validate a `get_service_nodes` response and unwrap its `result`."""

    response = _validate(SeedResponse, payload, seed_url=seed_url)
    assert isinstance(response, SeedResponse)
    return response.result


def parse_snapshot(payload: object) -> SnapshotResult:
    """Validate the unwrapped snapshot shape stored in the cache file."""

    snapshot = _validate(SnapshotResult, payload, seed_url=None)
    assert isinstance(snapshot, SnapshotResult)
    return snapshot


__all__ = ["filter_usable_nodes", "parse_seed_response", "parse_snapshot"]

"""Seed endpoint client: one `get_service_nodes` call per seed.

Maps every way a single seed can fail onto the `SeedError` family:
- `httpx.TimeoutException` -> `SeedTimeoutError`
- other transport errors, non-2xx status -> `SeedTransportError`
- non-JSON body, schema mismatch -> `SnapshotValidationError`
"""

from __future__ import annotations

from typing import Any

import httpx

from core.domain.errors import SeedTimeoutError, SeedTransportError, SnapshotValidationError
from core.domain.models import SnapshotResult
from core.interfaces.seed_source import SeedSource
from core.services.schema_validator import parse_seed_response

GET_SERVICE_NODES_REQUEST: dict[str, Any] = {
    "method": "get_service_nodes",
    "params": {
        "active_only": True,
        "fields": {
            "public_ip": True,
            "storage_port": True,
            "pubkey_ed25519": True,
            "pubkey_x25519": True,
            "requested_unlock_height": True,
            "height": True,
        },
    },
}


class SeedClient(SeedSource):
    """Fetches and validates service node snapshots over JSON-RPC."""

    def __init__(self, client: httpx.AsyncClient, *, timeout_seconds: float) -> None:
        self._client = client
        self._timeout_seconds = timeout_seconds

    async def fetch_snapshot(self, seed_url: str) -> SnapshotResult:
        try:
            response = await self._client.post(seed_url, json=GET_SERVICE_NODES_REQUEST)
        except httpx.TimeoutException as exc:
            raise SeedTimeoutError(seed_url=seed_url, timeout_seconds=self._timeout_seconds) from exc
        except httpx.HTTPError as exc:
            raise SeedTransportError(
                f"{type(exc).__name__}: {exc}" if str(exc) else type(exc).__name__,
                seed_url=seed_url,
            ) from exc

        if not response.is_success:
            raise SeedTransportError(f"HTTP error! status: {response.status_code}", seed_url=seed_url)

        try:
            payload = response.json()
        except ValueError as exc:
            raise SnapshotValidationError(
                "response body is not valid JSON",
                seed_url=seed_url,
            ) from exc

        return parse_seed_response(payload, seed_url=seed_url)

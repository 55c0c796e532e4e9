"""httpx wrapper for the seed endpoints.

Standardizes timeout, headers and TLS policy for every seed request, and
accepts a custom transport so tests can plug in `httpx.MockTransport`.
"""

from __future__ import annotations

import httpx

from core.config import AppSettings


def build_async_client(
    settings: AppSettings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create the `httpx.AsyncClient` shared by all racers of one run.

    TLS verification is disabled on purpose: seed endpoints serve
    certificates that are not required to chain to a public root, and the
    payload is only trusted after schema validation.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Content-Type": "application/json",
        "Accept": "application/json",
    }
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.request_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        verify=False,
        transport=transport,
    )

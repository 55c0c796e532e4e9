"""
Unit tests for the refresh pipeline (fetch -> write -> count check).
"""

import asyncio
import json

import httpx
import pytest

from core.config import AppSettings
from core.domain.errors import (
    AllSeedsFailedError,
    CacheWriteError,
    EmptyResultError,
    InsufficientNodeCountError,
    SeedTimeoutError,
    SnapshotValidationError,
)
from core.domain.models import SENTINEL_IP
from core.services.refresh_pipeline import RefreshHooks, probe_seeds, refresh_cache


def routed_transport(routes):
    """MockTransport answering per URL with `(delay_seconds, response_or_exception)`."""

    async def handler(request):
        delay, outcome = routes[str(request.url)]
        await asyncio.sleep(delay)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    return httpx.MockTransport(handler)


def make_settings(seeds, cache_file, **overrides):
    values = {"seed_urls": seeds, "cache_path": cache_file, "request_timeout_seconds": 2.0}
    values.update(overrides)
    return AppSettings(**values)


class TestRefreshCache:
    """Tests for refresh_cache."""

    def test_success(self, seeds, cache_file, nodes_factory, payload_factory):
        seed_1, seed_2, seed_3 = seeds
        transport = routed_transport(
            {
                seed_1: (1.0, httpx.Response(200, json=payload_factory(nodes_factory(30), height=1))),
                seed_2: (0.0, httpx.Response(200, json=payload_factory(nodes_factory(25), height=12345))),
                seed_3: (1.0, httpx.Response(200, json=payload_factory(nodes_factory(30), height=3))),
            }
        )
        messages = []
        hooks = RefreshHooks(info=messages.append)

        result = asyncio.run(
            refresh_cache(settings=make_settings(seeds, cache_file), hooks=hooks, transport=transport)
        )

        assert result.seed_url == seed_2
        assert result.node_count == 25
        assert result.cache_path == cache_file
        assert result.sample_node.storage_port == 22001
        assert json.loads(cache_file.read_text(encoding="utf-8"))["height"] == 12345
        assert messages == [
            "Fetching fresh service node data...",
            f"Cached 25 nodes to {cache_file}",
        ]

    def test_below_minimum_still_writes_cache(self, seeds, cache_file, nodes_factory, payload_factory):
        transport = routed_transport(
            {url: (0.0, httpx.Response(200, json=payload_factory(nodes_factory(15)))) for url in seeds}
        )

        with pytest.raises(InsufficientNodeCountError) as exc_info:
            asyncio.run(refresh_cache(settings=make_settings(seeds, cache_file), transport=transport))

        assert exc_info.value.node_count == 15
        assert exc_info.value.min_node_count == 20
        assert str(exc_info.value) == "Only 15 nodes found (minimum: 20)"
        assert len(json.loads(cache_file.read_text(encoding="utf-8"))["service_node_states"]) == 15

    def test_custom_minimum(self, seeds, cache_file, nodes_factory, payload_factory):
        transport = routed_transport(
            {url: (0.0, httpx.Response(200, json=payload_factory(nodes_factory(3)))) for url in seeds}
        )

        result = asyncio.run(
            refresh_cache(settings=make_settings(seeds, cache_file, min_node_count=3), transport=transport)
        )

        assert result.node_count == 3

    def test_all_seeds_fail_leaves_previous_cache_untouched(self, seeds, cache_file):
        cache_file.write_text('{"previous": true}', encoding="utf-8")
        transport = routed_transport({url: (0.0, httpx.Response(502)) for url in seeds})

        with pytest.raises(AllSeedsFailedError):
            asyncio.run(refresh_cache(settings=make_settings(seeds, cache_file), transport=transport))

        assert cache_file.read_text(encoding="utf-8") == '{"previous": true}'

    def test_empty_result_writes_nothing(self, seeds, cache_file, node_factory, payload_factory):
        empty = payload_factory([node_factory(1, public_ip=SENTINEL_IP)])
        transport = routed_transport({url: (0.0, httpx.Response(200, json=empty)) for url in seeds})

        with pytest.raises(EmptyResultError):
            asyncio.run(refresh_cache(settings=make_settings(seeds, cache_file), transport=transport))

        assert not cache_file.exists()

    def test_write_failure(self, seeds, tmp_path, nodes_factory, payload_factory):
        occupied = tmp_path / "occupied"
        occupied.mkdir()
        transport = routed_transport(
            {url: (0.0, httpx.Response(200, json=payload_factory(nodes_factory(25)))) for url in seeds}
        )

        with pytest.raises(CacheWriteError):
            asyncio.run(refresh_cache(settings=make_settings(seeds, occupied), transport=transport))


class TestProbeSeeds:
    """Tests for probe_seeds."""

    def test_reports_every_seed_in_order(self, seeds, node_factory, nodes_factory, payload_factory):
        seed_1, seed_2, seed_3 = seeds
        broken = node_factory(1)
        del broken["storage_port"]
        transport = routed_transport(
            {
                seed_1: (0.05, httpx.Response(200, json=payload_factory(nodes_factory(25), height=7))),
                seed_2: (0.0, httpx.Response(200, json=payload_factory([broken]))),
                seed_3: (5.0, httpx.Response(200, json=payload_factory(nodes_factory(25)))),
            }
        )
        settings = AppSettings(seed_urls=seeds, request_timeout_seconds=0.2)

        probes = asyncio.run(probe_seeds(settings=settings, transport=transport))

        assert [probe.seed_url for probe in probes] == seeds
        assert probes[0].ok
        assert probes[0].snapshot.height == 7
        assert not probes[1].ok
        assert isinstance(probes[1].error, SnapshotValidationError)
        assert isinstance(probes[2].error, SeedTimeoutError)
        assert all(probe.elapsed_seconds >= 0 for probe in probes)

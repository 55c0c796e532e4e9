"""
Shared test fixtures and helpers for pytest.
"""

import sys
from pathlib import Path
from typing import Any, Callable, Dict, List

import pytest

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


SEED_1 = "https://seed1.test/json_rpc"
SEED_2 = "https://seed2.test/json_rpc"
SEED_3 = "https://seed3.test/json_rpc"
SEEDS = [SEED_1, SEED_2, SEED_3]


def make_node(index: int, **overrides: Any) -> Dict[str, Any]:
    """Build one well-formed node as a seed would return it."""
    node = {
        "public_ip": f"10.0.{index // 256}.{index % 256}",
        "storage_port": 22000 + index,
        "pubkey_ed25519": f"{index:064x}",
        "pubkey_x25519": f"{index + 1:064x}",
        "requested_unlock_height": 0,
    }
    node.update(overrides)
    return node


def make_payload(nodes: List[Dict[str, Any]], height: int = 12345) -> Dict[str, Any]:
    """Wrap nodes in the get_service_nodes JSON-RPC envelope."""
    return {"result": {"service_node_states": nodes, "height": height}}


def make_nodes(count: int) -> List[Dict[str, Any]]:
    return [make_node(i) for i in range(1, count + 1)]


@pytest.fixture
def node_factory() -> Callable[..., Dict[str, Any]]:
    return make_node


@pytest.fixture
def payload_factory() -> Callable[..., Dict[str, Any]]:
    return make_payload


@pytest.fixture
def valid_payload() -> Dict[str, Any]:
    return make_payload(make_nodes(25))


@pytest.fixture
def cache_file(tmp_path: Path) -> Path:
    return tmp_path / "service-nodes-cache.json"


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep real environment variables and .env files out of AppSettings."""
    for name in (
        "SNODE_CACHE_SEED_URLS",
        "SNODE_CACHE_REQUEST_TIMEOUT_SECONDS",
        "SNODE_CACHE_MIN_NODE_COUNT",
        "SNODE_CACHE_CACHE_PATH",
        "SNODE_CACHE_USER_AGENT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)

@pytest.fixture
def seeds() -> List[str]:
    return list(SEEDS)


@pytest.fixture
def nodes_factory() -> Callable[[int], List[Dict[str, Any]]]:
    return make_nodes

"""Domain models (Pydantic v2).

These models describe *what* a seed endpoint returns and what ends up in the
cache file, not *how* it is fetched:

- `ServiceNodeRecord`: one service node as reported by a seed.
- `SnapshotResult`: the node list at a given blockchain height (also the
  exact shape persisted to the cache file).
- `SeedResponse`: the JSON-RPC envelope around a `SnapshotResult`.

Types are strict: a seed answering `"22021"` for a port is malformed, not
something to coerce.
"""

from __future__ import annotations

from typing import Iterable

from pydantic import BaseModel, Field, StrictInt, StrictStr, field_validator
from pydantic.config import ConfigDict

SENTINEL_IP = "0.0.0.0"


def is_usable_ip(public_ip: str) -> bool:
    """A node is reachable only with a non-empty, non-sentinel IP."""

    return bool(public_ip) and public_ip != SENTINEL_IP


def filter_usable_nodes(nodes: Iterable[ServiceNodeRecord]) -> list[ServiceNodeRecord]:
    """Drop nodes without a usable IP, keeping order and duplicates."""

    return [node for node in nodes if is_usable_ip(node.public_ip)]


class ServiceNodeRecord(BaseModel):
    """A single service node entry."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    public_ip: StrictStr = Field(
        ...,
        description="Public IPv4 address of the node ('0.0.0.0' when unassigned).",
    )
    storage_port: StrictInt = Field(
        ...,
        description="Port of the node's storage server.",
    )
    pubkey_ed25519: StrictStr = Field(
        ...,
        description="Ed25519 public key (hex).",
    )
    pubkey_x25519: StrictStr = Field(
        ...,
        description="X25519 public key (hex).",
    )
    requested_unlock_height: StrictInt = Field(
        ...,
        description="Height at which the node asked to unlock its stake (0 if none).",
    )


class SnapshotResult(BaseModel):
    """Active service nodes observed at a given blockchain height.

    The node list keeps the order the seed answered with and is not
    deduplicated. Nodes without a usable IP are dropped once the whole list
    has passed structural validation.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    service_node_states: list[ServiceNodeRecord] = Field(
        ...,
        description="Usable nodes, in seed order.",
    )
    height: StrictInt = Field(
        ...,
        description="Blockchain height of the snapshot.",
    )

    @field_validator("service_node_states", mode="after")
    @classmethod
    def _drop_unusable_nodes(cls, nodes: list[ServiceNodeRecord]) -> list[ServiceNodeRecord]:
        return filter_usable_nodes(nodes)

    @property
    def node_count(self) -> int:
        return len(self.service_node_states)


class SeedResponse(BaseModel):
    """JSON-RPC envelope returned by `get_service_nodes`."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    result: SnapshotResult

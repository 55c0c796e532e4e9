"""Core configuration.

- Centralizes environment variables (pydantic-settings) without leaking into the CLI.
- One frozen settings object is built at start-up and passed explicitly to the
  pipeline; CLI overrides are applied when it is built, never afterwards.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict, SettingsError

from core.domain.errors import ConfigError

DEFAULT_SEED_URLS: tuple[str, ...] = (
    "https://seed1.getsession.org/json_rpc",
    "https://seed2.getsession.org/json_rpc",
    "https://seed3.getsession.org/json_rpc",
)

DEFAULT_CACHE_FILE = Path("./service-nodes-cache.json")


class AppSettings(BaseSettings):
    """Central application settings.

    Every value can be overridden with a `SNODE_CACHE_*` environment variable
    (lists as JSON, e.g. `SNODE_CACHE_SEED_URLS='["https://..."]'`).
    """

    model_config = SettingsConfigDict(
        env_prefix="SNODE_CACHE_",
        extra="ignore",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        frozen=True,
    )

    seed_urls: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SEED_URLS),
        description="Seed endpoints raced for the service node list.",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Deadline for each seed request (seconds).",
    )
    min_node_count: int = Field(
        default=20,
        ge=0,
        description="Minimum number of usable nodes for a run to succeed.",
    )
    cache_path: Path = Field(
        default=DEFAULT_CACHE_FILE,
        description="Where the service node cache is written.",
    )
    user_agent: str = Field(
        default="snode-cache/0.1",
        min_length=1,
        description="User-Agent sent to the seed endpoints.",
    )


def load_settings(**overrides: Any) -> AppSettings:
    """Build `AppSettings`, with non-None `overrides` taking precedence over the environment.

    Invalid values raise `ConfigError` naming the first offending field.
    """

    values = {key: value for key, value in overrides.items() if value is not None}
    try:
        return AppSettings(**values)
    except ValidationError as exc:
        first = exc.errors(include_url=False)[0]
        field = ".".join(str(part) for part in first.get("loc", ()))
        message = first.get("msg", "invalid value")
        raise ConfigError(f"Invalid setting {field or '<root>'}: {message}", field=field) from exc
    except SettingsError as exc:
        raise ConfigError(f"Invalid setting: {exc}") from exc

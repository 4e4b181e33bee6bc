"""
Bridge configuration.

Parses the [bridge] section from holorea.toml and applies environment
overrides. The resulting BridgeConfig is passed explicitly into registry,
dispatcher and app construction; nothing here is cached at module level.

Example holorea.toml:

    [bridge]
    conductor_uri = "http://127.0.0.1:4000"
    timeout = 10

    [bridge.modules]
    agent = ["uhC0k..."]
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from holorea_graphql.errors import ConfigurationError

DEFAULT_CONFIG_FILE = "holorea.toml"


class BridgeConfig(BaseModel):
    """Static configuration for one conductor connection."""

    model_config = ConfigDict(frozen=True)

    conductor_uri: str = Field(description="Conductor endpoint the modules are hosted on")
    modules: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Capability name -> serialized module addresses, primary first",
    )
    required_modules: list[str] = Field(
        default_factory=lambda: ["agent"],
        description="Capabilities that must be configured before serving",
    )
    timeout: float = Field(default=30.0, gt=0, description="Per-call timeout in seconds")
    graphql_path: str = "/graphql"
    enable_graphiql: bool = True
    log_level: str = "INFO"
    log_dir: Path | None = None

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()


def load_config(path: Path | str | None = None, **overrides: Any) -> BridgeConfig:
    """
    Load bridge configuration.

    Resolution order (later wins):
    1. [bridge] table of the TOML file (path, $HOLOREA_CONFIG or ./holorea.toml)
    2. Environment: HOLOREA_CONDUCTOR_URI, HOLOREA_TIMEOUT, HOLOREA_LOG_LEVEL
    3. Keyword overrides

    Raises:
        ConfigurationError: file unreadable or values invalid
    """
    config_path = Path(path or os.environ.get("HOLOREA_CONFIG") or DEFAULT_CONFIG_FILE)

    data: dict[str, Any] = {}
    if config_path.exists():
        try:
            with config_path.open("rb") as f:
                data = dict(tomllib.load(f).get("bridge", {}))
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML in {config_path}: {e}") from e
    elif path is not None:
        raise ConfigurationError(f"Config file not found: {config_path}")

    env_map = {
        "HOLOREA_CONDUCTOR_URI": "conductor_uri",
        "HOLOREA_TIMEOUT": "timeout",
        "HOLOREA_LOG_LEVEL": "log_level",
    }
    for env_var, key in env_map.items():
        value = os.environ.get(env_var)
        if value:
            data[key] = value

    data.update(overrides)

    try:
        return BridgeConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid bridge configuration: {e.error_count()} error(s)",
            details={"errors": e.errors(include_url=False)},
        ) from e


__all__ = ["BridgeConfig", "DEFAULT_CONFIG_FILE", "load_config"]

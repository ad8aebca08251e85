"""Application settings loaded from environment variables and config files.

Configuration is loaded from (highest priority first):
1. Environment variables (prefix: ``CRYPTOPAY_``, nested via ``__``)
2. YAML config file (``config_path`` or ``CRYPTOPAY_CONFIG_PATH`` env var)
3. Defaults defined here
"""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Any, Self

import yaml
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ---------------------------------------------------------------------------
# Enums for validated choices
# ---------------------------------------------------------------------------


class Network(enum.StrEnum):
    """Crypto Pay network the client talks to."""

    MAINNET = "mainnet"
    TESTNET = "testnet"

    @property
    def base_url(self) -> str:
        """Return the API root for this network."""
        return _BASE_URLS[self]


_BASE_URLS = {
    Network.MAINNET: "https://pay.crypt.bot/api",
    Network.TESTNET: "https://testnet-pay.crypt.bot/api",
}


# ---------------------------------------------------------------------------
# Sub-config models
# ---------------------------------------------------------------------------


class CryptoPayConfig(BaseSettings):
    """Crypto Pay API credentials and transport settings."""

    model_config = SettingsConfigDict(
        env_prefix="CRYPTOPAY_API__",
        case_sensitive=False,
    )

    token: str = ""
    network: Network = Network.MAINNET
    base_url: str = Field(
        default="",
        description="Override for the network's API root (e.g. a local mock)",
    )
    timeout: float = 30.0

    @property
    def api_url(self) -> str:
        """The effective API root, without a trailing slash."""
        return (self.base_url or self.network.base_url).rstrip("/")


class PollingConfig(BaseSettings):
    """Status polling settings shared by every tracker of a client."""

    model_config = SettingsConfigDict(
        env_prefix="CRYPTOPAY_POLLING__",
        case_sensitive=False,
        frozen=True,
    )

    period: float = Field(default=5.0, gt=0, description="Seconds between ticks")
    max_tracker_lifetime: float | None = Field(
        default=None,
        gt=0,
        description="Default lifetime ceiling in seconds; unbounded when unset",
    )


class WebhookServerConfig(BaseSettings):
    """HTTP settings for the webhook receiver."""

    model_config = SettingsConfigDict(
        env_prefix="CRYPTOPAY_WEBHOOK__",
        case_sensitive=False,
    )

    host: str = "0.0.0.0"  # noqa: S104
    port: int = 3000
    path: str = "/"


class MetricsConfig(BaseSettings):
    """Prometheus metrics settings."""

    model_config = SettingsConfigDict(
        env_prefix="CRYPTOPAY_METRICS__",
        case_sensitive=False,
    )

    enabled: bool = True


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------


def _load_yaml(path: str | Path) -> dict[str, Any]:
    """Load a YAML configuration file and return its contents as a dict.

    Returns an empty dict if the file doesn't exist or is empty.
    """
    p = Path(path)
    if not p.exists():
        return {}
    text = p.read_text(encoding="utf-8")
    data = yaml.safe_load(text)
    return data if isinstance(data, dict) else {}


class AppConfig(BaseSettings):
    """Top-level application configuration.

    Loads settings from environment variables (``CRYPTOPAY_`` prefix),
    an optional YAML file, and built-in defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="CRYPTOPAY_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    debug: bool = False
    config_path: str = ""

    api: CryptoPayConfig = Field(default_factory=CryptoPayConfig)
    polling: PollingConfig = Field(default_factory=PollingConfig)
    webhook: WebhookServerConfig = Field(default_factory=WebhookServerConfig)
    metrics: MetricsConfig = Field(default_factory=MetricsConfig)

    @model_validator(mode="before")
    @classmethod
    def _merge_yaml(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Merge YAML config file contents under the env var overrides."""
        config_path = values.get("config_path", "")
        if not config_path:
            return values
        yaml_data = _load_yaml(config_path)
        # YAML values serve as defaults; env vars (already in *values*) win.
        for key, val in yaml_data.items():
            if key not in values or values[key] is None:
                values[key] = val
            elif isinstance(val, dict) and isinstance(values.get(key), dict):
                values[key] = {**val, **values[key]}
        return values

    @classmethod
    def from_yaml(cls, path: str | Path) -> Self:
        """Construct ``AppConfig`` loading defaults from a YAML file.

        Environment variables still override YAML values.
        """
        return cls(config_path=str(path))

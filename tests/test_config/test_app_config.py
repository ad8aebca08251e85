"""Tests for the configuration system."""

from __future__ import annotations

import textwrap
from typing import TYPE_CHECKING

import pytest
from pydantic import ValidationError

from cryptopay.config.settings import (
    AppConfig,
    CryptoPayConfig,
    MetricsConfig,
    Network,
    PollingConfig,
    WebhookServerConfig,
    _load_yaml,
)

if TYPE_CHECKING:
    from pathlib import Path

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------


class TestDefaults:
    """Verify all default values are correct."""

    def test_api_defaults(self) -> None:
        cfg = CryptoPayConfig()
        assert cfg.token == ""
        assert cfg.network == Network.MAINNET
        assert cfg.timeout == 30.0
        assert cfg.api_url == "https://pay.crypt.bot/api"

    def test_polling_defaults(self) -> None:
        cfg = PollingConfig()
        assert cfg.period == 5.0
        assert cfg.max_tracker_lifetime is None

    def test_webhook_defaults(self) -> None:
        cfg = WebhookServerConfig()
        assert cfg.host == "0.0.0.0"  # noqa: S104
        assert cfg.port == 3000
        assert cfg.path == "/"

    def test_metrics_defaults(self) -> None:
        assert MetricsConfig().enabled is True

    def test_app_defaults(self) -> None:
        cfg = AppConfig()
        assert cfg.debug is False
        assert cfg.config_path == ""
        assert isinstance(cfg.polling, PollingConfig)


# ---------------------------------------------------------------------------
# Network selection
# ---------------------------------------------------------------------------


class TestNetwork:
    def test_testnet_url(self) -> None:
        cfg = CryptoPayConfig(network=Network.TESTNET)
        assert cfg.api_url == "https://testnet-pay.crypt.bot/api"

    def test_base_url_override(self) -> None:
        cfg = CryptoPayConfig(network=Network.TESTNET, base_url="http://localhost:9000/api/")
        assert cfg.api_url == "http://localhost:9000/api"

    def test_network_from_string(self) -> None:
        assert CryptoPayConfig(network="testnet").network is Network.TESTNET


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class TestPollingValidation:
    @pytest.mark.parametrize("period", [0, -1.5])
    def test_period_must_be_positive(self, period: float) -> None:
        with pytest.raises(ValidationError):
            PollingConfig(period=period)

    def test_lifetime_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            PollingConfig(max_tracker_lifetime=0)

    def test_frozen(self) -> None:
        cfg = PollingConfig()
        with pytest.raises(ValidationError):
            cfg.period = 1.0  # type: ignore[misc]


# ---------------------------------------------------------------------------
# Environment variables
# ---------------------------------------------------------------------------


class TestEnvVars:
    def test_nested_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CRYPTOPAY_API__TOKEN", "env-token")
        monkeypatch.setenv("CRYPTOPAY_API__NETWORK", "testnet")
        monkeypatch.setenv("CRYPTOPAY_POLLING__PERIOD", "2.5")
        monkeypatch.setenv("CRYPTOPAY_WEBHOOK__PORT", "8080")
        cfg = AppConfig()
        assert cfg.api.token == "env-token"
        assert cfg.api.network is Network.TESTNET
        assert cfg.polling.period == 2.5
        assert cfg.webhook.port == 8080

    def test_debug_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CRYPTOPAY_DEBUG", "true")
        assert AppConfig().debug is True


# ---------------------------------------------------------------------------
# YAML loading
# ---------------------------------------------------------------------------


class TestYaml:
    def test_load_missing_file(self, tmp_path: Path) -> None:
        assert _load_yaml(tmp_path / "nope.yaml") == {}

    def test_load_non_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        assert _load_yaml(path) == {}

    def test_from_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            textwrap.dedent(
                """\
                api:
                  token: yaml-token
                  network: testnet
                polling:
                  period: 1.5
                  max_tracker_lifetime: 600
                webhook:
                  path: /hooks
                """
            )
        )
        cfg = AppConfig.from_yaml(path)
        assert cfg.api.token == "yaml-token"
        assert cfg.api.network is Network.TESTNET
        assert cfg.polling.period == 1.5
        assert cfg.polling.max_tracker_lifetime == 600
        assert cfg.webhook.path == "/hooks"

    def test_env_overrides_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("api:\n  token: yaml-token\n  timeout: 5\n")
        monkeypatch.setenv("CRYPTOPAY_API__TOKEN", "env-token")
        cfg = AppConfig.from_yaml(path)
        assert cfg.api.token == "env-token"
        assert cfg.api.timeout == 5

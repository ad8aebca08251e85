"""Shared test fixtures for the cryptopay test suite."""

from __future__ import annotations

import pytest

from cryptopay.config.settings import CryptoPayConfig, PollingConfig
from cryptopay.metrics.collector import CryptoPayMetrics

TEST_TOKEN = "test-token"  # noqa: S105
TEST_BASE_URL = "https://pay.test/api"


@pytest.fixture
def api_config() -> CryptoPayConfig:
    """Provide a CryptoPayConfig pointing at a fake API root."""
    return CryptoPayConfig(token=TEST_TOKEN, base_url=TEST_BASE_URL)


@pytest.fixture
def fast_polling() -> PollingConfig:
    """Polling config with a 10 ms period so trackers finish quickly."""
    return PollingConfig(period=0.01)


@pytest.fixture
def metrics() -> CryptoPayMetrics:
    """Metrics bound to a fresh, isolated registry."""
    return CryptoPayMetrics()

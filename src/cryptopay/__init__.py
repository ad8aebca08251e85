"""cryptopay — async Crypto Pay API client with status polling and webhooks."""

from __future__ import annotations

__version__ = "0.1.0"

from cryptopay.client import CryptoPayClient  # noqa: E402
from cryptopay.config.settings import (  # noqa: E402
    AppConfig,
    CryptoPayConfig,
    Network,
    PollingConfig,
)
from cryptopay.polling import PollingManager, TrackerState  # noqa: E402
from cryptopay.webhooks import WebhookHandler, create_webhook_app  # noqa: E402

__all__ = [
    "AppConfig",
    "CryptoPayClient",
    "CryptoPayConfig",
    "Network",
    "PollingConfig",
    "PollingManager",
    "TrackerState",
    "WebhookHandler",
    "__version__",
    "create_webhook_app",
]

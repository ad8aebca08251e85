"""Entry point for the standalone webhook receiver."""

from __future__ import annotations

import os

import uvicorn

from cryptopay.config.settings import AppConfig


def main() -> None:
    """Start the webhook receiver."""
    config = AppConfig()
    reload = os.getenv("CRYPTOPAY_RELOAD", "false").lower() in ("1", "true", "yes")
    uvicorn.run(
        "cryptopay.webhooks.server:create_app",
        factory=True,
        host=config.webhook.host,
        port=config.webhook.port,
        reload=reload,
        log_level="debug" if config.debug else "info",
    )


if __name__ == "__main__":
    main()

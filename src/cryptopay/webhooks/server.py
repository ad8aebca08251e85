"""FastAPI application hosting a :class:`WebhookHandler`.

The webhook route reads the raw request body so the signature is checked
against the exact bytes the provider signed.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from prometheus_client import generate_latest
from starlette.responses import Response

from cryptopay import __version__
from cryptopay.config.settings import AppConfig
from cryptopay.metrics.collector import CryptoPayMetrics
from cryptopay.webhooks.handler import WebhookHandler

logger = logging.getLogger(__name__)


def create_webhook_app(
    handler: WebhookHandler,
    *,
    path: str = "/",
    metrics: CryptoPayMetrics | None = None,
) -> FastAPI:
    """Build the webhook receiver application.

    Args:
        handler: The dispatcher that authenticates and routes deliveries.
        path: URL path the provider posts to.
        metrics: Optional metrics whose registry is served on ``/metrics``.
    """
    app = FastAPI(
        title="cryptopay-webhooks",
        version=__version__,
        description="Crypto Pay webhook receiver",
    )
    app.state.handler = handler
    app.state.metrics = metrics

    @app.post(path, tags=["webhooks"])
    async def receive_webhook(request: Request) -> dict[str, bool]:
        """Accept one delivery; the body reports whether it was processed."""
        body = await request.body()
        accepted = await handler.handle(body, request.headers)
        return {"ok": accepted}

    # -- Base routes --
    @app.get("/health", tags=["base"])
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/metrics", tags=["base"], include_in_schema=False)
    async def metrics_endpoint() -> Response:
        """Prometheus metrics endpoint."""
        body = generate_latest(metrics.registry) if metrics else generate_latest()
        return Response(
            content=body,
            media_type="text/plain; version=0.0.4; charset=utf-8",
        )

    logger.info("Webhook receiver mounted at %s", path)
    return app


def create_app(*, config: AppConfig | None = None) -> FastAPI:
    """Build a standalone receiver from configuration.

    Deliveries are only logged; applications that need to act on them
    build their own :class:`WebhookHandler` and call :func:`create_webhook_app`.

    Args:
        config: Optional AppConfig. If *None*, a default config is created
            from environment variables.

    Raises:
        ValueError: If no app token is configured.
    """
    if config is None:
        config = AppConfig()

    if not config.api.token:
        msg = "CRYPTOPAY_API__TOKEN must be set to verify webhook signatures"
        raise ValueError(msg)

    metrics = CryptoPayMetrics() if config.metrics.enabled else None
    handler = (
        WebhookHandler(config.api.token, metrics=metrics)
        .on_webhook(
            lambda env: logger.info("Webhook %s received: %s", env.update_id, env.update_type)
        )
        .on_invoice_paid(lambda inv: logger.info("Invoice %s paid", inv.invoice_id))
    )
    return create_webhook_app(handler, path=config.webhook.path, metrics=metrics)

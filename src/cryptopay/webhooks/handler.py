"""Webhook dispatcher — authenticate, validate, then route to handlers.

Pipeline, stopping at the first failing stage:

1. signature check over the raw body
2. envelope shape validation, plus parsing the payload of a known
   update type
3. the generic ``on_webhook`` handler (returning ``False`` rejects)
4. the handler for the update type (only ``invoice_paid`` with an object
   payload is dispatched)

The result is a plain accept/reject boolean; choosing an HTTP response
is left to the host.
"""

from __future__ import annotations

import inspect
import json
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Self

import httpx

from cryptopay.client.models import Invoice
from cryptopay.webhooks.envelope import (
    EnvelopeRejected,
    UpdateType,
    WebhookEnvelope,
    validate_envelope,
)
from cryptopay.webhooks.signature import verify_signature

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from cryptopay.metrics.collector import CryptoPayMetrics

logger = logging.getLogger(__name__)


def _noop(*_args: Any) -> None:
    return None


class WebhookHandler:
    """Authenticates and dispatches Crypto Pay webhook deliveries.

    Usage::

        handler = (
            WebhookHandler(token)
            .on_webhook(lambda env: env.request_date.year == 2025)
            .on_invoice_paid(mark_order_paid)
        )
        accepted = await handler.handle(raw_body, request.headers)
    """

    def __init__(self, token: str, *, metrics: CryptoPayMetrics | None = None) -> None:
        """Initialize the handler.

        Args:
            token: The app token; the signing secret is derived from it.
            metrics: Optional Prometheus metrics sink.

        Raises:
            ValueError: If *token* is empty.
        """
        if not token:
            msg = "A Crypto Pay app token is required to verify webhook signatures"
            raise ValueError(msg)
        self._token = token
        self._metrics = metrics
        self._handle_webhook: Callable[[WebhookEnvelope], Any] = _noop
        self._handle_invoice_paid: Callable[[Invoice], Any] = _noop

    def on_webhook(
        self, handler: Callable[[WebhookEnvelope], bool | None | Awaitable[bool | None]]
    ) -> Self:
        """Set the handler run for every authentic delivery.

        Returning ``False`` rejects the delivery and skips type-specific
        handlers; ``True`` or ``None`` continues. Last registration wins.
        """
        self._handle_webhook = handler
        return self

    def on_invoice_paid(self, handler: Callable[[Invoice], Any]) -> Self:
        """Set the handler for ``invoice_paid`` updates. Last registration wins."""
        self._handle_invoice_paid = handler
        return self

    async def handle(
        self, body: bytes | str | Mapping[str, Any], headers: Mapping[str, str]
    ) -> bool:
        """Process one delivery.

        Args:
            body: The request body exactly as received. A parsed mapping is
                accepted but is re-serialized before the signature check.
            headers: Request headers; names are matched case-insensitively.

        Returns:
            ``True`` if the delivery was accepted.
        """
        raw = body.encode() if isinstance(body, str) else body
        if not verify_signature(self._token, raw, headers):
            return self._reject("bad-signature", "signature mismatch or missing header")

        if isinstance(raw, bytes):
            try:
                parsed = json.loads(raw)
            except ValueError:
                return self._reject("malformed", "body is not valid JSON")
        else:
            parsed = dict(raw)

        result = validate_envelope(parsed)
        if isinstance(result, EnvelopeRejected):
            return self._reject("malformed", result.reason)
        envelope = result.envelope

        invoice: Invoice | None = None
        if envelope.update_type == UpdateType.INVOICE_PAID and isinstance(
            envelope.payload, Mapping
        ):
            try:
                invoice = Invoice.from_dict(envelope.payload)
            except (TypeError, ValueError, ArithmeticError, httpx.InvalidURL):
                return self._reject(
                    "malformed", f"update {envelope.update_id} payload is not an invoice"
                )

        try:
            verdict = await self._call(self._handle_webhook, envelope)
            if verdict is False:
                return self._reject("filtered", f"update {envelope.update_id} declined by handler")

            if invoice is not None:
                await self._call(self._handle_invoice_paid, invoice)
            else:
                logger.debug(
                    "No typed handler for update %s (type %r)",
                    envelope.update_id,
                    envelope.update_type,
                )
        except Exception:
            logger.exception("Webhook handler failed for update %s", envelope.update_id)
            return self._reject("handler-error", f"update {envelope.update_id} handler raised")

        if self._metrics:
            self._metrics.record_webhook("accepted")
        return True

    @staticmethod
    async def _call(handler: Callable[..., Any], *args: Any) -> Any:
        result = handler(*args)
        if inspect.isawaitable(result):
            result = await result
        return result

    def _reject(self, result: str, reason: str) -> bool:
        logger.warning("Webhook rejected (%s): %s", result, reason)
        if self._metrics:
            self._metrics.record_webhook(result)
        return False

"""Webhooks — signature verification and dispatch of provider notifications.

Provides:
- ``WebhookHandler`` — authenticates deliveries and routes them to handlers
- ``verify_signature`` — HMAC check over the raw request body
- ``validate_envelope`` — shape check returning a discriminated result
- ``create_webhook_app`` — FastAPI app hosting a handler
"""

from __future__ import annotations

from cryptopay.webhooks.envelope import (
    EnvelopeAccepted,
    EnvelopeRejected,
    WebhookEnvelope,
    validate_envelope,
)
from cryptopay.webhooks.handler import WebhookHandler
from cryptopay.webhooks.server import create_webhook_app
from cryptopay.webhooks.signature import compute_signature, verify_signature

__all__ = [
    "EnvelopeAccepted",
    "EnvelopeRejected",
    "WebhookEnvelope",
    "WebhookHandler",
    "compute_signature",
    "create_webhook_app",
    "validate_envelope",
    "verify_signature",
]

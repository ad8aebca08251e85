"""Webhook envelope schema and validation.

Every delivery is wrapped in ``{update_id, update_type, request_date,
payload}``. Validation only establishes that those keys are present; the
values are passed through untouched, except that ``request_date`` is parsed
into a ``datetime`` when it is an ISO-8601 string.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pydantic import BaseModel, field_validator

REQUIRED_FIELDS = ("update_id", "update_type", "request_date", "payload")


class UpdateType(enum.StrEnum):
    """Update types with a defined payload shape."""

    INVOICE_PAID = "invoice_paid"


class WebhookEnvelope(BaseModel):
    """An inbound webhook notification."""

    update_id: Any
    update_type: Any
    request_date: Any
    payload: Any

    @field_validator("request_date")
    @classmethod
    def _parse_request_date(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return datetime.fromisoformat(value)
            except ValueError:
                return value
        return value


@dataclass(frozen=True)
class EnvelopeAccepted:
    envelope: WebhookEnvelope


@dataclass(frozen=True)
class EnvelopeRejected:
    reason: str


EnvelopeResult = EnvelopeAccepted | EnvelopeRejected


def validate_envelope(obj: Any) -> EnvelopeResult:
    """Check that *obj* is a webhook envelope.

    Returns:
        ``EnvelopeAccepted`` with the parsed envelope, or ``EnvelopeRejected``
        naming the missing fields.
    """
    if not isinstance(obj, dict):
        return EnvelopeRejected(reason=f"body is {type(obj).__name__}, not an object")
    missing = [name for name in REQUIRED_FIELDS if name not in obj]
    if missing:
        return EnvelopeRejected(reason=f"missing fields: {', '.join(missing)}")
    return EnvelopeAccepted(envelope=WebhookEnvelope.model_validate(obj))

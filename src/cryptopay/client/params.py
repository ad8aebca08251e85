"""Request parameter structs for Crypto Pay API methods.

Parameters are immutable: build them with keyword arguments and derive
variants with :meth:`replace`, where the last value given for a field wins.
Fields left as ``None`` are omitted from the request body.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Self

import httpx

from cryptopay.client.models import is_crypto


def _encode(value: Any) -> Any:
    """Convert a parameter value to its JSON wire form."""
    if isinstance(value, datetime):
        return value.isoformat().replace("+00:00", "Z")
    if isinstance(value, (Decimal, httpx.URL)):
        return str(value)
    if isinstance(value, (list, tuple)):
        return ",".join(str(item) for item in value)
    return value


class _Params:
    """Mixin for frozen parameter dataclasses."""

    def replace(self, **changes: Any) -> Self:
        """Return a copy with *changes* applied."""
        return dataclasses.replace(self, **changes)  # type: ignore[type-var]

    def to_payload(self) -> dict[str, Any]:
        """Serialize to a request body, dropping absent fields."""
        return {
            f.name: _encode(value)
            for f in dataclasses.fields(self)  # type: ignore[arg-type]
            if (value := getattr(self, f.name)) is not None
        }


@dataclass(frozen=True)
class CreateInvoiceParams(_Params):
    """``createInvoice`` — *currency* may be a crypto asset or a fiat code."""

    currency: str
    amount: Decimal | float | str
    accepted_assets: tuple[str, ...] | None = None
    description: str | None = None
    hidden_message: str | None = None
    paid_btn_name: str | None = None
    paid_btn_url: str | httpx.URL | None = None
    swap_to: str | None = None
    payload: str | None = None
    allow_comments: bool | None = None
    allow_anonymous: bool | None = None
    expires_in: int | None = None

    def to_payload(self) -> dict[str, Any]:
        body = super().to_payload()
        currency = body.pop("currency")
        if is_crypto(currency):
            body["currency_type"] = "crypto"
            body["asset"] = currency
        else:
            body["currency_type"] = "fiat"
            body["fiat"] = currency
        return body


@dataclass(frozen=True)
class CreateCheckParams(_Params):
    asset: str
    amount: Decimal | float | str
    pin_to_user_id: int | None = None
    pin_to_username: str | None = None


@dataclass(frozen=True)
class TransferParams(_Params):
    """``transfer`` — *spend_id* makes the call idempotent on the provider side."""

    user_id: int
    asset: str
    amount: Decimal | float | str
    spend_id: str
    comment: str | None = None
    disable_send_notification: bool | None = None


@dataclass(frozen=True)
class GetInvoicesParams(_Params):
    asset: str | None = None
    fiat: str | None = None
    invoice_ids: tuple[int, ...] | None = None
    status: str | None = None
    offset: int | None = None
    count: int | None = None


@dataclass(frozen=True)
class GetTransfersParams(_Params):
    asset: str | None = None
    transfer_ids: tuple[int, ...] | None = None
    spend_id: str | None = None
    offset: int | None = None
    count: int | None = None


@dataclass(frozen=True)
class GetChecksParams(_Params):
    asset: str | None = None
    check_ids: tuple[int, ...] | None = None
    status: str | None = None
    offset: int | None = None
    count: int | None = None


@dataclass(frozen=True)
class GetStatsParams(_Params):
    start_at: datetime | None = None
    end_at: datetime | None = None

"""Crypto Pay data models — invoices, checks, transfers, envelopes.

Data classes representing Crypto Pay API response objects. Each record
declares which of its fields hold dates, URLs and amounts; ``from_dict``
promotes exactly those fields and passes every other value through
unchanged, so free-text fields are never reinterpreted.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, fields
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, ClassVar, Generic, Self, TypeVar

import httpx

if TYPE_CHECKING:
    from collections.abc import Callable

    from cryptopay.errors.cryptopay_errors import CryptoPayError

T = TypeVar("T")
U = TypeVar("U")

# ---------------------------------------------------------------------------
# Currency vocabularies
# ---------------------------------------------------------------------------

CRYPTO_CURRENCIES: frozenset[str] = frozenset(
    {
        "DOGS", "HMSTR", "USDT", "ETH", "WIF", "MY", "BNB", "TRUMP",
        "SOL", "TRX", "DOGE", "PEPE", "BTC", "CATI", "LTC", "MELANIA",
        "GRAM", "NOT", "MEMHASH", "MAJOR", "BONK", "USDC", "TON",
    }
)  # fmt: skip

FIAT_CURRENCIES: frozenset[str] = frozenset(
    {
        "GBP", "IDR", "UAH", "ILS", "TJS", "PLN", "RUB", "AED", "KGS",
        "AMD", "BRL", "CNY", "BYN", "INR", "TRY", "UZS", "USD", "AZN",
        "EUR", "THB", "KZT", "GEL",
    }
)  # fmt: skip


def is_crypto(code: str) -> bool:
    """Whether *code* is a cryptocurrency known to Crypto Pay."""
    return code in CRYPTO_CURRENCIES


def is_fiat(code: str) -> bool:
    """Whether *code* is a fiat currency known to Crypto Pay."""
    return code in FIAT_CURRENCIES


# ---------------------------------------------------------------------------
# Status enums
# ---------------------------------------------------------------------------


class InvoiceStatus(enum.StrEnum):
    """Invoice lifecycle: ACTIVE → PAID | EXPIRED."""

    ACTIVE = "active"
    PAID = "paid"
    EXPIRED = "expired"


class CheckStatus(enum.StrEnum):
    """Check lifecycle: ACTIVE → ACTIVATED."""

    ACTIVE = "active"
    ACTIVATED = "activated"


# ---------------------------------------------------------------------------
# Field promotion
# ---------------------------------------------------------------------------


def parse_datetime(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp such as ``2025-01-01T00:00:00.000Z``."""
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def _parse_url(value: Any) -> httpx.URL | None:
    if value is None or isinstance(value, httpx.URL):
        return value
    return httpx.URL(str(value))


def _parse_amount(value: Any) -> Decimal | None:
    if value is None or isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class _Record:
    """Mixin giving dataclass records a schema-keyed ``from_dict``."""

    _DATE_FIELDS: ClassVar[frozenset[str]] = frozenset()
    _URL_FIELDS: ClassVar[frozenset[str]] = frozenset()
    _AMOUNT_FIELDS: ClassVar[frozenset[str]] = frozenset()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create a record from an API JSON object, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}  # type: ignore[arg-type]
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                continue
            if key in cls._DATE_FIELDS:
                value = parse_datetime(value)
            elif key in cls._URL_FIELDS:
                value = _parse_url(value)
            elif key in cls._AMOUNT_FIELDS:
                value = _parse_amount(value)
            kwargs[key] = value
        return cls(**kwargs)


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass
class Invoice(_Record):
    """A payment request issued to a payer."""

    _DATE_FIELDS: ClassVar[frozenset[str]] = frozenset({"created_at", "expiration_date", "paid_at"})
    _URL_FIELDS: ClassVar[frozenset[str]] = frozenset(
        {"bot_invoice_url", "mini_app_invoice_url", "web_app_invoice_url", "paid_btn_url"}
    )
    _AMOUNT_FIELDS: ClassVar[frozenset[str]] = frozenset(
        {
            "amount",
            "paid_amount",
            "paid_fiat_rate",
            "fee_amount",
            "fee_in_usd",
            "paid_usd_rate",
            "swapped_rate",
            "swapped_output",
            "swapped_usd_amount",
            "swapped_usd_rate",
        }
    )

    invoice_id: int = 0
    hash: str = ""
    currency_type: str = ""
    asset: str | None = None
    fiat: str | None = None
    amount: Decimal | None = None
    paid_asset: str | None = None
    paid_amount: Decimal | None = None
    paid_fiat_rate: Decimal | None = None
    accepted_assets: list[str] | None = None
    fee_asset: str | None = None
    fee_amount: Decimal | None = None
    fee_in_usd: Decimal | None = None
    bot_invoice_url: httpx.URL | None = None
    mini_app_invoice_url: httpx.URL | None = None
    web_app_invoice_url: httpx.URL | None = None
    description: str | None = None
    status: str = InvoiceStatus.ACTIVE
    swap_to: str | None = None
    is_swapped: bool | None = None
    swapped_uid: str | None = None
    swapped_to: str | None = None
    swapped_rate: Decimal | None = None
    swapped_output: Decimal | None = None
    swapped_usd_amount: Decimal | None = None
    swapped_usd_rate: Decimal | None = None
    created_at: datetime | None = None
    paid_usd_rate: Decimal | None = None
    allow_comments: bool = False
    allow_anonymous: bool = False
    expiration_date: datetime | None = None
    paid_at: datetime | None = None
    paid_anonymously: bool | None = None
    comment: str | None = None
    hidden_message: str | None = None
    payload: str | None = None
    paid_btn_name: str | None = None
    paid_btn_url: httpx.URL | None = None


@dataclass
class Check(_Record):
    """A redeemable check holding a crypto amount."""

    _DATE_FIELDS: ClassVar[frozenset[str]] = frozenset({"created_at", "activated_at"})
    _URL_FIELDS: ClassVar[frozenset[str]] = frozenset({"bot_check_url"})
    _AMOUNT_FIELDS: ClassVar[frozenset[str]] = frozenset({"amount"})

    check_id: int = 0
    hash: str = ""
    asset: str = ""
    amount: Decimal | None = None
    bot_check_url: httpx.URL | None = None
    status: str = CheckStatus.ACTIVE
    created_at: datetime | None = None
    activated_at: datetime | None = None


@dataclass
class Transfer(_Record):
    """A completed transfer from the app balance to a user."""

    _DATE_FIELDS: ClassVar[frozenset[str]] = frozenset({"completed_at"})
    _AMOUNT_FIELDS: ClassVar[frozenset[str]] = frozenset({"amount"})

    transfer_id: int = 0
    spend_id: str = ""
    user_id: str = ""
    asset: str = ""
    amount: Decimal | None = None
    status: str = "completed"
    completed_at: datetime | None = None
    comment: str | None = None


@dataclass
class Balance(_Record):
    _AMOUNT_FIELDS: ClassVar[frozenset[str]] = frozenset({"available", "onhold"})

    currency_code: str = ""
    available: Decimal | None = None
    onhold: Decimal | None = None


@dataclass
class ExchangeRate(_Record):
    _AMOUNT_FIELDS: ClassVar[frozenset[str]] = frozenset({"rate"})

    is_valid: bool = False
    is_crypto: bool = False
    is_fiat: bool = False
    source: str = ""
    target: str = ""
    rate: Decimal | None = None


@dataclass
class Currency(_Record):
    _URL_FIELDS: ClassVar[frozenset[str]] = frozenset({"url"})

    is_blockchain: bool = False
    is_stablecoin: bool = False
    is_fiat: bool = False
    name: str = ""
    code: str = ""
    decimals: int = 0
    url: httpx.URL | None = None


@dataclass
class AppInfo(_Record):
    """Basic information about the app the token belongs to."""

    app_id: int = 0
    name: str = ""
    payment_processing_bot_username: str = ""


@dataclass
class AppStats(_Record):
    """Aggregated app statistics for a time window."""

    _DATE_FIELDS: ClassVar[frozenset[str]] = frozenset({"start_at", "end_at"})
    _AMOUNT_FIELDS: ClassVar[frozenset[str]] = frozenset({"volume", "conversion"})

    volume: Decimal | None = None
    conversion: Decimal | None = None
    unique_users_count: int = 0
    created_invoice_count: int = 0
    paid_invoice_count: int = 0
    start_at: datetime | None = None
    end_at: datetime | None = None


# ---------------------------------------------------------------------------
# Envelope
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ApiError:
    """Structured error returned by the provider in an ``ok: false`` envelope."""

    code: int = 0
    name: str = ""
    description: str | None = None
    message: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ApiError:
        return cls(
            code=data.get("code", 0),
            name=data.get("name", ""),
            description=data.get("description"),
            message=data.get("message"),
        )

    @classmethod
    def from_exception(cls, exc: CryptoPayError) -> ApiError:
        """Describe a local transport fault in the provider's error shape."""
        return cls(code=exc.status_code, name=exc.code, message=exc.message)


@dataclass(frozen=True)
class ApiResponse(Generic[T]):
    """Tagged success/failure envelope: ``{ok, result | error}``.

    A successful response may still carry ``result=None`` when a looked-up
    entity does not exist.
    """

    ok: bool
    result: T | None = None
    error: ApiError | None = field(default=None)

    @classmethod
    def from_dict(cls, data: dict[str, Any], parse: Callable[[Any], T]) -> ApiResponse[T]:
        """Build an envelope, running *parse* over the result of a success."""
        if data.get("ok"):
            raw = data.get("result")
            return cls(ok=True, result=parse(raw) if raw is not None else None)
        return cls(ok=False, error=ApiError.from_dict(data.get("error") or {}))

    def map(self, fn: Callable[[T], U | None]) -> ApiResponse[U]:
        """Transform the result of a success, keeping failures as they are."""
        if not self.ok:
            return ApiResponse(ok=False, error=self.error)
        return ApiResponse(ok=True, result=fn(self.result) if self.result is not None else None)

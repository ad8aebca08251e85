"""Crypto Pay API client, response records and request parameters."""

from cryptopay.client.models import (
    ApiError,
    ApiResponse,
    AppInfo,
    AppStats,
    Balance,
    Check,
    CheckStatus,
    Currency,
    ExchangeRate,
    Invoice,
    InvoiceStatus,
    Transfer,
    is_crypto,
    is_fiat,
)
from cryptopay.client.params import (
    CreateCheckParams,
    CreateInvoiceParams,
    GetChecksParams,
    GetInvoicesParams,
    GetStatsParams,
    GetTransfersParams,
    TransferParams,
)
from cryptopay.client.service import CryptoPayClient

__all__ = [
    "ApiError",
    "ApiResponse",
    "AppInfo",
    "AppStats",
    "Balance",
    "Check",
    "CheckStatus",
    "CreateCheckParams",
    "CreateInvoiceParams",
    "CryptoPayClient",
    "Currency",
    "ExchangeRate",
    "GetChecksParams",
    "GetInvoicesParams",
    "GetStatsParams",
    "GetTransfersParams",
    "Invoice",
    "InvoiceStatus",
    "Transfer",
    "TransferParams",
    "is_crypto",
    "is_fiat",
]

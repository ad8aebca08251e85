"""Error hierarchy for the Crypto Pay client."""

from __future__ import annotations

from cryptopay.errors.client_errors import (
    ClientNotConnectedError,
    CryptoPayConnectionError,
    CryptoPayResponseError,
)
from cryptopay.errors.cryptopay_errors import CryptoPayError

__all__ = [
    "ClientNotConnectedError",
    "CryptoPayConnectionError",
    "CryptoPayError",
    "CryptoPayResponseError",
]

"""CryptoPayError — base exception class for all cryptopay errors."""

from __future__ import annotations


class CryptoPayError(Exception):
    """Base error for all Crypto Pay client operations.

    Provider-side failures (``ok: false`` envelopes) are returned as
    values; this hierarchy covers faults that happen on our side of the wire.

    Attributes:
        message: Human-readable error description.
        status_code: HTTP status code involved, if any.
        code: Machine-readable error code string.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int = 500,
        code: str = "cryptopay-error",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code

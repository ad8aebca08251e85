"""Transport-level client errors."""

from __future__ import annotations

from cryptopay.errors.cryptopay_errors import CryptoPayError


class ClientNotConnectedError(CryptoPayError):
    """A call was made before ``connect()`` or after ``close()``."""

    def __init__(
        self, message: str = "Crypto Pay client not connected. Call connect() first."
    ) -> None:
        super().__init__(message, status_code=500, code="client-not-connected")


class CryptoPayConnectionError(CryptoPayError):
    """The HTTP request to the provider could not be completed."""

    def __init__(self, message: str, *, status_code: int = 502) -> None:
        super().__init__(message, status_code=status_code, code="connection-error")


class CryptoPayResponseError(CryptoPayError):
    """The provider answered with a body that is not a valid envelope."""

    def __init__(self, message: str, *, status_code: int = 502) -> None:
        super().__init__(message, status_code=status_code, code="invalid-response")

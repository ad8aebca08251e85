"""Crypto Pay HTTP client — authenticated RPC over POST.

Every API method is called as ``POST <api root>/<methodName>`` with the
``Crypto-Pay-API-Token`` header and an optional JSON body. The provider
answers with a tagged envelope ``{ok, result | error}`` which is returned
to the caller as an :class:`ApiResponse` — provider-side failures are
values, not exceptions.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Self

import httpx

from cryptopay.client.models import (
    ApiResponse,
    AppInfo,
    AppStats,
    Balance,
    Check,
    Currency,
    ExchangeRate,
    Invoice,
    Transfer,
)
from cryptopay.client.params import GetChecksParams, GetInvoicesParams, GetTransfersParams
from cryptopay.config.settings import PollingConfig
from cryptopay.errors.client_errors import (
    ClientNotConnectedError,
    CryptoPayConnectionError,
    CryptoPayResponseError,
)
from cryptopay.polling.manager import PollingManager

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from cryptopay.client.params import (
        CreateCheckParams,
        CreateInvoiceParams,
        GetStatsParams,
        TransferParams,
    )
    from cryptopay.config.settings import CryptoPayConfig
    from cryptopay.metrics.collector import CryptoPayMetrics

logger = logging.getLogger(__name__)

TOKEN_HEADER = "Crypto-Pay-API-Token"  # noqa: S105

# Page size used by the bulk delete helpers
_BULK_PAGE_SIZE = 1000


def _items(parse: Callable[[dict[str, Any]], Any]) -> Callable[[dict[str, Any]], list[Any]]:
    """Build a parser for a ``{"items": [...]}`` list result."""

    def _parse(raw: dict[str, Any]) -> list[Any]:
        return [parse(item) for item in raw.get("items", [])]

    return _parse


def _each(parse: Callable[[dict[str, Any]], Any]) -> Callable[[list[dict[str, Any]]], list[Any]]:
    """Build a parser for a bare JSON array result."""

    def _parse(raw: list[dict[str, Any]]) -> list[Any]:
        return [parse(item) for item in raw]

    return _parse


def _first(items: list[Any]) -> Any | None:
    return items[0] if items else None


class CryptoPayClient:
    """Async HTTP client for the Crypto Pay API.

    Usage::

        client = CryptoPayClient(CryptoPayConfig(token="..."))
        await client.connect()
        try:
            resp = await client.create_invoice(CreateInvoiceParams(currency="TON", amount=5))
            if resp.ok:
                client.polling.track_invoice(resp.result).on_invoice_paid(print)
        finally:
            await client.close()
    """

    def __init__(
        self,
        config: CryptoPayConfig,
        polling: PollingConfig | None = None,
        *,
        metrics: CryptoPayMetrics | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: API token, network selection and timeout.
            polling: Timing shared by every tracker created via :attr:`polling`.
            metrics: Optional Prometheus metrics sink.
            transport: Optional httpx transport (e.g. a mock in tests).
        """
        self._config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._metrics = metrics
        self.polling = PollingManager(self, polling or PollingConfig(), metrics=metrics)

    async def connect(self) -> None:
        """Create the underlying HTTP client."""
        self._client = httpx.AsyncClient(
            base_url=self._config.api_url,
            headers={TOKEN_HEADER: self._config.token},
            timeout=self._config.timeout,
            transport=self._transport,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> Self:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    @property
    def is_connected(self) -> bool:
        """Check if the HTTP client is active."""
        return self._client is not None

    @property
    def token(self) -> str:
        """The app token, also the root secret for webhook signatures."""
        return self._config.token

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get_me(self) -> ApiResponse[AppInfo]:
        """Get basic information about the app."""
        return await self._request("getMe", None, AppInfo.from_dict)

    async def create_invoice(self, params: CreateInvoiceParams) -> ApiResponse[Invoice]:
        """Create a new invoice."""
        return await self._request("createInvoice", params.to_payload(), Invoice.from_dict)

    async def delete_invoice(self, invoice_id: int) -> ApiResponse[bool]:
        """Delete an invoice; the result is ``True`` on success."""
        return await self._request("deleteInvoice", {"invoice_id": invoice_id}, bool)

    async def create_check(self, params: CreateCheckParams) -> ApiResponse[Check]:
        """Create a new check."""
        return await self._request("createCheck", params.to_payload(), Check.from_dict)

    async def delete_check(self, check_id: int) -> ApiResponse[bool]:
        """Delete a check; the result is ``True`` on success."""
        return await self._request("deleteCheck", {"check_id": check_id}, bool)

    async def transfer(self, params: TransferParams) -> ApiResponse[Transfer]:
        """Send coins from the app balance to a user."""
        return await self._request("transfer", params.to_payload(), Transfer.from_dict)

    async def get_invoices(
        self, params: GetInvoicesParams | None = None
    ) -> ApiResponse[list[Invoice]]:
        """List invoices matching *params*."""
        payload = params.to_payload() if params else None
        return await self._request("getInvoices", payload, _items(Invoice.from_dict))

    async def get_transfers(
        self, params: GetTransfersParams | None = None
    ) -> ApiResponse[list[Transfer]]:
        """List transfers matching *params*."""
        payload = params.to_payload() if params else None
        return await self._request("getTransfers", payload, _items(Transfer.from_dict))

    async def get_checks(self, params: GetChecksParams | None = None) -> ApiResponse[list[Check]]:
        """List checks matching *params*."""
        payload = params.to_payload() if params else None
        return await self._request("getChecks", payload, _items(Check.from_dict))

    async def get_balance(self) -> ApiResponse[list[Balance]]:
        return await self._request("getBalance", None, _each(Balance.from_dict))

    async def get_exchange_rates(self) -> ApiResponse[list[ExchangeRate]]:
        return await self._request("getExchangeRates", None, _each(ExchangeRate.from_dict))

    async def get_currencies(self) -> ApiResponse[list[Currency]]:
        return await self._request("getCurrencies", None, _each(Currency.from_dict))

    async def get_stats(self, params: GetStatsParams | None = None) -> ApiResponse[AppStats]:
        """Get app statistics, by default for the last 24 hours."""
        payload = params.to_payload() if params else None
        return await self._request("getStats", payload, AppStats.from_dict)

    # ------------------------------------------------------------------
    # Single-entity lookups
    # ------------------------------------------------------------------

    async def get_invoice(self, invoice_id: int) -> ApiResponse[Invoice]:
        """Get one invoice; ``result`` is ``None`` if it does not exist."""
        response = await self.get_invoices(GetInvoicesParams(invoice_ids=(invoice_id,)))
        return response.map(_first)

    async def get_transfer(self, transfer_id: int) -> ApiResponse[Transfer]:
        """Get one transfer; ``result`` is ``None`` if it does not exist."""
        response = await self.get_transfers(GetTransfersParams(transfer_ids=(transfer_id,)))
        return response.map(_first)

    async def get_check(self, check_id: int) -> ApiResponse[Check]:
        """Get one check; ``result`` is ``None`` if it does not exist."""
        response = await self.get_checks(GetChecksParams(check_ids=(check_id,)))
        return response.map(_first)

    async def get_asset_balance(self, asset: str) -> ApiResponse[Balance]:
        """Get the balance of a single asset, or ``None`` if the app holds none."""
        response = await self.get_balance()
        return response.map(
            lambda balances: next((b for b in balances if b.currency_code == asset), None)
        )

    async def get_currency(self, code: str) -> ApiResponse[Currency]:
        """Get a currency by its code, or ``None`` if it is unknown."""
        response = await self.get_currencies()
        return response.map(
            lambda currencies: next((c for c in currencies if c.code == code), None)
        )

    # ------------------------------------------------------------------
    # Bulk helpers
    # ------------------------------------------------------------------

    async def delete_invoices(self, invoice_ids: list[int]) -> list[ApiResponse[bool]]:
        """Delete several invoices concurrently."""
        return list(await asyncio.gather(*(self.delete_invoice(i) for i in invoice_ids)))

    async def delete_checks(self, check_ids: list[int]) -> list[ApiResponse[bool]]:
        """Delete several checks concurrently."""
        return list(await asyncio.gather(*(self.delete_check(i) for i in check_ids)))

    async def delete_all_invoices(self) -> list[ApiResponse[bool]]:
        """Delete every invoice the app can list (up to one page of 1000)."""
        response = await self.get_invoices(GetInvoicesParams(count=_BULK_PAGE_SIZE))
        if not response.ok or not response.result:
            return []
        return await self.delete_invoices([inv.invoice_id for inv in response.result])

    async def delete_all_checks(self) -> list[ApiResponse[bool]]:
        """Delete every check the app can list (up to one page of 1000)."""
        response = await self.get_checks(GetChecksParams(count=_BULK_PAGE_SIZE))
        if not response.ok or not response.result:
            return []
        return await self.delete_checks([chk.check_id for chk in response.result])

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _ensure_connected(self) -> httpx.AsyncClient:
        """Return the HTTP client, raising if not connected."""
        if self._client is None:
            raise ClientNotConnectedError
        return self._client

    async def _request(
        self,
        method: str,
        params: dict[str, Any] | None,
        parse: Callable[[Any], Any],
    ) -> ApiResponse[Any]:
        """POST *method* and decode the provider envelope.

        A JSON body (and its ``Content-Type``) is sent only when *params*
        is given. Any HTTP status is accepted: the provider reports errors
        inside the envelope.
        """
        client = self._ensure_connected()
        kwargs: dict[str, Any] = {"json": params} if params is not None else {}

        try:
            if self._metrics:
                with self._metrics.track_api_request(method):
                    response = await client.post(f"/{method}", **kwargs)
            else:
                response = await client.post(f"/{method}", **kwargs)
        except httpx.HTTPError as exc:
            raise CryptoPayConnectionError(f"Crypto Pay {method} failed: {exc}") from exc

        try:
            data = response.json()
        except ValueError as exc:
            msg = f"Crypto Pay {method} returned a non-JSON body ({response.status_code})"
            raise CryptoPayResponseError(msg, status_code=response.status_code) from exc
        if not isinstance(data, dict) or "ok" not in data:
            msg = f"Crypto Pay {method} returned an unexpected body ({response.status_code})"
            raise CryptoPayResponseError(msg, status_code=response.status_code)

        result = ApiResponse.from_dict(data, parse)
        if not result.ok:
            logger.debug("Crypto Pay %s returned error: %s", method, result.error)
        return result

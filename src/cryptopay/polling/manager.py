"""Polling manager — creates trackers bound to a client and its polling config."""

from __future__ import annotations

from typing import TYPE_CHECKING

from cryptopay.polling.tracker import CheckPollingTracker, InvoicePollingTracker

if TYPE_CHECKING:
    from cryptopay.client.models import Check, Invoice
    from cryptopay.client.service import CryptoPayClient
    from cryptopay.config.settings import PollingConfig
    from cryptopay.metrics.collector import CryptoPayMetrics


class PollingManager:
    """Factory for polling trackers.

    The manager keeps no registry of live trackers: callers hold the
    returned tracker if they want to kill it later.

    Usage::

        tracker = (
            client.polling.track_invoice(invoice, lifetime=600)
            .on_invoice_paid(handle_paid)
            .on_tracker_dies(handle_timeout)
        )
    """

    def __init__(
        self,
        client: CryptoPayClient,
        config: PollingConfig,
        *,
        metrics: CryptoPayMetrics | None = None,
    ) -> None:
        self._client = client
        self._config = config
        self._metrics = metrics

    @property
    def config(self) -> PollingConfig:
        """The polling configuration shared by all trackers."""
        return self._config

    def track_invoice(
        self, invoice: Invoice, lifetime: float | None = None
    ) -> InvoicePollingTracker:
        """Start tracking *invoice*. Must be called with a running event loop.

        Args:
            invoice: The invoice to watch.
            lifetime: Seconds before the tracker dies; defaults to the
                configured ``max_tracker_lifetime``.
        """
        return InvoicePollingTracker(
            self._client, self._config, invoice, lifetime, metrics=self._metrics
        )

    def track_check(self, check: Check, lifetime: float | None = None) -> CheckPollingTracker:
        """Start tracking *check*. Must be called with a running event loop."""
        return CheckPollingTracker(
            self._client, self._config, check, lifetime, metrics=self._metrics
        )

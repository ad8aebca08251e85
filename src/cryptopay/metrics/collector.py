"""Metrics collector — Prometheus counters and histograms.

- ``cryptopay_api_request_histogram`` — duration of outbound API calls
- ``cryptopay_polling_ticks_total`` — tracker evaluations
- ``cryptopay_polling_outcomes_total`` — tracker terminal states
- ``cryptopay_polling_errors_total`` — failed status checks
- ``cryptopay_webhook_deliveries_total`` — inbound webhooks by result
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import TYPE_CHECKING

from prometheus_client import CollectorRegistry, Counter, Histogram

if TYPE_CHECKING:
    from collections.abc import Iterator

_PREFIX = "cryptopay"


class MetricsCollector:
    """Low-level Prometheus collector that owns the registry.

    Use :class:`CryptoPayMetrics` for the high-level tracking interface.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self._registry = registry or CollectorRegistry()

    @property
    def registry(self) -> CollectorRegistry:
        """Return the underlying Prometheus registry."""
        return self._registry

    def histogram(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Histogram:
        """Register and return a Histogram."""
        return Histogram(name, doc, labels, registry=self._registry)

    def counter(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Counter:
        """Register and return a Counter."""
        return Counter(name, doc, labels, registry=self._registry)


class CryptoPayMetrics:
    """High-level metrics for the client, the trackers and the webhook receiver."""

    def __init__(self, collector: MetricsCollector | None = None) -> None:
        self._collector = collector or MetricsCollector()

        self._api_request = self._collector.histogram(
            f"{_PREFIX}_api_request_histogram",
            "Duration of Crypto Pay API calls",
            ("method",),
        )
        self._ticks = self._collector.counter(
            f"{_PREFIX}_polling_ticks",
            "Polling tracker evaluations",
        )
        self._outcomes = self._collector.counter(
            f"{_PREFIX}_polling_outcomes",
            "Polling trackers that reached a final state",
            ("outcome",),
        )
        self._poll_errors = self._collector.counter(
            f"{_PREFIX}_polling_errors",
            "Status checks that failed during polling",
        )
        self._webhooks = self._collector.counter(
            f"{_PREFIX}_webhook_deliveries",
            "Inbound webhook deliveries",
            ("result",),
        )

    @property
    def registry(self) -> CollectorRegistry:
        """Return the underlying Prometheus registry."""
        return self._collector.registry

    @contextmanager
    def track_api_request(self, method: str) -> Iterator[None]:
        """Track the duration of a single API call."""
        start = time.monotonic()
        try:
            yield
        finally:
            self._api_request.labels(method=method).observe(time.monotonic() - start)

    def record_tick(self) -> None:
        self._ticks.inc()

    def record_outcome(self, outcome: str) -> None:
        """Count a tracker reaching *outcome* (a ``TrackerState`` value)."""
        self._outcomes.labels(outcome=outcome).inc()

    def record_poll_error(self) -> None:
        self._poll_errors.inc()

    def record_webhook(self, result: str) -> None:
        """Count a webhook delivery by *result* (``accepted`` or a rejection reason)."""
        self._webhooks.labels(result=result).inc()

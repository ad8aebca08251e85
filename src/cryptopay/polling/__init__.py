"""Polling — status trackers for invoices and checks.

Provides:
- ``PollingManager`` — creates trackers bound to a client
- ``InvoicePollingTracker`` — paid / expired / deleted
- ``CheckPollingTracker`` — activated / deleted
"""

from __future__ import annotations

from cryptopay.polling.manager import PollingManager
from cryptopay.polling.tracker import (
    CheckPollingTracker,
    InvoicePollingTracker,
    PollingTracker,
    TrackerState,
)

__all__ = [
    "CheckPollingTracker",
    "InvoicePollingTracker",
    "PollingManager",
    "PollingTracker",
    "TrackerState",
]

"""Polling trackers — per-object status watchers driven by an asyncio task.

A tracker is bound to one invoice or check. Every ``period`` seconds it
re-fetches the object and decides whether a terminal condition has been
reached. Exactly one final outcome happens per tracker:

    running → succeeded | deleted | error_stopped | expired | killed

Ticks of one tracker run sequentially on its own task. If a status check
is still in flight when the next period boundary passes, that boundary is
skipped, but ``elapsed`` still counts it so lifetime expiry follows the
wall clock. A lifetime reached at a skipped boundary ends the tracker as
soon as the in-flight check returns.
"""

from __future__ import annotations

import asyncio
import enum
import inspect
import logging
import math
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Generic, Self, TypeVar

from cryptopay.client.models import ApiError, Check, CheckStatus, Invoice, InvoiceStatus
from cryptopay.errors.cryptopay_errors import CryptoPayError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from cryptopay.client.models import ApiResponse
    from cryptopay.client.service import CryptoPayClient
    from cryptopay.config.settings import PollingConfig
    from cryptopay.metrics.collector import CryptoPayMetrics

    Handler = Callable[..., Any]

logger = logging.getLogger(__name__)

T = TypeVar("T", Invoice, Check)


class TrackerState(enum.StrEnum):
    """Lifecycle of a polling tracker. Every state but RUNNING is final."""

    RUNNING = "running"
    SUCCEEDED = "succeeded"
    DELETED = "deleted"
    ERROR_STOPPED = "error_stopped"
    EXPIRED = "expired"
    KILLED = "killed"


def _noop(*_args: Any) -> None:
    return None


class PollingTracker(ABC, Generic[T]):
    """Timer and handler registry shared by all tracker variants.

    Variants supply the status accessor (:meth:`_fetch`), the terminal
    status test (:meth:`_resolve`) and their own handler vocabulary.
    Construction starts the timer; there is no separate start call.
    """

    def __init__(
        self,
        client: CryptoPayClient,
        config: PollingConfig,
        obj: T,
        lifetime: float | None = None,
        *,
        metrics: CryptoPayMetrics | None = None,
    ) -> None:
        """Create the tracker and schedule its first tick.

        Args:
            client: Client used to re-fetch the tracked object.
            config: Shared polling configuration (period, default lifetime).
            obj: The object to watch.
            lifetime: Seconds after which the tracker dies. Overrides
                ``config.max_tracker_lifetime``; unbounded if both are unset.
            metrics: Optional Prometheus metrics sink.

        Raises:
            ValueError: If *lifetime* is not positive.
            RuntimeError: If called without a running event loop.
        """
        if lifetime is not None and lifetime <= 0:
            msg = f"Tracker lifetime must be positive, got {lifetime}"
            raise ValueError(msg)
        self._client = client
        self._object = obj
        self._period = config.period
        self._lifetime = lifetime if lifetime is not None else config.max_tracker_lifetime
        self._metrics = metrics
        self._elapsed = 0.0
        self._state = TrackerState.RUNNING

        self._handle_tracker_dies: Handler = _noop
        self._handle_error: Handler = _noop
        self._handle_deleted: Handler = _noop

        self._task = asyncio.get_running_loop().create_task(
            self._run(), name=f"{type(self).__name__}-{self.object_id}"
        )

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} id={self.object_id} "
            f"state={self._state} elapsed={self._elapsed:g}>"
        )

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    @abstractmethod
    def object_id(self) -> int:
        """Identifier of the tracked object."""

    @property
    def state(self) -> TrackerState:
        return self._state

    @property
    def is_alive(self) -> bool:
        """Whether the tracker is still ticking."""
        return self._state is TrackerState.RUNNING

    @property
    def elapsed(self) -> float:
        """Seconds of tracker time counted at period boundaries."""
        return self._elapsed

    @property
    def period(self) -> float:
        return self._period

    @property
    def lifetime(self) -> float | None:
        """The lifetime ceiling in effect, or ``None`` if unbounded."""
        return self._lifetime

    async def wait(self) -> TrackerState:
        """Wait until the tracker stops and return its final state."""
        await asyncio.wait({self._task})
        return self._state

    # ------------------------------------------------------------------
    # Handler registration (last registration wins)
    # ------------------------------------------------------------------

    def on_tracker_dies(self, handler: Callable[[], Any]) -> Self:
        """Called once when the lifetime ceiling is reached. Not called by :meth:`kill`."""
        self._handle_tracker_dies = handler
        return self

    def on_error(self, handler: Callable[[ApiError], bool | None | Awaitable[bool | None]]) -> Self:
        """Called when a status check fails.

        Returning ``True`` stops the tracker; any other value keeps it ticking.
        """
        self._handle_error = handler
        return self

    # ------------------------------------------------------------------
    # Cancellation
    # ------------------------------------------------------------------

    def kill(self) -> None:
        """Stop the tracker without firing the "dies" handler.

        Safe to call repeatedly, after the tracker already stopped, and from
        inside one of the tracker's own handlers.
        """
        if self._state is not TrackerState.RUNNING:
            return
        self._finish(TrackerState.KILLED)
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        if current is not self._task:
            self._task.cancel()

    # ------------------------------------------------------------------
    # Variant hooks
    # ------------------------------------------------------------------

    @abstractmethod
    async def _fetch(self) -> ApiResponse[T]:
        """Fetch the current snapshot; ``result`` is ``None`` once deleted."""

    @abstractmethod
    def _resolve(self, obj: T) -> Handler | None:
        """Return the handler for a terminal status of *obj*, ``None`` while pending."""

    # ------------------------------------------------------------------
    # Timer
    # ------------------------------------------------------------------

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        started = loop.time()
        boundary = 1
        while self._state is TrackerState.RUNNING:
            await asyncio.sleep(max(0.0, started + boundary * self._period - loop.time()))
            self._elapsed = boundary * self._period
            await self._tick()
            passed = math.floor((loop.time() - started) / self._period)
            if passed > boundary:
                # Boundaries skipped during the status check still count.
                self._elapsed = passed * self._period
                if self._state is TrackerState.RUNNING and self._lifetime_reached():
                    await self._expire()
                    return
            boundary = max(boundary + 1, passed + 1)

    def _lifetime_reached(self) -> bool:
        if self._lifetime is None:
            return False
        return self._elapsed >= self._lifetime or math.isclose(self._elapsed, self._lifetime)

    async def _tick(self) -> None:
        if self._metrics:
            self._metrics.record_tick()

        if self._lifetime_reached():
            await self._expire()
            return

        try:
            response = await self._fetch()
        except CryptoPayError as exc:
            await self._fail(ApiError.from_exception(exc))
            return
        except Exception as exc:
            logger.exception("Unexpected failure polling %r", self)
            await self._fail(ApiError(name=type(exc).__name__, message=str(exc)))
            return

        if not response.ok:
            await self._fail(response.error or ApiError())
            return

        current = response.result
        if current is None:
            self._finish(TrackerState.DELETED)
            await self._fire(self._handle_deleted)
            return

        handler = self._resolve(current)
        if handler is not None:
            self._finish(TrackerState.SUCCEEDED)
            await self._fire(handler, current)

    async def _expire(self) -> None:
        self._finish(TrackerState.EXPIRED)
        await self._fire(self._handle_tracker_dies)

    async def _fail(self, error: ApiError) -> None:
        if self._metrics:
            self._metrics.record_poll_error()
        logger.debug("Status check for %r failed: %s", self, error)
        stop = await self._fire(self._handle_error, error)
        if stop is True and self._state is TrackerState.RUNNING:
            self._finish(TrackerState.ERROR_STOPPED)

    async def _fire(self, handler: Handler, *args: Any) -> Any:
        """Invoke a user handler, awaiting it if needed. Failures are logged."""
        try:
            result = handler(*args)
            if inspect.isawaitable(result):
                result = await result
        except Exception:
            logger.exception("Handler %r of %r failed", handler, self)
            return None
        return result

    def _finish(self, state: TrackerState) -> None:
        self._state = state
        if self._metrics:
            self._metrics.record_outcome(state.value)
        logger.debug("Tracker %r stopped: %s", self, state)


class InvoicePollingTracker(PollingTracker[Invoice]):
    """Watches an invoice until it is paid, expires or is deleted."""

    def __init__(
        self,
        client: CryptoPayClient,
        config: PollingConfig,
        invoice: Invoice,
        lifetime: float | None = None,
        *,
        metrics: CryptoPayMetrics | None = None,
    ) -> None:
        self._handle_invoice_paid: Handler = _noop
        self._handle_invoice_expired: Handler = _noop
        super().__init__(client, config, invoice, lifetime, metrics=metrics)

    @property
    def object_id(self) -> int:
        return self._object.invoice_id

    def on_invoice_paid(self, handler: Callable[[Invoice], Any]) -> Self:
        self._handle_invoice_paid = handler
        return self

    def on_invoice_expired(self, handler: Callable[[Invoice], Any]) -> Self:
        self._handle_invoice_expired = handler
        return self

    def on_invoice_deleted(self, handler: Callable[[], Any]) -> Self:
        self._handle_deleted = handler
        return self

    async def _fetch(self) -> ApiResponse[Invoice]:
        return await self._client.get_invoice(self._object.invoice_id)

    def _resolve(self, obj: Invoice) -> Handler | None:
        if obj.status == InvoiceStatus.PAID:
            return self._handle_invoice_paid
        if obj.status == InvoiceStatus.EXPIRED:
            return self._handle_invoice_expired
        return None


class CheckPollingTracker(PollingTracker[Check]):
    """Watches a check until it is activated or deleted."""

    def __init__(
        self,
        client: CryptoPayClient,
        config: PollingConfig,
        check: Check,
        lifetime: float | None = None,
        *,
        metrics: CryptoPayMetrics | None = None,
    ) -> None:
        self._handle_check_activated: Handler = _noop
        super().__init__(client, config, check, lifetime, metrics=metrics)

    @property
    def object_id(self) -> int:
        return self._object.check_id

    def on_check_activated(self, handler: Callable[[Check], Any]) -> Self:
        self._handle_check_activated = handler
        return self

    def on_check_deleted(self, handler: Callable[[], Any]) -> Self:
        self._handle_deleted = handler
        return self

    async def _fetch(self) -> ApiResponse[Check]:
        return await self._client.get_check(self._object.check_id)

    def _resolve(self, obj: Check) -> Handler | None:
        if obj.status == CheckStatus.ACTIVATED:
            return self._handle_check_activated
        return None

"""In-process change notification feed.

Writers publish a :class:`ChangeEvent` after each committed mutation; readers
hold a :class:`Subscription` filtered by table and, optionally, flight id.
Events carry no row payload and are treated purely as invalidation signals.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Callable, Iterable, Optional, Union

logger = logging.getLogger(__name__)

_DEFAULT_QUEUE_SIZE = 32


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    action: str
    flight_id: Optional[int] = None
    occurred_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


class Subscription:
    """Cancellable stream of change events for one table/flight filter."""

    def __init__(
        self,
        feed: "ChangeFeed",
        tables: frozenset[str],
        flight_id: Optional[int],
        maxsize: int,
    ) -> None:
        self._feed = feed
        self.tables = tables
        self.flight_id = flight_id
        self._queue: asyncio.Queue[Optional[ChangeEvent]] = asyncio.Queue(maxsize)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def matches(self, event: ChangeEvent) -> bool:
        if event.table not in self.tables:
            return False
        return self.flight_id is None or event.flight_id == self.flight_id

    def offer(self, event: ChangeEvent) -> None:
        if self._closed:
            return
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            # A pending event already forces a refresh; drop the newer one.
            logger.debug("Coalescing change event for %s", event.table)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._feed._discard(self)
        while True:
            try:
                self._queue.put_nowait(None)
                break
            except asyncio.QueueFull:
                self._queue.get_nowait()

    def __aiter__(self) -> AsyncIterator[ChangeEvent]:
        return self

    async def __anext__(self) -> ChangeEvent:
        if self._closed and self._queue.empty():
            raise StopAsyncIteration
        event = await self._queue.get()
        if event is None:
            raise StopAsyncIteration
        return event

    async def __aenter__(self) -> "Subscription":
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()


class ChangeFeed:
    """Fan-out publisher for table change notifications."""

    def __init__(self, queue_size: int = _DEFAULT_QUEUE_SIZE) -> None:
        self._queue_size = queue_size
        self._subscriptions: list[Subscription] = []

    def subscribe(
        self,
        table: Union[str, Iterable[str]],
        flight_id: Optional[int] = None,
    ) -> Subscription:
        """Subscribe to one table, or several, optionally narrowed to a flight."""

        tables = frozenset([table] if isinstance(table, str) else table)
        subscription = Subscription(self, tables, flight_id, self._queue_size)
        self._subscriptions.append(subscription)
        logger.debug(
            "Subscribed to %s changes (flight=%s); %d active",
            ", ".join(sorted(tables)),
            flight_id,
            len(self._subscriptions),
        )
        return subscription

    def publish(self, event: ChangeEvent) -> None:
        for subscription in list(self._subscriptions):
            if subscription.matches(event):
                subscription.offer(event)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def _discard(self, subscription: Subscription) -> None:
        try:
            self._subscriptions.remove(subscription)
        except ValueError:
            pass


class SubscriptionHandle:
    """Owns the background refresh task of a store subscription.

    Release it with :meth:`cancel`, :meth:`aclose` or ``async with`` when the
    consuming view goes away.
    """

    def __init__(self, subscription: Subscription, task: asyncio.Task) -> None:
        self._subscription = subscription
        self._task = task

    @property
    def active(self) -> bool:
        return not self._subscription.closed

    def cancel(self) -> None:
        self._subscription.close()
        self._task.cancel()

    async def aclose(self) -> None:
        self.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass

    async def __aenter__(self) -> "SubscriptionHandle":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


async def notify(handler: Optional[Callable[..., Any]], *args: Any) -> None:
    """Call a sync or async change handler; its failures are logged, not raised."""

    if handler is None:
        return
    try:
        result = handler(*args)
        if inspect.isawaitable(result):
            await result
    except Exception:
        logger.exception("Change handler failed")


_feed = ChangeFeed()


def get_change_feed() -> ChangeFeed:
    """Return the process-wide change feed."""

    return _feed


__all__ = [
    "ChangeEvent",
    "ChangeFeed",
    "Subscription",
    "SubscriptionHandle",
    "get_change_feed",
    "notify",
]

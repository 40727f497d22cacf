"""In-process publish/subscribe fan-out for catalog events."""

from __future__ import annotations

import asyncio
import weakref
from collections import defaultdict
from typing import Any

from ..logging import get_logger
from .models import BOOK_ADDED

logger = get_logger(__name__)

_CLOSED = object()


class Subscription:
    """One subscriber's view of a topic.

    Registered with the broadcaster when constructed, so it receives every
    event published from then on and nothing published before. Iterating
    never ends on its own; closing it (or dropping every reference to it)
    removes it from the broadcaster.
    """

    def __init__(self, broadcaster: EventBroadcaster, topic: str) -> None:
        self.topic = topic
        self._broadcaster = broadcaster
        # Unbounded so publishers never wait on a slow subscriber
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self._closed = False
        broadcaster._register(self)

    @property
    def closed(self) -> bool:
        return self._closed

    def _deliver(self, event: Any) -> None:
        if not self._closed:
            self._queue.put_nowait(event)

    def __aiter__(self) -> Subscription:
        return self

    async def __anext__(self) -> Any:
        if self._closed:
            raise StopAsyncIteration
        event = await self._queue.get()
        if event is _CLOSED:
            raise StopAsyncIteration
        return event

    async def aclose(self) -> None:
        """Stop receiving events and release this subscription's slot."""
        if self._closed:
            return
        self._closed = True
        self._broadcaster._unregister(self)
        # Wake a consumer blocked in __anext__
        self._queue.put_nowait(_CLOSED)

    async def __aenter__(self) -> Subscription:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


class EventBroadcaster:
    """Fan-out of published events to every currently active subscription.

    Construct one per application and inject it where it is needed.
    """

    def __init__(self) -> None:
        self._subscribers: defaultdict[str, weakref.WeakSet[Subscription]] = defaultdict(
            weakref.WeakSet
        )

    def subscribe(self, topic: str = BOOK_ADDED) -> Subscription:
        """Open a fresh subscription to ``topic``."""
        return Subscription(self, topic)

    async def publish(self, event: Any, topic: str = BOOK_ADDED) -> int:
        """Deliver ``event`` to every active subscription of ``topic``.

        Returns:
            Number of subscriptions the event was delivered to
        """
        # Snapshot: subscribe/unsubscribe may run while we deliver
        targets = list(self._subscribers[topic])
        for subscription in targets:
            subscription._deliver(event)

        logger.info(
            "Published event",
            topic=topic,
            event_type=type(event).__name__,
            subscribers=len(targets),
        )
        return len(targets)

    def subscriber_count(self, topic: str = BOOK_ADDED) -> int:
        return len(self._subscribers[topic])

    async def close(self) -> None:
        """Close every open subscription."""
        for subscriptions in list(self._subscribers.values()):
            for subscription in list(subscriptions):
                await subscription.aclose()

    def _register(self, subscription: Subscription) -> None:
        self._subscribers[subscription.topic].add(subscription)
        logger.debug(
            "Subscription opened",
            topic=subscription.topic,
            subscribers=len(self._subscribers[subscription.topic]),
        )

    def _unregister(self, subscription: Subscription) -> None:
        self._subscribers[subscription.topic].discard(subscription)
        logger.debug(
            "Subscription closed",
            topic=subscription.topic,
            subscribers=len(self._subscribers[subscription.topic]),
        )

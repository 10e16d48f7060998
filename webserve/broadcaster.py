"""Fan-out of change notifications to waiting clients."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Set

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 16


@dataclass(frozen=True)
class ChangeEvent:
    """Something under the serving root changed."""


class Subscription:
    """A single client's view of the broadcaster.

    Events published while the client is not waiting are buffered up to the
    broadcaster's capacity; past that the oldest pending event is dropped.
    Use it as a context manager so the registration is released however the
    client goes away.
    """

    def __init__(self, broadcaster: ReloadBroadcaster, capacity: int):
        self._broadcaster = broadcaster
        self._queue: asyncio.Queue[ChangeEvent] = asyncio.Queue(maxsize=capacity)
        self.dropped = 0
        self.closed = False

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    async def wait(self) -> ChangeEvent:
        """Suspend until the next event for this subscription arrives."""

        return await self._queue.get()

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._broadcaster._discard(self)

    def _deliver(self, event: ChangeEvent) -> None:
        if self._queue.full():
            self._queue.get_nowait()
            self.dropped += 1
            logger.debug("Subscriber buffer full; dropped oldest event (%s total)", self.dropped)
        self._queue.put_nowait(event)


class ReloadBroadcaster:
    """Single-producer, multi-consumer channel for change events.

    All methods except ``publish_threadsafe`` must be called from the event
    loop that runs the request handlers.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._capacity = capacity
        self._subscribers: Set[Subscription] = set()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> Subscription:
        subscription = Subscription(self, self._capacity)
        self._subscribers.add(subscription)
        logger.debug("Reload subscriber added (%s active)", len(self._subscribers))
        return subscription

    async def wait(self, subscription: Subscription) -> ChangeEvent:
        return await subscription.wait()

    def publish(self, event: Optional[ChangeEvent] = None) -> int:
        """Deliver ``event`` to every registered subscription.

        Returns the number of subscriptions reached.
        """

        if event is None:
            event = ChangeEvent()
        subscribers = list(self._subscribers)
        for subscription in subscribers:
            subscription._deliver(event)
        logger.debug("Change event published to %s subscriber(s)", len(subscribers))
        return len(subscribers)

    def publish_threadsafe(
        self, loop: asyncio.AbstractEventLoop, event: Optional[ChangeEvent] = None
    ) -> None:
        """Schedule ``publish`` on ``loop`` from a foreign thread."""

        loop.call_soon_threadsafe(self.publish, event)

    def _discard(self, subscription: Subscription) -> None:
        self._subscribers.discard(subscription)
        logger.debug("Reload subscriber released (%s active)", len(self._subscribers))

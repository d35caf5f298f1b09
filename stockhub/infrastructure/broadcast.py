"""Event Broadcaster — in-process fan-out of committed change events to SSE subscribers.

Invariants:
    - publish() never blocks and never raises for a slow or vanished subscriber
    - Each subscriber owns a bounded asyncio.Queue on its own event loop; events are
      handed over with call_soon_threadsafe (publishers run in FastAPI's threadpool)
    - A full queue drops the newest event for that subscriber only

Design Decisions:
    - In-memory registry: single-process deployment, subscribers reconnect after restart
    - Satisfies core.repository_protocols.NotificationSink structurally
"""

import asyncio
import itertools
import logging
import threading
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from stockhub.core.projections import ChangeEvent

logger = logging.getLogger(__name__)


class EventBroadcaster:
    """Fire-and-forget broadcast channel for committed mutations."""

    def __init__(self, queue_size: int = 100):
        self._queue_size = queue_size
        self._subscribers: dict[
            int, tuple[asyncio.AbstractEventLoop, asyncio.Queue],
        ] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    @asynccontextmanager
    async def subscribe(self) -> AsyncIterator[asyncio.Queue]:
        """Register a queue for the duration of the block."""
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._queue_size)
        with self._lock:
            subscriber_id = next(self._ids)
            self._subscribers[subscriber_id] = (loop, queue)
        logger.debug("Event subscriber %s connected", subscriber_id)
        try:
            yield queue
        finally:
            with self._lock:
                self._subscribers.pop(subscriber_id, None)
            logger.debug("Event subscriber %s disconnected", subscriber_id)

    def publish(self, event: ChangeEvent) -> None:
        with self._lock:
            targets = list(self._subscribers.values())
        for loop, queue in targets:
            try:
                loop.call_soon_threadsafe(self._offer, queue, event)
            except RuntimeError:
                # subscriber's loop already closed; its finally-block will unregister it
                logger.debug("Skipped event for closed subscriber loop")

    @staticmethod
    def _offer(queue: asyncio.Queue, event: ChangeEvent) -> None:
        try:
            queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.warning(
                "Dropping change event for slow subscriber",
                extra={"event": f"{event.entity.value}.{event.kind.value}"},
            )


# Singleton (initialized on startup)
event_broadcaster: EventBroadcaster | None = None


def init_broadcaster(queue_size: int = 100) -> EventBroadcaster:
    global event_broadcaster
    event_broadcaster = EventBroadcaster(queue_size)
    return event_broadcaster


def get_broadcaster() -> EventBroadcaster:
    """FastAPI dependency for the notification sink."""
    if not event_broadcaster:
        raise RuntimeError("Event broadcaster not initialized")
    return event_broadcaster

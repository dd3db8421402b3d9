"""Job change broadcaster: in-process fan-out of realtime row events."""

import asyncio
import json
import logging
from collections.abc import AsyncGenerator, AsyncIterator
from datetime import datetime
from typing import Any

from fo_tracker.application.interfaces import JobChangeFeed, JobSubscription
from fo_tracker.domain.entities import JobChangeEvent

logger = logging.getLogger(__name__)


def _json_default(value: Any) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def format_sse(event: JobChangeEvent) -> str:
    """Render an event as a Server-Sent Events message."""
    data = {"job_id": event.job_id, "record": event.record}
    return f"event: {event.change_type.value}\ndata: {json.dumps(data, default=_json_default)}\n\n"


class QueueSubscription(JobSubscription):
    """Subscription backed by its own bounded asyncio.Queue."""

    def __init__(self, broadcaster: "JobChangeBroadcaster", maxsize: int) -> None:
        self._broadcaster = broadcaster
        self._queue: asyncio.Queue[JobChangeEvent | None] = asyncio.Queue(maxsize=maxsize)
        self._closed = False

    def offer(self, event: JobChangeEvent) -> bool:
        """Queue an event without blocking. Returns False when the queue is full."""
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            return False
        return True

    def end(self) -> None:
        """Wake the consumer so iteration stops."""
        self._closed = True
        try:
            self._queue.put_nowait(None)
        except asyncio.QueueFull:
            # A full queue will still drain; the closed flag ends iteration.
            pass

    def close(self) -> None:
        if self._closed:
            return
        self._broadcaster.unsubscribe(self)
        self.end()

    async def _events(self) -> AsyncGenerator[JobChangeEvent, None]:
        try:
            while True:
                event = await self._queue.get()
                if event is None:
                    break
                yield event
                if self._closed and self._queue.empty():
                    break
        finally:
            self.close()

    def __aiter__(self) -> AsyncIterator[JobChangeEvent]:
        return self._events()


class JobChangeBroadcaster(JobChangeFeed):
    """Pushes job change events to every subscriber.

    Each subscriber gets its own bounded queue. A subscriber whose queue is
    full is disconnected instead of blocking the publisher.
    """

    def __init__(self, queue_size: int = 256) -> None:
        self._queue_size = queue_size
        self._subscriptions: list[QueueSubscription] = []

    def subscribe(self) -> QueueSubscription:
        subscription = QueueSubscription(self, self._queue_size)
        self._subscriptions.append(subscription)
        return subscription

    def unsubscribe(self, subscription: QueueSubscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    async def broadcast(self, event: JobChangeEvent) -> None:
        """Broadcast an event to all connected subscribers."""
        dead: list[QueueSubscription] = []

        for subscription in self._subscriptions:
            if not subscription.offer(event):
                dead.append(subscription)
                logger.warning("Job change subscriber queue full: disconnecting")

        for subscription in dead:
            subscription.close()

    async def stream(self) -> AsyncGenerator[str, None]:
        """Subscribe and yield SSE-formatted strings until disconnected."""
        subscription = self.subscribe()
        try:
            async for event in subscription:
                yield format_sse(event)
        finally:
            subscription.close()

    async def shutdown(self) -> None:
        """Disconnect all subscribers."""
        for subscription in list(self._subscriptions):
            subscription.close()
        self._subscriptions.clear()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

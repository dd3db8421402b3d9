"""Realtime Ingestion: applies pushed job changes to a row store."""

import asyncio
import logging

from fo_tracker.application.interfaces import JobChangeFeed, JobSubscription
from fo_tracker.application.services.row_store import RowStore
from fo_tracker.domain.exceptions import RemoteError

logger = logging.getLogger(__name__)


class RealtimeIngestion:
    """Asyncio task that drains a feed subscription into the row store.

    Events are applied in delivery order, each one fully before the next.
    The pending-edit overlay is never touched, so a pushed update under a
    staged edit only moves the stored baseline.

    If the feed drops the subscription (a subscriber that falls behind is
    disconnected), ingestion subscribes again and reloads the store, since
    events may have been missed in between.
    """

    def __init__(self, feed: JobChangeFeed, store: RowStore) -> None:
        self._feed = feed
        self._store = store
        self._subscription: JobSubscription | None = None
        self._task: asyncio.Task | None = None
        self._stopping = False
        self.resyncs = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Subscribe and start applying events."""
        if self.running:
            return
        self._stopping = False
        self._subscription = self._feed.subscribe()
        self._task = asyncio.create_task(self._run())
        logger.info("Realtime ingestion started")

    async def stop(self) -> None:
        """Unsubscribe and stop the ingestion task."""
        self._stopping = True
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Realtime ingestion stopped")

    async def _run(self) -> None:
        while not self._stopping and self._subscription is not None:
            await self._drain(self._subscription)
            if self._stopping:
                return
            await self._resync()

    async def _drain(self, subscription: JobSubscription) -> None:
        async for event in subscription:
            try:
                self._store.apply_remote_event(event)
            except Exception:
                logger.exception(
                    "Failed to apply %s event for job %s",
                    event.change_type.value,
                    event.job_id,
                )

    async def _resync(self) -> None:
        # Subscribe before reloading so nothing written after the reload is lost.
        logger.warning("Realtime subscription dropped: resubscribing and reloading rows")
        self._subscription = self._feed.subscribe()
        self.resyncs += 1
        try:
            await self._store.load()
        except RemoteError as exc:
            logger.error("Reload after realtime resync failed: %s", exc)
            self._store.invalidate()

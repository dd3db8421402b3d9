"""Registry of live edit sessions, one per client session id."""

import logging
import time
from collections.abc import Callable

from fo_tracker.application.services.job_session import JobSession

logger = logging.getLogger(__name__)


class JobSessionRegistry:
    """Creates, loads and tears down ``JobSession`` objects on demand.

    ``session_factory`` builds an unloaded session; the registry loads it and
    starts its realtime ingestion the first time the id is seen.

    With ``idle_timeout`` (seconds) set, any session not requested for that
    long is closed the next time the registry is used. A session whose save
    is still running is never evicted. Unsaved edits of an evicted session
    are lost.
    """

    def __init__(
        self,
        session_factory: Callable[[], JobSession],
        idle_timeout: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._session_factory = session_factory
        self._idle_timeout = idle_timeout
        self._clock = clock
        self._sessions: dict[str, JobSession] = {}
        self._last_seen: dict[str, float] = {}

    async def get(self, session_id: str) -> JobSession:
        await self.evict_idle(keep=session_id)

        session = self._sessions.get(session_id)
        if session is None:
            session = self._session_factory()
            self._sessions[session_id] = session
            await session.start_realtime()
            logger.info("Opened edit session %s", session_id)
        self._last_seen[session_id] = self._clock()
        if not session.is_loaded:
            await session.load()
        return session

    async def evict_idle(self, keep: str | None = None) -> list[str]:
        """Close sessions idle for longer than ``idle_timeout``; returns their ids."""
        if self._idle_timeout is None:
            return []
        cutoff = self._clock() - self._idle_timeout
        idle = [
            session_id
            for session_id, seen in self._last_seen.items()
            if session_id != keep
            and seen < cutoff
            and not self._sessions[session_id].flush_in_progress
        ]
        for session_id in idle:
            pending = len(self._sessions[session_id].pending_job_ids)
            if pending:
                logger.warning(
                    "Evicting idle edit session %s with %d unsaved job(s)", session_id, pending
                )
            await self.close(session_id)
        return idle

    async def close(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        self._last_seen.pop(session_id, None)
        if session is not None:
            await session.close()
            logger.info("Closed edit session %s", session_id)

    async def shutdown(self) -> None:
        """Close every open session."""
        for session_id in list(self._sessions):
            await self.close(session_id)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

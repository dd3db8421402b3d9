"""Row Store: last-fetched snapshot of jobs and the active designer roster."""

import logging

from fo_tracker.application.interfaces import DesignerRepository, JobRepository
from fo_tracker.domain.entities import ChangeType, Designer, Job, JobChangeEvent
from fo_tracker.domain.exceptions import RemoteError

logger = logging.getLogger(__name__)


class RowStore:
    """Holds the authoritative rows the edit session is layered on.

    Replaced wholesale by ``load()`` and patched incrementally by realtime
    events. No validation happens here.
    """

    def __init__(
        self,
        job_repository: JobRepository,
        designer_repository: DesignerRepository,
    ) -> None:
        self._job_repository = job_repository
        self._designer_repository = designer_repository
        self._jobs: list[Job] = []
        self._designers: list[Designer] = []
        self._loaded = False
        self.load_error: str | None = None

    @property
    def jobs(self) -> list[Job]:
        return list(self._jobs)

    @property
    def designers(self) -> list[Designer]:
        return list(self._designers)

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    async def load(self) -> tuple[list[Designer], list[Job]]:
        """Fetch the active roster and every job, replacing all prior state.

        A failure records ``load_error`` and re-raises. A store that never
        loaded stays not ready; a loaded one keeps its last good snapshot.
        """
        try:
            designers = await self._designer_repository.fetch_designers(active_only=True)
            jobs = await self._job_repository.fetch_jobs()
        except RemoteError as exc:
            logger.error("Failed to load rows: %s", exc)
            self.load_error = str(exc)
            raise

        self._designers = [d for d in designers if d.active]
        self._jobs = sorted(jobs, key=lambda j: j.created_at, reverse=True)
        self._loaded = True
        self.load_error = None
        logger.info(
            "Row store loaded: %d jobs, %d designers",
            len(self._jobs),
            len(self._designers),
        )
        return self.designers, self.jobs

    def invalidate(self) -> None:
        """Mark the snapshot as stale so the next caller reloads it."""
        self._loaded = False

    def get(self, job_id: str) -> Job | None:
        for job in self._jobs:
            if job.id == job_id:
                return job
        return None

    def designer_name(self, designer_id: str | None) -> str:
        """Resolve a designer id to a display name ("" when unknown or unassigned)."""
        if designer_id is None:
            return ""
        for designer in self._designers:
            if designer.id == designer_id:
                return designer.name
        return ""

    def designer_names(self) -> dict[str, str]:
        return {d.id: d.name for d in self._designers}

    def remove(self, job_id: str) -> bool:
        before = len(self._jobs)
        self._jobs = [j for j in self._jobs if j.id != job_id]
        return len(self._jobs) != before

    def apply_remote_event(self, event: JobChangeEvent) -> None:
        """Merge one pushed change into the snapshot; the overlay is never touched."""
        if event.change_type == ChangeType.INSERT:
            if self.get(event.job_id) is not None:
                logger.debug("Ignoring insert for known job %s", event.job_id)
                return
            record = {**event.record, "id": event.job_id}
            self._jobs.insert(0, Job.from_record(record))
        elif event.change_type == ChangeType.UPDATE:
            job = self.get(event.job_id)
            if job is None:
                logger.debug("Ignoring update for unknown job %s", event.job_id)
                return
            job.merge(event.record)
        elif event.change_type == ChangeType.DELETE:
            self.remove(event.job_id)
        else:
            raise ValueError(f"Unknown change type: {event.change_type}")

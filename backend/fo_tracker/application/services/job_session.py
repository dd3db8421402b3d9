"""Edit session: one user's view of the job table with unsaved edits."""

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from fo_tracker.application.interfaces import (
    DesignerRepository,
    JobChangeFeed,
    JobRepository,
)
from fo_tracker.application.services.business_rules import apply_edit
from fo_tracker.application.services.effective_view import (
    JobFilter,
    SortDirection,
    effective_job,
    filter_jobs,
    sort_jobs,
)
from fo_tracker.application.services.flush_coordinator import FlushCoordinator
from fo_tracker.application.services.pending_edits import PendingEditOverlay
from fo_tracker.application.services.realtime_ingestion import RealtimeIngestion
from fo_tracker.application.services.row_store import RowStore
from fo_tracker.domain.entities import (
    Accepted,
    ChangeType,
    Designer,
    EditOutcome,
    FlushReport,
    Job,
    JobChangeEvent,
    JobField,
    NewJobRecord,
)
from fo_tracker.domain.exceptions import (
    DuplicateWorkOrderError,
    EntityNotFoundError,
    RemoteError,
    ValidationError,
)

logger = logging.getLogger(__name__)

MIN_WORK_ORDER = 1
MAX_WORK_ORDER = 9999


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobSession:
    """Owns the row store, the pending-edit overlay and the flush coordinator.

    All mutation happens on one event loop. Remote calls suspend at the
    boundary; each resumption applies its state change completely before
    the next event is handled.
    """

    def __init__(
        self,
        job_repository: JobRepository,
        designer_repository: DesignerRepository,
        feed: JobChangeFeed | None = None,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._job_repository = job_repository
        self._now = now
        self.store = RowStore(job_repository, designer_repository)
        self.overlay = PendingEditOverlay()
        self._coordinator = FlushCoordinator(job_repository, self.store, self.overlay, now=now)
        self._ingestion = RealtimeIngestion(feed, self.store) if feed is not None else None
        self._flushing = False

    # ── Loading ──────────────────────────────────────────────────────

    @property
    def is_loaded(self) -> bool:
        return self.store.is_loaded

    @property
    def load_error(self) -> str | None:
        return self.store.load_error

    async def load(self) -> None:
        """Fetch designers and jobs. Raises RemoteError; retry with ``refresh()``."""
        await self.store.load()

    async def refresh(self) -> None:
        await self.store.load()

    @property
    def designers(self) -> list[Designer]:
        return self.store.designers

    # ── Editing ──────────────────────────────────────────────────────

    def _require_job(self, job_id: str) -> Job:
        job = self.store.get(job_id)
        if job is None:
            raise EntityNotFoundError("Job", job_id)
        return job

    def edit(self, job_id: str, field: JobField | str, value: Any) -> EditOutcome:
        """Run an edit through the business rules and stage it when accepted.

        Raises EntityNotFoundError for an unknown job and ValidationError for
        a value of the wrong type or a designer outside the active roster.
        """
        job = self._require_job(job_id)
        if field == JobField.DESIGNER_ID:
            if value == "":
                value = None
            if isinstance(value, str) and value not in self.store.designer_names():
                raise ValidationError(f"unknown designer '{value}'")

        outcome = apply_edit(job, field, value, self.overlay, now=self._now)
        if isinstance(outcome, Accepted):
            self.overlay.propose(job.id, outcome.updates, baseline_token=job.updated_at)
            if outcome.warning:
                logger.info("FO %s: %s", job.work_order_number, outcome.warning)
        else:
            logger.info("Edit rejected for FO %s: %s", job.work_order_number, outcome.reason)
        return outcome

    def discard(self, job_id: str) -> None:
        self.overlay.clear(job_id)

    def discard_all(self) -> None:
        self.overlay.discard_all()

    @property
    def has_pending(self) -> bool:
        return bool(self.overlay)

    @property
    def pending_job_ids(self) -> list[str]:
        return self.overlay.job_ids()

    # ── Reading ──────────────────────────────────────────────────────

    def view(
        self,
        job_filter: JobFilter | None = None,
        sort_column: JobField | str = JobField.CREATED_AT,
        direction: SortDirection | str = SortDirection.DESC,
    ) -> list[Job]:
        """Filtered, sorted rows with staged edits applied."""
        rows = filter_jobs(self.store.jobs, job_filter or JobFilter(), self.overlay)
        rows = sort_jobs(
            rows,
            sort_column,
            direction,
            overlay=self.overlay,
            designer_names=self.store.designer_names(),
        )
        return [effective_job(job, self.overlay) for job in rows]

    # ── Saving ───────────────────────────────────────────────────────

    @property
    def flush_in_progress(self) -> bool:
        """True while a save is running; the caller should disable saving meanwhile."""
        return self._flushing

    async def save(self) -> FlushReport:
        self._flushing = True
        try:
            return await self._coordinator.flush()
        finally:
            self._flushing = False

    # ── Commands ─────────────────────────────────────────────────────

    async def create_jobs(self, work_order_number: int, items: list[str]) -> list[Job]:
        """Insert one job per non-blank item under a new work-order number."""
        if not MIN_WORK_ORDER <= work_order_number <= MAX_WORK_ORDER:
            raise ValidationError(
                f"work-order number must be between {MIN_WORK_ORDER} and {MAX_WORK_ORDER}"
            )
        valid_items = [item.strip() for item in items if item.strip()]
        if not valid_items:
            raise ValidationError("at least one item is required")

        if await self._job_repository.count_by_work_order(work_order_number) > 0:
            raise DuplicateWorkOrderError(work_order_number)

        records = [NewJobRecord(work_order_number=work_order_number, item=item) for item in valid_items]
        created = await self._job_repository.insert_jobs(records)
        logger.info("Created %d job(s) for FO %s", len(created), work_order_number)

        try:
            await self.store.load()
        except RemoteError:
            logger.warning("Reload after insert failed; adding new rows locally")
            for job in created:
                self.store.apply_remote_event(
                    JobChangeEvent(ChangeType.INSERT, job.id, job.to_record())
                )
        return created

    async def delete_job(self, job_id: str) -> None:
        """Delete a job remotely, then drop it and its pending edits locally.

        A RemoteError leaves the store and overlay untouched.
        """
        deleted = await self._job_repository.delete_job(job_id)
        removed = self.store.remove(job_id)
        self.overlay.clear(job_id)
        if not deleted and not removed:
            raise EntityNotFoundError("Job", job_id)

    # ── Realtime ─────────────────────────────────────────────────────

    async def start_realtime(self) -> None:
        if self._ingestion is not None:
            await self._ingestion.start()

    async def close(self) -> None:
        """Tear down: unsubscribe from the realtime feed."""
        if self._ingestion is not None:
            await self._ingestion.stop()

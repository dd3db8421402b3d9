"""Reconciliation/Flush Coordinator: commits staged edits with conflict detection."""

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from fo_tracker.application.interfaces import JobRepository
from fo_tracker.application.services.business_rules import path_required_message
from fo_tracker.application.services.effective_view import effective
from fo_tracker.application.services.pending_edits import PendingEditOverlay
from fo_tracker.application.services.row_store import RowStore
from fo_tracker.domain.entities import FlushReport, FlushStatus, Job, JobField
from fo_tracker.domain.exceptions import ConflictError, RemoteError
from fo_tracker.infrastructure.logging.colored_logger import FlushLogger, FlushStage

plog = FlushLogger("FlushCoordinator")

NOTHING_TO_SAVE = "nothing to save"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _work_order_label(store: RowStore, job_id: str) -> str:
    job = store.get(job_id)
    return f"FO {job.work_order_number}" if job else f"job {job_id}"


class FlushCoordinator:
    """Writes every pending bag whose row has not changed remotely since editing began.

    Conflicted and failed rows stay pending; only succeeded rows are
    released from the overlay. Per-row errors never abort the batch. The
    only early abort is the path check on paginated jobs, before any write.
    The caller must not start a second flush while one is running.
    """

    def __init__(
        self,
        job_repository: JobRepository,
        store: RowStore,
        overlay: PendingEditOverlay,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._job_repository = job_repository
        self._store = store
        self._overlay = overlay
        self._now = now

    async def flush(self) -> FlushReport:
        snapshot = self._overlay.all()
        if not snapshot:
            return FlushReport(status=FlushStatus.NOTHING_TO_SAVE, message=NOTHING_TO_SAVE)

        plog.separator("flush")
        plog.step_start(FlushStage.FLUSH, "Saving pending edits", rows=len(snapshot))

        invalid = self._invalid_work_orders(snapshot)
        if invalid:
            message = path_required_message(invalid)
            plog.step_error(FlushStage.VALIDATE, f"Flush rejected: {message}")
            return FlushReport(
                status=FlushStatus.REJECTED,
                message=message,
                invalid_work_orders=invalid,
            )

        try:
            server_tokens = await self._job_repository.fetch_concurrency_tokens(set(snapshot))
        except RemoteError as exc:
            plog.step_error(FlushStage.TOKENS, "Could not fetch concurrency tokens", error=exc)
            return FlushReport(
                status=FlushStatus.FAILURE,
                message=f"could not save changes: {exc.message}",
                failed=len(snapshot),
                failed_ids=list(snapshot),
            )

        report = FlushReport(status=FlushStatus.FAILURE, message="")
        written: dict[str, tuple[dict[str, Any], datetime | None]] = {}

        for job_id, bag in snapshot.items():
            label = _work_order_label(self._store, job_id)
            if job_id not in server_tokens:
                plog.step_warning(FlushStage.CONFLICT, f"{label} no longer exists remotely")
                report.conflicted_ids.append(job_id)
                continue

            server_token = server_tokens[job_id]
            baseline = self._overlay.baseline_token(job_id)
            if baseline is None:
                baseline = server_token
            if server_token != baseline:
                plog.step_warning(
                    FlushStage.CONFLICT,
                    f"{label} was changed by someone else",
                    expected=baseline,
                    actual=server_token,
                )
                report.conflicted_ids.append(job_id)
                continue

            fresh_token = self._now()
            updates = {**bag, JobField.UPDATED_AT.value: fresh_token}
            try:
                saved = await self._job_repository.update_job(
                    job_id, updates, expected_token=server_token
                )
            except ConflictError:
                plog.step_warning(FlushStage.CONFLICT, f"{label} changed during the write")
                report.conflicted_ids.append(job_id)
                continue
            except RemoteError as exc:
                plog.step_error(FlushStage.WRITE, f"Failed to write {label}", error=exc)
                report.failed_ids.append(job_id)
                continue

            plog.detail(f"Wrote {label}", columns=len(bag))
            report.succeeded_ids.append(job_id)
            written[job_id] = (bag, saved.updated_at)

        report.succeeded = len(report.succeeded_ids)
        report.conflicted = len(report.conflicted_ids)
        report.failed = len(report.failed_ids)

        if report.succeeded or report.conflicted:
            report.refreshed = await self._refresh()

        for job_id, (bag, saved_token) in written.items():
            self._overlay.release_flushed(job_id, bag, new_baseline=saved_token)

        if report.refreshed:
            for job_id in report.conflicted_ids:
                job = self._store.get(job_id)
                if job is not None:
                    server = job.to_record()
                    report.conflicts[job_id] = {
                        column: server.get(column) for column in snapshot[job_id]
                    }
                    self._overlay.rebase(job_id, job.updated_at)

        report.status, report.message = self._summarise(report)
        plog.stats(
            succeeded=report.succeeded,
            conflicted=report.conflicted,
            failed=report.failed,
        )
        plog.step_complete(FlushStage.COMPLETE, report.message, status=report.status.value)
        return report

    def _invalid_work_orders(self, snapshot: dict[str, dict[str, Any]]) -> list[int]:
        """FO numbers of jobs that would be committed as paginated without a path."""
        invalid: list[int] = []
        for job_id, bag in snapshot.items():
            job = self._store.get(job_id)
            if job is None:
                continue
            staged = Job.from_record({**job.to_record(), **bag})
            if effective(staged, JobField.PAGINATED) and not str(
                effective(staged, JobField.PATH)
            ).strip():
                invalid.append(job.work_order_number)
        return sorted(invalid)

    async def _refresh(self) -> bool:
        try:
            with plog.timed_step(FlushStage.REFRESH, "Reloading rows"):
                await self._store.load()
        except RemoteError:
            return False
        return True

    @staticmethod
    def _summarise(report: FlushReport) -> tuple[FlushStatus, str]:
        total = report.succeeded + report.conflicted + report.failed
        if report.succeeded == total:
            return FlushStatus.SUCCESS, "all changes saved"
        if report.succeeded:
            return (
                FlushStatus.PARTIAL,
                f"saved {report.succeeded} of {total} jobs; "
                f"{report.conflicted} conflicted, {report.failed} failed",
            )
        if report.conflicted:
            return FlushStatus.FAILURE, "no changes saved: rows were changed by someone else"
        return FlushStatus.FAILURE, "no changes saved, please try again"

"""Unit tests for saving pending edits with conflict detection."""

from datetime import datetime, timedelta, timezone

import pytest

from fo_tracker.application.services.flush_coordinator import NOTHING_TO_SAVE, FlushCoordinator
from fo_tracker.application.services.pending_edits import PendingEditOverlay
from fo_tracker.application.services.row_store import RowStore
from fo_tracker.domain.entities import FlushStatus

T0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)
THEIRS = T0 + timedelta(hours=1)
NOW = T0 + timedelta(hours=2)


class Harness:
    def __init__(self, repo, designer_repository):
        self.repo = repo
        self.store = RowStore(repo, designer_repository)
        self.overlay = PendingEditOverlay()
        self.coordinator = FlushCoordinator(repo, self.store, self.overlay, now=lambda: NOW)

    async def load(self) -> "Harness":
        await self.store.load()
        return self

    def stage(self, job_id: str, **updates) -> None:
        job = self.store.get(job_id)
        self.overlay.propose(job_id, updates, baseline_token=job.updated_at)


@pytest.fixture
def harness(make_job, make_job_repository, designer_repository) -> Harness:
    repo = make_job_repository([
        make_job("j1", 1001, created_at=T0 + timedelta(minutes=2)),
        make_job("j2", 1002, created_at=T0 + timedelta(minutes=1)),
        make_job("j3", 1003, created_at=T0),
    ])
    return Harness(repo, designer_repository)


@pytest.mark.asyncio
async def test_empty_overlay_is_a_no_op(harness: Harness):
    await harness.load()

    report = await harness.coordinator.flush()

    assert report.status == FlushStatus.NOTHING_TO_SAVE
    assert report.message == NOTHING_TO_SAVE
    assert not report.is_error
    assert harness.repo.token_fetches == 0
    assert harness.repo.updates == []


@pytest.mark.asyncio
async def test_successful_flush_writes_bag_with_fresh_token(harness: Harness):
    await harness.load()
    harness.stage("j1", path="/srv/fo/1001", designer_id="d-ana")

    report = await harness.coordinator.flush()

    assert report.status == FlushStatus.SUCCESS
    assert report.message == "all changes saved"
    assert (report.succeeded, report.conflicted, report.failed) == (1, 0, 0)
    assert report.refreshed
    assert harness.repo.updates == [
        ("j1", {"path": "/srv/fo/1001", "designer_id": "d-ana", "updated_at": NOW})
    ]
    assert not harness.overlay
    assert harness.store.get("j1").path == "/srv/fo/1001"
    assert harness.store.get("j1").updated_at == NOW


@pytest.mark.asyncio
async def test_concurrent_remote_change_is_skipped_and_kept(harness: Harness):
    await harness.load()
    harness.stage("j1", path="/mine")
    harness.stage("j2", path="/mine-too")
    harness.repo.touch("j2", THEIRS, path="/theirs")

    report = await harness.coordinator.flush()

    assert report.status == FlushStatus.PARTIAL
    assert (report.succeeded, report.conflicted, report.failed) == (1, 1, 0)
    assert report.succeeded_ids == ["j1"]
    assert report.conflicted_ids == ["j2"]
    assert report.message == "saved 1 of 2 jobs; 1 conflicted, 0 failed"
    assert harness.repo.rows["j2"].path == "/theirs"
    assert harness.overlay.job_ids() == ["j2"]
    assert harness.store.get("j2").path == "/theirs"
    assert report.conflicts == {"j2": {"path": "/theirs"}}


@pytest.mark.asyncio
async def test_conflicted_edit_applies_on_the_next_save(harness: Harness):
    await harness.load()
    harness.stage("j2", path="/mine")
    harness.repo.touch("j2", THEIRS, path="/theirs")

    first = await harness.coordinator.flush()
    second = await harness.coordinator.flush()

    assert first.status == FlushStatus.FAILURE
    assert first.message == "no changes saved: rows were changed by someone else"
    assert first.conflicts == {"j2": {"path": "/theirs"}}
    assert second.status == FlushStatus.SUCCESS
    assert harness.repo.rows["j2"].path == "/mine"


@pytest.mark.asyncio
async def test_paginated_without_path_rejects_whole_flush(harness: Harness):
    await harness.load()
    harness.stage("j2", paginated=True)
    harness.stage("j1", paginated=True)
    harness.stage("j3", path="/fine")

    report = await harness.coordinator.flush()

    assert report.status == FlushStatus.REJECTED
    assert report.is_error
    assert report.invalid_work_orders == [1001, 1002]
    assert report.message == "path required for FO 1001, 1002"
    assert harness.repo.token_fetches == 0
    assert harness.repo.updates == []
    assert len(harness.overlay) == 3


@pytest.mark.asyncio
async def test_stored_path_satisfies_pagination(make_job, make_job_repository, designer_repository):
    repo = make_job_repository([make_job("j1", 1001, path="/srv/fo/1001")])
    harness = await Harness(repo, designer_repository).load()
    harness.stage("j1", paginated=True)

    report = await harness.coordinator.flush()

    assert report.status == FlushStatus.SUCCESS


@pytest.mark.asyncio
async def test_token_fetch_failure_fails_every_row(harness: Harness):
    await harness.load()
    harness.stage("j1", path="/a")
    harness.stage("j2", path="/b")
    harness.repo.fail.add("fetch_concurrency_tokens")

    report = await harness.coordinator.flush()

    assert report.status == FlushStatus.FAILURE
    assert report.failed == 2
    assert set(report.failed_ids) == {"j1", "j2"}
    assert harness.repo.updates == []
    assert len(harness.overlay) == 2


@pytest.mark.asyncio
async def test_write_failure_keeps_edits(harness: Harness):
    await harness.load()
    harness.stage("j1", path="/a")
    harness.repo.fail.add("update_job")

    report = await harness.coordinator.flush()

    assert report.status == FlushStatus.FAILURE
    assert report.message == "no changes saved, please try again"
    assert report.failed_ids == ["j1"]
    assert not report.refreshed
    assert harness.overlay.has("j1")


@pytest.mark.asyncio
async def test_row_deleted_remotely_counts_as_conflict(harness: Harness):
    await harness.load()
    harness.stage("j3", path="/a")
    del harness.repo.rows["j3"]

    report = await harness.coordinator.flush()

    assert report.conflicted_ids == ["j3"]
    assert report.status == FlushStatus.FAILURE
    assert harness.overlay.has("j3")
    assert report.conflicts == {}


@pytest.mark.asyncio
async def test_reload_failure_is_reported_not_raised(harness: Harness):
    await harness.load()
    harness.stage("j1", path="/a")
    harness.repo.fail.add("fetch_jobs")

    report = await harness.coordinator.flush()

    assert report.status == FlushStatus.SUCCESS
    assert not report.refreshed
    assert not harness.overlay

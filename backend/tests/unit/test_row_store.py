"""Unit tests for the RowStore snapshot and remote event merging."""

from datetime import datetime, timedelta, timezone

import pytest

from fo_tracker.application.services.row_store import RowStore
from fo_tracker.domain.entities import ChangeType, JobChangeEvent
from fo_tracker.domain.exceptions import RemoteError

T0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def store(make_job, make_job_repository, designer_repository) -> RowStore:
    repo = make_job_repository([
        make_job("old", 1000, created_at=T0),
        make_job("new", 1001, created_at=T0 + timedelta(days=1)),
    ])
    return RowStore(repo, designer_repository)


@pytest.mark.asyncio
async def test_load_orders_jobs_and_keeps_active_designers(store: RowStore):
    designers, jobs = await store.load()

    assert [j.id for j in jobs] == ["new", "old"]
    assert [d.name for d in designers] == ["Ana", "bruno"]
    assert store.is_loaded
    assert store.load_error is None


@pytest.mark.asyncio
async def test_load_failure_sets_error_and_raises(job_repository, designer_repository):
    repo = job_repository
    repo.fail.add("fetch_jobs")
    store = RowStore(repo, designer_repository)

    with pytest.raises(RemoteError):
        await store.load()

    assert not store.is_loaded
    assert "backend unavailable" in store.load_error


@pytest.mark.asyncio
async def test_failed_reload_keeps_last_snapshot(store: RowStore, designer_repository):
    await store.load()
    designer_repository.fail = True

    with pytest.raises(RemoteError):
        await store.load()

    assert len(store.jobs) == 2
    assert store.is_loaded


@pytest.mark.asyncio
async def test_insert_event_prepends_unknown_job(store: RowStore):
    await store.load()

    store.apply_remote_event(
        JobChangeEvent(
            ChangeType.INSERT,
            "pushed",
            {"work_order_number": 1002, "item": "Cartaz", "created_at": "2024-03-05T10:00:00Z"},
        )
    )

    assert store.jobs[0].id == "pushed"
    assert store.jobs[0].created_at.tzinfo is not None


@pytest.mark.asyncio
async def test_insert_event_for_known_job_is_ignored(store: RowStore):
    await store.load()

    store.apply_remote_event(
        JobChangeEvent(ChangeType.INSERT, "old", {"work_order_number": 9, "item": "dup"})
    )

    assert len(store.jobs) == 2
    assert store.get("old").work_order_number == 1000


@pytest.mark.asyncio
async def test_update_event_merges_and_ignores_unknown(store: RowStore):
    await store.load()
    token = T0 + timedelta(hours=3)

    store.apply_remote_event(
        JobChangeEvent(ChangeType.UPDATE, "old", {"path": "/srv", "updated_at": token.isoformat()})
    )
    store.apply_remote_event(JobChangeEvent(ChangeType.UPDATE, "ghost", {"path": "/x"}))

    assert store.get("old").path == "/srv"
    assert store.get("old").updated_at == token
    assert store.get("ghost") is None


@pytest.mark.asyncio
async def test_delete_event_removes_row(store: RowStore):
    await store.load()

    store.apply_remote_event(JobChangeEvent(ChangeType.DELETE, "new"))

    assert [j.id for j in store.jobs] == ["old"]


@pytest.mark.asyncio
async def test_designer_name_lookup(store: RowStore):
    await store.load()

    assert store.designer_name("d-ana") == "Ana"
    assert store.designer_name(None) == ""
    assert store.designer_name("d-old") == ""

"""Shared in-memory fakes for the job store ports."""

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from fo_tracker.application.interfaces import DesignerRepository, JobRepository
from fo_tracker.domain.entities import Designer, Job, NewJobRecord
from fo_tracker.domain.exceptions import ConflictError, EntityNotFoundError, RemoteError

T0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


# ── Fakes ────────────────────────────────────────────────────────────


class FakeJobRepository(JobRepository):
    """In-memory job table.

    Returns copies so the caller never shares objects with the "server".
    Operations listed in ``fail`` raise RemoteError.
    """

    def __init__(self, jobs: list[Job] | None = None):
        self.rows: dict[str, Job] = {job.id: replace(job) for job in jobs or []}
        self.fail: set[str] = set()
        self.updates: list[tuple[str, dict[str, Any]]] = []
        self.token_fetches = 0
        self._next_id = 1

    def _check(self, operation: str) -> None:
        if operation in self.fail:
            raise RemoteError(operation, "backend unavailable")

    def touch(self, job_id: str, token: datetime, **changes: Any) -> None:
        """Simulate another user writing the row."""
        self.rows[job_id].merge({**changes, "updated_at": token})

    async def fetch_jobs(self) -> list[Job]:
        self._check("fetch_jobs")
        rows = sorted(self.rows.values(), key=lambda j: j.created_at, reverse=True)
        return [replace(job) for job in rows]

    async def fetch_concurrency_tokens(self, job_ids: set[str]) -> dict[str, datetime | None]:
        self._check("fetch_concurrency_tokens")
        self.token_fetches += 1
        return {i: self.rows[i].updated_at for i in job_ids if i in self.rows}

    async def update_job(self, job_id, updates, *, expected_token=None) -> Job:
        self._check("update_job")
        job = self.rows.get(job_id)
        if job is None:
            if expected_token is not None:
                raise ConflictError(job_id, expected=expected_token)
            raise EntityNotFoundError("Job", job_id)
        if expected_token is not None and job.updated_at != expected_token:
            raise ConflictError(job_id, expected=expected_token, actual=job.updated_at)
        job.merge(updates)
        self.updates.append((job_id, dict(updates)))
        return replace(job)

    async def delete_job(self, job_id: str) -> bool:
        self._check("delete_job")
        return self.rows.pop(job_id, None) is not None

    async def insert_jobs(self, records: list[NewJobRecord]) -> list[Job]:
        self._check("insert_jobs")
        created = []
        for record in records:
            stamp = T0 + timedelta(days=30, minutes=self._next_id)
            job = Job(
                id=f"new-{self._next_id}",
                work_order_number=record.work_order_number,
                item=record.item,
                created_at=stamp,
                updated_at=stamp,
            )
            self._next_id += 1
            self.rows[job.id] = job
            created.append(replace(job))
        return created

    async def count_by_work_order(self, work_order_number: int) -> int:
        self._check("count_by_work_order")
        return sum(1 for j in self.rows.values() if j.work_order_number == work_order_number)


class FakeDesignerRepository(DesignerRepository):
    def __init__(self, designers: list[Designer] | None = None):
        self.designers = designers or []
        self.fail = False

    async def fetch_designers(self, active_only: bool = True) -> list[Designer]:
        if self.fail:
            raise RemoteError("fetch_designers", "backend unavailable")
        if active_only:
            return [d for d in self.designers if d.active]
        return list(self.designers)


# ── Fixtures ─────────────────────────────────────────────────────────


@pytest.fixture
def make_job():
    """Factory for jobs stamped at a fixed time unless told otherwise."""

    def _make(job_id: str, work_order_number: int, item: str = "Expositor", **fields: Any) -> Job:
        fields.setdefault("created_at", T0)
        fields.setdefault("updated_at", T0)
        return Job(id=job_id, work_order_number=work_order_number, item=item, **fields)

    return _make


@pytest.fixture
def designers() -> list[Designer]:
    return [
        Designer(id="d-ana", name="Ana"),
        Designer(id="d-bruno", name="bruno"),
        Designer(id="d-old", name="Carla", active=False),
    ]


@pytest.fixture
def designer_repository(designers) -> FakeDesignerRepository:
    return FakeDesignerRepository(designers)


@pytest.fixture
def job_repository() -> FakeJobRepository:
    return FakeJobRepository()


@pytest.fixture
def make_job_repository():
    """Build a FakeJobRepository pre-filled with rows."""
    return FakeJobRepository

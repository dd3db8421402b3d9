"""Concrete repository implementation for jobs backed by SQLAlchemy.

Each call opens its own short-lived session from the factory, because the
edit sessions that use this repository live much longer than one request.
Every committed write is published on the change feed so other sessions
see it as a realtime event.
"""

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fo_tracker.application.interfaces import JobChangeFeed, JobRepository
from fo_tracker.domain.entities import (
    ChangeType,
    Job,
    JobChangeEvent,
    JobField,
    NewJobRecord,
    TIMESTAMP_FIELDS,
)
from fo_tracker.domain.exceptions import ConflictError, EntityNotFoundError, RemoteError
from fo_tracker.infrastructure.database.models import JobModel

logger = logging.getLogger(__name__)

_WRITABLE_COLUMNS = frozenset(f for f in JobField if f is not JobField.ID)


def _as_utc(value: datetime | None) -> datetime | None:
    """SQLite hands back naive datetimes; the application works in aware UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SQLAlchemyJobRepository(JobRepository):
    """Implements the JobRepository port using SQLAlchemy async sessions."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        publisher: JobChangeFeed | None = None,
    ):
        self._session_factory = session_factory
        self._publisher = publisher

    def _to_entity(self, model: JobModel) -> Job:
        """Map ORM model → domain entity."""
        return Job(
            id=model.id,
            work_order_number=model.work_order_number,
            item=model.item,
            created_at=_as_utc(model.created_at),
            designer_id=model.designer_id,
            in_progress=model.in_progress,
            has_questions=model.has_questions,
            mockup_sent=model.mockup_sent,
            paginated=model.paginated,
            questions_at=_as_utc(model.questions_at),
            mockup_sent_at=_as_utc(model.mockup_sent_at),
            completed_at=_as_utc(model.completed_at),
            path=model.path,
            updated_at=_as_utc(model.updated_at),
        )

    def _to_model(self, record: NewJobRecord) -> JobModel:
        """Map insert payload → ORM model; id and timestamps come from column defaults."""
        return JobModel(
            work_order_number=record.work_order_number,
            item=record.item,
            in_progress=record.in_progress,
            has_questions=record.has_questions,
            mockup_sent=record.mockup_sent,
            paginated=record.paginated,
        )

    def _to_columns(self, updates: dict[str, Any]) -> dict[str, Any]:
        values: dict[str, Any] = {}
        for key, value in updates.items():
            column = JobField(key)
            if column not in _WRITABLE_COLUMNS:
                raise ValueError(f"Column '{column.value}' cannot be updated")
            if column in TIMESTAMP_FIELDS:
                value = _as_utc(value)
            values[column.value] = value
        return values

    async def _publish(self, event: JobChangeEvent) -> None:
        if self._publisher is not None:
            await self._publisher.broadcast(event)

    # ── Reads ────────────────────────────────────────────────────────

    async def fetch_jobs(self) -> list[Job]:
        stmt = select(JobModel).order_by(JobModel.created_at.desc())
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return [self._to_entity(row) for row in result.scalars().all()]
        except (SQLAlchemyError, OSError) as exc:
            logger.error("Failed to fetch jobs: %s", exc)
            raise RemoteError("fetch_jobs", str(exc)) from exc

    async def fetch_concurrency_tokens(
        self, job_ids: set[str]
    ) -> dict[str, datetime | None]:
        if not job_ids:
            return {}
        stmt = select(JobModel.id, JobModel.updated_at).where(JobModel.id.in_(job_ids))
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return {row.id: _as_utc(row.updated_at) for row in result}
        except (SQLAlchemyError, OSError) as exc:
            logger.error("Failed to fetch concurrency tokens: %s", exc)
            raise RemoteError("fetch_concurrency_tokens", str(exc)) from exc

    async def count_by_work_order(self, work_order_number: int) -> int:
        stmt = (
            select(func.count())
            .select_from(JobModel)
            .where(JobModel.work_order_number == work_order_number)
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return result.scalar_one()
        except (SQLAlchemyError, OSError) as exc:
            logger.error("Failed to count FO %s: %s", work_order_number, exc)
            raise RemoteError("count_by_work_order", str(exc)) from exc

    # ── Writes ───────────────────────────────────────────────────────

    async def update_job(
        self,
        job_id: str,
        updates: dict[str, Any],
        *,
        expected_token: datetime | None = None,
    ) -> Job:
        values = self._to_columns(updates)
        stmt = (
            update(JobModel)
            .where(JobModel.id == job_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if expected_token is not None:
            stmt = stmt.where(JobModel.updated_at == _as_utc(expected_token))

        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                if result.rowcount == 0:
                    await session.rollback()
                    current = await session.execute(
                        select(JobModel.updated_at).where(JobModel.id == job_id)
                    )
                    actual = current.scalar_one_or_none()
                    if expected_token is None and actual is None:
                        raise EntityNotFoundError("Job", job_id)
                    raise ConflictError(job_id, expected=expected_token, actual=_as_utc(actual))
                await session.commit()
                model = await session.get(JobModel, job_id, populate_existing=True)
                saved = self._to_entity(model)
        except (SQLAlchemyError, OSError) as exc:
            logger.error("Failed to update job %s: %s", job_id, exc)
            raise RemoteError("update_job", str(exc)) from exc

        await self._publish(
            JobChangeEvent(
                ChangeType.UPDATE,
                job_id,
                {column: saved.get(column) for column in values},
            )
        )
        return saved

    async def insert_jobs(self, records: list[NewJobRecord]) -> list[Job]:
        models = [self._to_model(record) for record in records]
        try:
            async with self._session_factory() as session:
                session.add_all(models)
                await session.commit()
                created = [self._to_entity(model) for model in models]
        except (SQLAlchemyError, OSError) as exc:
            logger.error("Failed to insert %d job(s): %s", len(records), exc)
            raise RemoteError("insert_jobs", str(exc)) from exc

        for job in created:
            await self._publish(JobChangeEvent(ChangeType.INSERT, job.id, job.to_record()))
        return created

    async def delete_job(self, job_id: str) -> bool:
        stmt = (
            delete(JobModel)
            .where(JobModel.id == job_id)
            .execution_options(synchronize_session=False)
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                await session.commit()
                deleted = result.rowcount > 0
        except (SQLAlchemyError, OSError) as exc:
            logger.error("Failed to delete job %s: %s", job_id, exc)
            raise RemoteError("delete_job", str(exc)) from exc

        if deleted:
            await self._publish(JobChangeEvent(ChangeType.DELETE, job_id))
        return deleted

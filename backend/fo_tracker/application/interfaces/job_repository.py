"""Abstract repository interface (port) for job persistence."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from fo_tracker.domain.entities import Job, NewJobRecord


class JobRepository(ABC):
    """Port for the remote job store: implemented in the infrastructure layer.

    Implementations raise ``RemoteError`` for transport/backend failures and
    ``ConflictError`` when an update's expected token no longer matches.
    """

    @abstractmethod
    async def fetch_jobs(self) -> list[Job]:
        """Retrieve every job, most recently created first."""
        ...

    @abstractmethod
    async def fetch_concurrency_tokens(
        self, job_ids: set[str]
    ) -> dict[str, datetime | None]:
        """Return the current ``updated_at`` of each listed job that still exists."""
        ...

    @abstractmethod
    async def update_job(
        self,
        job_id: str,
        updates: dict[str, Any],
        *,
        expected_token: datetime | None = None,
    ) -> Job:
        """Apply column updates; ``updates`` must carry a fresh ``updated_at``.

        When ``expected_token`` is given the write only happens if the stored
        token still equals it.
        """
        ...

    @abstractmethod
    async def delete_job(self, job_id: str) -> bool:
        """Delete a job. Returns True if deleted, False if not found."""
        ...

    @abstractmethod
    async def insert_jobs(self, records: list[NewJobRecord]) -> list[Job]:
        """Insert a batch of new jobs and return them with server-assigned fields."""
        ...

    @abstractmethod
    async def count_by_work_order(self, work_order_number: int) -> int:
        """Count jobs already using a work-order number."""
        ...

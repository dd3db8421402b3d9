"""Pending-Edit Overlay: unsaved local field changes keyed by job id."""

from datetime import datetime
from typing import Any

from fo_tracker.domain.entities import JobField


def _column(key: Any) -> str:
    return JobField(key).value


class PendingEditOverlay:
    """Partial update bags layered over the row store until they are flushed.

    Each bag remembers the concurrency token of its row at the moment the
    first edit was staged; the flush compares the server token against it.
    Mutated synchronously from a single event loop only.
    """

    def __init__(self) -> None:
        self._bags: dict[str, dict[str, Any]] = {}
        self._baselines: dict[str, datetime | None] = {}

    def propose(
        self,
        job_id: str,
        updates: dict[str, Any],
        baseline_token: datetime | None = None,
    ) -> dict[str, Any]:
        """Shallow-merge updates into the job's bag, creating it if needed."""
        bag = self._bags.get(job_id)
        if bag is None:
            bag = {}
            self._bags[job_id] = bag
            self._baselines[job_id] = baseline_token
        for key, value in updates.items():
            bag[_column(key)] = value
        return dict(bag)

    def clear(self, job_id: str) -> None:
        self._bags.pop(job_id, None)
        self._baselines.pop(job_id, None)

    def has(self, job_id: str) -> bool:
        return job_id in self._bags

    def get(self, job_id: str) -> dict[str, Any]:
        return dict(self._bags.get(job_id, {}))

    def value(self, job_id: str, field: JobField | str) -> tuple[bool, Any]:
        """Return ``(present, value)`` for one staged column."""
        bag = self._bags.get(job_id)
        if bag is None:
            return False, None
        column = _column(field)
        if column not in bag:
            return False, None
        return True, bag[column]

    def baseline_token(self, job_id: str) -> datetime | None:
        return self._baselines.get(job_id)

    def all(self) -> dict[str, dict[str, Any]]:
        """Snapshot of every bag; later mutations do not affect the copy."""
        return {job_id: dict(bag) for job_id, bag in self._bags.items()}

    def release_flushed(
        self,
        job_id: str,
        flushed: dict[str, Any],
        new_baseline: datetime | None = None,
    ) -> None:
        """Drop the columns that were written, keeping any edited again since.

        The bag disappears once nothing is left in it; otherwise its baseline
        moves to the token that was just written.
        """
        bag = self._bags.get(job_id)
        if bag is None:
            return
        for column, value in flushed.items():
            if column in bag and bag[column] == value:
                del bag[column]
        if not bag:
            self.clear(job_id)
        else:
            self._baselines[job_id] = new_baseline

    def rebase(self, job_id: str, token: datetime | None) -> None:
        """Move a pending bag's baseline, e.g. once the refreshed row has been shown."""
        if job_id in self._bags:
            self._baselines[job_id] = token

    def discard_all(self) -> None:
        self._bags.clear()
        self._baselines.clear()

    def job_ids(self) -> list[str]:
        return list(self._bags)

    def __len__(self) -> int:
        return len(self._bags)

    def __bool__(self) -> bool:
        return bool(self._bags)

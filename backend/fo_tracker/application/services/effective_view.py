"""Effective-View Resolver: what a user sees: staged edits over stored rows.

Every read path (render, sort, filter, validation) goes through
``effective()`` so unsaved edits show up immediately.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Any

from fo_tracker.application.services.pending_edits import PendingEditOverlay
from fo_tracker.domain.entities import (
    BOOLEAN_FIELDS,
    INTEGER_FIELDS,
    TEXT_FIELDS,
    TIMESTAMP_FIELDS,
    Job,
    JobField,
)


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class JobFilter:
    """Table filters: hide completed jobs, match FO number and item text."""

    open_only: bool = True
    work_order_query: str = ""
    item_query: str = ""


def default_for(field: JobField) -> Any:
    """Type default used when neither the overlay nor the row has a value."""
    if field in BOOLEAN_FIELDS:
        return False
    if field in TEXT_FIELDS:
        return ""
    return None


def effective(job: Job, field: JobField | str, overlay: PendingEditOverlay | None = None) -> Any:
    column = JobField(field)
    if overlay is not None:
        present, value = overlay.value(job.id, column)
        if present:
            return value
    stored = job.get(column)
    if stored is None:
        return default_for(column)
    return stored


def effective_job(job: Job, overlay: PendingEditOverlay | None = None) -> Job:
    """A copy of ``job`` with its staged edits applied."""
    copy = replace(job)
    if overlay is not None and overlay.has(job.id):
        copy.merge(overlay.get(job.id))
    return copy


def _sort_key(
    job: Job,
    column: JobField,
    overlay: PendingEditOverlay | None,
    designer_names: dict[str, str],
) -> Any:
    value = effective(job, column, overlay)
    if column == JobField.DESIGNER_ID:
        return designer_names.get(value, "").lower() if value else ""
    if column in TIMESTAMP_FIELDS:
        return value.timestamp() if isinstance(value, datetime) else 0
    if column in BOOLEAN_FIELDS:
        return 1 if value else 0
    if column in INTEGER_FIELDS:
        return value if value is not None else 0
    return str(value or "").lower()


def sort_jobs(
    jobs: list[Job],
    column: JobField | str = JobField.CREATED_AT,
    direction: SortDirection | str = SortDirection.DESC,
    overlay: PendingEditOverlay | None = None,
    designer_names: dict[str, str] | None = None,
) -> list[Job]:
    """Stable sort on effective values; ties keep their input order."""
    column = JobField(column)
    names = designer_names or {}
    return sorted(
        jobs,
        key=lambda job: _sort_key(job, column, overlay, names),
        reverse=SortDirection(direction) == SortDirection.DESC,
    )


def filter_jobs(
    jobs: list[Job],
    job_filter: JobFilter,
    overlay: PendingEditOverlay | None = None,
) -> list[Job]:
    work_order_query = job_filter.work_order_query.strip()
    item_query = job_filter.item_query.strip().lower()
    result = []
    for job in jobs:
        if job_filter.open_only and effective(job, JobField.PAGINATED, overlay):
            continue
        if work_order_query and work_order_query not in str(job.work_order_number):
            continue
        if item_query and item_query not in effective(job, JobField.ITEM, overlay).lower():
            continue
        result.append(job)
    return result

"""Business-Rule Engine: decides what a proposed field edit actually stages.

Stateless: the decision depends only on the job's effective state and the
proposed change. The value type is checked first (flags take a bool, path
and designer take text or None). Rules are checked in order and the first
match wins:

1. ``paginated = True``  → close the job, clear the stage flags, stamp completion
2. ``paginated = False`` → reopen, clear the completion timestamp
3. job already paginated → stage flags and path are frozen
4. ``in_progress = True`` → needs a designer; clears sibling flags
5. ``has_questions = True`` → clears siblings, stamps ``questions_at``
6. ``mockup_sent = True`` → clears siblings, stamps ``mockup_sent_at``
7. assigning a designer → auto-starts the job
8. anything else → staged verbatim
"""

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from fo_tracker.application.services.effective_view import effective
from fo_tracker.application.services.pending_edits import PendingEditOverlay
from fo_tracker.domain.entities import (
    BOOLEAN_FIELDS,
    EDITABLE_FIELDS,
    STAGE_FLAGS,
    Accepted,
    EditOutcome,
    Job,
    JobField,
    Rejected,
)
from fo_tracker.domain.exceptions import ValidationError

COMPLETED_JOB_LOCKED = "cannot alter a completed job"
DESIGNER_REQUIRED = "assign a designer first"

_STAMPED_FLAGS: dict[JobField, JobField] = {
    JobField.HAS_QUESTIONS: JobField.QUESTIONS_AT,
    JobField.MOCKUP_SENT: JobField.MOCKUP_SENT_AT,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def path_required_message(work_order_numbers: list[int]) -> str:
    numbers = ", ".join(str(n) for n in work_order_numbers)
    return f"path required for FO {numbers}"


def _raise_stage(flag: JobField) -> dict[str, Any]:
    """The flag set to True and its siblings cleared."""
    updates: dict[str, Any] = {f.value: False for f in STAGE_FLAGS}
    updates[flag.value] = True
    return updates


def _check_value_type(column: JobField, value: Any) -> None:
    """Flags take a real bool; path and designer take a string or None."""
    if column in BOOLEAN_FIELDS:
        if not isinstance(value, bool):
            raise ValidationError(f"field '{column.value}' expects true or false")
    elif value is not None and not isinstance(value, str):
        raise ValidationError(f"field '{column.value}' expects text")


def apply_edit(
    job: Job,
    field: JobField | str,
    value: Any,
    overlay: PendingEditOverlay | None = None,
    now: Callable[[], datetime] = _utcnow,
) -> EditOutcome:
    """Evaluate one proposed edit against the job's effective state."""
    try:
        column = JobField(field)
    except ValueError:
        raise ValidationError(f"unknown field '{field}'") from None
    if column not in EDITABLE_FIELDS:
        raise ValidationError(f"field '{column.value}' cannot be edited")
    _check_value_type(column, value)

    is_paginated = bool(effective(job, JobField.PAGINATED, overlay))

    if column == JobField.PAGINATED and value is True:
        updates = {f.value: False for f in STAGE_FLAGS}
        updates[JobField.PAGINATED.value] = True
        updates[JobField.COMPLETED_AT.value] = now()
        warning = None
        if not str(effective(job, JobField.PATH, overlay)).strip():
            warning = path_required_message([job.work_order_number])
        return Accepted(updates, warning=warning)

    if column == JobField.PAGINATED:
        return Accepted({
            JobField.PAGINATED.value: False,
            JobField.COMPLETED_AT.value: None,
        })

    if is_paginated and (column in STAGE_FLAGS or column == JobField.PATH):
        return Rejected(COMPLETED_JOB_LOCKED)

    if column == JobField.IN_PROGRESS and value is True:
        if effective(job, JobField.DESIGNER_ID, overlay) is None:
            return Rejected(DESIGNER_REQUIRED)
        return Accepted(_raise_stage(column))

    if column in _STAMPED_FLAGS and value is True:
        updates = _raise_stage(column)
        updates[_STAMPED_FLAGS[column].value] = now()
        return Accepted(updates)

    if column == JobField.DESIGNER_ID and value is not None:
        # A closed job keeps its terminal state; only the assignment changes.
        if is_paginated:
            return Accepted({column.value: value})
        updates = _raise_stage(JobField.IN_PROGRESS)
        updates[column.value] = value
        return Accepted(updates)

    return Accepted({column.value: value})

"""Domain entity for jobs ("folhas de obra") tracked through design stages."""

from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class JobField(str, Enum):
    """Column names of a job row, as persisted and as sent over realtime events."""

    ID = "id"
    WORK_ORDER_NUMBER = "work_order_number"
    ITEM = "item"
    CREATED_AT = "created_at"
    DESIGNER_ID = "designer_id"
    IN_PROGRESS = "in_progress"
    HAS_QUESTIONS = "has_questions"
    MOCKUP_SENT = "mockup_sent"
    PAGINATED = "paginated"
    QUESTIONS_AT = "questions_at"
    MOCKUP_SENT_AT = "mockup_sent_at"
    COMPLETED_AT = "completed_at"
    PATH = "path"
    UPDATED_AT = "updated_at"


class JobStatus(str, Enum):
    """Single-valued view of the four status flags."""

    IDLE = "idle"
    IN_PROGRESS = "in_progress"
    HAS_QUESTIONS = "has_questions"
    MOCKUP_SENT = "mockup_sent"
    PAGINATED = "paginated"


# Flags that are mutually exclusive while a job is open.
STAGE_FLAGS: tuple[JobField, ...] = (
    JobField.IN_PROGRESS,
    JobField.HAS_QUESTIONS,
    JobField.MOCKUP_SENT,
)

BOOLEAN_FIELDS = frozenset({*STAGE_FLAGS, JobField.PAGINATED})
TIMESTAMP_FIELDS = frozenset({
    JobField.CREATED_AT,
    JobField.QUESTIONS_AT,
    JobField.MOCKUP_SENT_AT,
    JobField.COMPLETED_AT,
    JobField.UPDATED_AT,
})
INTEGER_FIELDS = frozenset({JobField.WORK_ORDER_NUMBER})
TEXT_FIELDS = frozenset({JobField.ITEM, JobField.PATH})

# Fields a user may change through the edit session.
EDITABLE_FIELDS = frozenset({JobField.DESIGNER_ID, *BOOLEAN_FIELDS, JobField.PATH})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _column_name(key: Any) -> str:
    return key.value if isinstance(key, JobField) else key


def _parse_timestamp(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


@dataclass
class Job:
    """A unit of design work, identified by its work-order (FO) number.

    ``updated_at`` doubles as the optimistic-concurrency token: every write
    stamps a fresh value, and a flush only overwrites rows whose token is
    still the one the editor started from.
    """

    id: str
    work_order_number: int
    item: str
    created_at: datetime = field(default_factory=_utcnow)
    designer_id: str | None = None
    in_progress: bool = False
    has_questions: bool = False
    mockup_sent: bool = False
    paginated: bool = False
    questions_at: datetime | None = None
    mockup_sent_at: datetime | None = None
    completed_at: datetime | None = None
    path: str | None = None
    updated_at: datetime | None = None

    @property
    def status(self) -> JobStatus:
        if self.paginated:
            return JobStatus.PAGINATED
        if self.in_progress:
            return JobStatus.IN_PROGRESS
        if self.has_questions:
            return JobStatus.HAS_QUESTIONS
        if self.mockup_sent:
            return JobStatus.MOCKUP_SENT
        return JobStatus.IDLE

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Job":
        """Build a Job from a plain row dict, ignoring unknown columns."""
        known = {f.name for f in fields(cls)}
        values = {_column_name(k): v for k, v in record.items() if _column_name(k) in known}
        for column in TIMESTAMP_FIELDS:
            if column.value in values:
                values[column.value] = _parse_timestamp(values[column.value])
        return cls(**values)

    def to_record(self) -> dict[str, Any]:
        return asdict(self)

    def get(self, column: JobField) -> Any:
        return getattr(self, JobField(column).value)

    def merge(self, changes: dict[str, Any]) -> None:
        """Shallow-merge column values into this row; unknown columns are skipped."""
        for key, value in changes.items():
            try:
                column = JobField(key)
            except ValueError:
                continue
            if column in TIMESTAMP_FIELDS:
                value = _parse_timestamp(value)
            setattr(self, column.value, value)


@dataclass
class NewJobRecord:
    """Insert payload for a new job; identity and timestamps are server-assigned."""

    work_order_number: int
    item: str
    in_progress: bool = False
    has_questions: bool = False
    mockup_sent: bool = False
    paginated: bool = False

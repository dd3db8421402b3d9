from .designer import Designer
from .job import (
    Job,
    JobField,
    JobStatus,
    NewJobRecord,
    STAGE_FLAGS,
    BOOLEAN_FIELDS,
    TIMESTAMP_FIELDS,
    INTEGER_FIELDS,
    TEXT_FIELDS,
    EDITABLE_FIELDS,
)
from .job_change_event import ChangeType, JobChangeEvent
from .edit_outcome import Accepted, Rejected, EditOutcome
from .flush_report import FlushReport, FlushStatus
from .metrics import (
    MetricsPeriod,
    DesignerCount,
    DesignerAverage,
    MonthCount,
    TopJob,
    JobMetrics,
)

__all__ = [
    "Designer",
    "Job",
    "JobField",
    "JobStatus",
    "NewJobRecord",
    "STAGE_FLAGS",
    "BOOLEAN_FIELDS",
    "TIMESTAMP_FIELDS",
    "INTEGER_FIELDS",
    "TEXT_FIELDS",
    "EDITABLE_FIELDS",
    "ChangeType",
    "JobChangeEvent",
    "Accepted",
    "Rejected",
    "EditOutcome",
    "FlushReport",
    "FlushStatus",
    "MetricsPeriod",
    "DesignerCount",
    "DesignerAverage",
    "MonthCount",
    "TopJob",
    "JobMetrics",
]

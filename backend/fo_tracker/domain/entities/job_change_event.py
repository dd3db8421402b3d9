"""Domain entity for row-level change notifications pushed by the job store."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ChangeType(str, Enum):
    """Kinds of row change delivered by the realtime feed."""

    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class JobChangeEvent:
    """One insert/update/delete on the jobs table.

    ``record`` holds the full new row for inserts, the changed columns for
    updates, and is empty for deletes.
    """

    change_type: ChangeType
    job_id: str
    record: dict[str, Any] = field(default_factory=dict)

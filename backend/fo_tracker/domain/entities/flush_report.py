"""Domain entity summarising one flush of pending edits."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FlushStatus(str, Enum):
    """Overall outcome of a flush pass."""

    SUCCESS = "success"
    PARTIAL = "partial"
    FAILURE = "failure"
    NOTHING_TO_SAVE = "nothing_to_save"
    REJECTED = "rejected"


@dataclass
class FlushReport:
    """Aggregated per-row results of committing the pending-edit overlay."""

    status: FlushStatus
    message: str
    succeeded: int = 0
    conflicted: int = 0
    failed: int = 0
    succeeded_ids: list[str] = field(default_factory=list)
    conflicted_ids: list[str] = field(default_factory=list)
    failed_ids: list[str] = field(default_factory=list)
    invalid_work_orders: list[int] = field(default_factory=list)
    refreshed: bool = False
    # Current server values of the edited columns, per conflicted job
    conflicts: dict[str, dict[str, Any]] = field(default_factory=dict)

    @property
    def is_error(self) -> bool:
        return self.status in (FlushStatus.FAILURE, FlushStatus.REJECTED)

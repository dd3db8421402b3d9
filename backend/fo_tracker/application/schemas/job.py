"""Pydantic DTOs (Data Transfer Objects) for jobs and the edit session."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from fo_tracker.domain.entities import BOOLEAN_FIELDS, EDITABLE_FIELDS, FlushStatus, JobField


class DesignerResponse(BaseModel):
    """Designer roster entry returned to the client."""

    id: str
    name: str
    email: str = ""

    model_config = {"from_attributes": True}


class JobCreate(BaseModel):
    """Schema for opening a work order with one job per item."""

    work_order_number: int = Field(..., ge=1, le=9999, examples=[1234])
    items: list[str] = Field(..., min_length=1, examples=[["Expositor Sumol verão"]])

    @field_validator("items")
    @classmethod
    def _at_least_one_item(cls, items: list[str]) -> list[str]:
        cleaned = [item.strip() for item in items if item.strip()]
        if not cleaned:
            raise ValueError("at least one item is required")
        return cleaned


class JobEditRequest(BaseModel):
    """A single proposed field change."""

    field: JobField
    value: Any = None

    @field_validator("field")
    @classmethod
    def _editable(cls, field: JobField) -> JobField:
        if field not in EDITABLE_FIELDS:
            raise ValueError(f"field '{field.value}' cannot be edited")
        return field

    @model_validator(mode="after")
    def _value_matches_field(self) -> "JobEditRequest":
        if self.field in BOOLEAN_FIELDS:
            if not isinstance(self.value, bool):
                raise ValueError(f"field '{self.field.value}' expects true or false")
        elif self.value is not None and not isinstance(self.value, str):
            raise ValueError(f"field '{self.field.value}' expects text")
        return self


class JobResponse(BaseModel):
    """Effective job row (stored values with unsaved edits applied)."""

    id: str
    work_order_number: int
    item: str
    created_at: datetime
    designer_id: str | None
    in_progress: bool
    has_questions: bool
    mockup_sent: bool
    paginated: bool
    questions_at: datetime | None
    mockup_sent_at: datetime | None
    completed_at: datetime | None
    path: str | None
    updated_at: datetime | None
    has_pending_edits: bool = False

    model_config = {"from_attributes": True}


class EditOutcomeResponse(BaseModel):
    accepted: bool
    updates: dict[str, Any] = {}
    warning: str | None = None
    reason: str | None = None


class FlushReportResponse(BaseModel):
    """Summary of one save of pending edits."""

    status: FlushStatus
    message: str
    succeeded: int
    conflicted: int
    failed: int
    succeeded_ids: list[str]
    conflicted_ids: list[str]
    failed_ids: list[str]
    invalid_work_orders: list[int]
    refreshed: bool
    conflicts: dict[str, dict[str, Any]] = {}

    model_config = {"from_attributes": True}

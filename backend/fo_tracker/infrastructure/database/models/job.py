"""SQLAlchemy ORM model for the Job ("folha de obra") entity."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from fo_tracker.infrastructure.database.base import Base


def _generate_uuid() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobModel(Base):
    """ORM model: maps to the 'folhas_obra' table."""

    __tablename__ = "folhas_obra"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_generate_uuid)
    work_order_number: Mapped[int] = mapped_column(Integer, nullable=False)
    item: Mapped[str] = mapped_column(Text, nullable=False)
    designer_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("designers.id", ondelete="SET NULL"),
        nullable=True,
    )
    in_progress: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    has_questions: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    mockup_sent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    paginated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    questions_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    mockup_sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    path: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        nullable=False,
    )

    __table_args__ = (
        # Several items can share one work order, so this is not unique;
        # duplicates are rejected before insert.
        Index("ix_folhas_obra_work_order", "work_order_number"),
        Index("ix_folhas_obra_created", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<JobModel(id={self.id}, fo={self.work_order_number}, item='{self.item}')>"

"""SQLAlchemy ORM model for the Designer entity."""

import uuid

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from fo_tracker.infrastructure.database.base import Base


class DesignerModel(Base):
    """ORM model: maps to the 'designers' table."""

    __tablename__ = "designers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)

    def __repr__(self) -> str:
        return f"<DesignerModel(id={self.id}, name='{self.name}', active={self.active})>"

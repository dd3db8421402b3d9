"""Concrete repository for the designer roster backed by SQLAlchemy."""

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fo_tracker.application.interfaces import DesignerRepository
from fo_tracker.domain.entities import Designer
from fo_tracker.domain.exceptions import RemoteError
from fo_tracker.infrastructure.database.models import DesignerModel

logger = logging.getLogger(__name__)


class SQLAlchemyDesignerRepository(DesignerRepository):
    """Implements the DesignerRepository port using SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    def _to_entity(self, model: DesignerModel) -> Designer:
        return Designer(
            id=model.id,
            name=model.name,
            email=model.email,
            active=model.active,
        )

    async def fetch_designers(self, active_only: bool = True) -> list[Designer]:
        stmt = select(DesignerModel).order_by(DesignerModel.name)
        if active_only:
            stmt = stmt.where(DesignerModel.active.is_(True))
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return [self._to_entity(row) for row in result.scalars().all()]
        except (SQLAlchemyError, OSError) as exc:
            logger.error("Failed to fetch designers: %s", exc)
            raise RemoteError("fetch_designers", str(exc)) from exc

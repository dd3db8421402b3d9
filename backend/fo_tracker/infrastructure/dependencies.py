"""FastAPI dependency injection: wires infrastructure to application layer."""

from functools import lru_cache

from fastapi import Depends, Header, HTTPException, status

from fo_tracker.config import get_settings
from fo_tracker.application.services import (
    JobChangeBroadcaster,
    JobSession,
    JobSessionRegistry,
    MetricsService,
)
from fo_tracker.domain.exceptions import RemoteError
from fo_tracker.infrastructure.database.session import async_session_factory
from fo_tracker.infrastructure.database.repositories import (
    SQLAlchemyDesignerRepository,
    SQLAlchemyJobRepository,
)

DEFAULT_SESSION_ID = "default"


@lru_cache
def get_job_change_broadcaster() -> JobChangeBroadcaster:
    """Process-wide change feed shared by the repositories and every edit session."""
    return JobChangeBroadcaster(queue_size=get_settings().realtime_queue_size)


def build_job_repository() -> SQLAlchemyJobRepository:
    return SQLAlchemyJobRepository(
        async_session_factory,
        publisher=get_job_change_broadcaster(),
    )


def build_designer_repository() -> SQLAlchemyDesignerRepository:
    return SQLAlchemyDesignerRepository(async_session_factory)


def build_job_session() -> JobSession:
    """Build an unloaded edit session subscribed to the shared change feed."""
    return JobSession(
        build_job_repository(),
        build_designer_repository(),
        feed=get_job_change_broadcaster(),
    )


@lru_cache
def get_session_registry() -> JobSessionRegistry:
    idle_seconds = get_settings().edit_session_idle_seconds
    return JobSessionRegistry(build_job_session, idle_timeout=idle_seconds or None)


async def get_job_session(
    x_edit_session: str = Header(DEFAULT_SESSION_ID),
    registry: JobSessionRegistry = Depends(get_session_registry),
) -> JobSession:
    """Resolve the caller's edit session from the ``X-Edit-Session`` header.

    The session is loaded on first use; a failed load is reported as 503 and
    retried on the next request.
    """
    try:
        return await registry.get(x_edit_session)
    except RemoteError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Could not load jobs: {e.message}",
        )


def get_metrics_service() -> MetricsService:
    """Provides a MetricsService reading straight from the database."""
    return MetricsService(
        build_job_repository(),
        build_designer_repository(),
        top_n=get_settings().metrics_top_n,
    )

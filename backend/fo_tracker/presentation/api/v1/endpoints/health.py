"""Health check endpoint: no dependencies, always available."""

from fastapi import APIRouter

from fo_tracker.config import get_settings
from fo_tracker.infrastructure.dependencies import (
    get_job_change_broadcaster,
    get_session_registry,
)

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check() -> dict:
    """Returns the current application health status."""
    settings = get_settings()
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.app_env,
        "edit_sessions": len(get_session_registry()),
        "realtime_subscribers": get_job_change_broadcaster().subscriber_count,
    }

"""SQLAlchemy database session and engine configuration."""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from fo_tracker.config import get_settings


def _get_async_url(url: str) -> str:
    """Map a plain database URL onto its async driver."""
    if url.startswith("sqlite:///"):
        return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


settings = get_settings()
_async_url = _get_async_url(settings.database_url)

engine = create_async_engine(
    _async_url,
    echo=(settings.app_env == "development" and settings.log_level_sql == "DEBUG"),
    future=True,
)

# Edit sessions outlive a request, so repositories open their own short
# sessions from this factory instead of sharing a request-scoped one.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

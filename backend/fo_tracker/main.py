"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator
from urllib.parse import urlparse

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fo_tracker.config import get_settings
from fo_tracker.infrastructure.database import Base, engine
from fo_tracker.infrastructure.dependencies import (
    get_job_change_broadcaster,
    get_session_registry,
)
from fo_tracker.infrastructure.logging.log_config import setup_logging
from fo_tracker.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


async def _ensure_database_exists() -> None:
    """Create the PostgreSQL database if it does not yet exist.

    Connects to the ``postgres`` maintenance database and issues
    ``CREATE DATABASE`` when the target is missing. Other backends are skipped.
    """
    settings = get_settings()
    if not settings.database_url.startswith("postgresql://"):
        return

    import asyncpg

    db_name = urlparse(settings.database_url).path.lstrip("/")
    if not db_name:
        return
    maintenance_url = settings.database_url.rsplit("/", 1)[0] + "/postgres"

    try:
        conn = await asyncpg.connect(maintenance_url)
        try:
            exists = await conn.fetchval(
                "SELECT 1 FROM pg_database WHERE datname = $1", db_name
            )
            if not exists:
                # CREATE DATABASE cannot run inside a transaction block
                await conn.execute(f'CREATE DATABASE "{db_name}"')
                logger.info("Created database '%s'", db_name)
        finally:
            await conn.close()
    except (OSError, asyncpg.PostgresError) as exc:
        logger.warning("Could not auto-create database '%s': %s", db_name, exc)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: create tables, then tear down edit sessions on exit."""
    setup_logging()

    await _ensure_database_exists()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    await get_session_registry().shutdown()
    await get_job_change_broadcaster().shutdown()
    await engine.dispose()


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "fo_tracker.main:app",
        host="0.0.0.0",
        port=8020,
        reload=True,
    )

"""
FastAPI application factory for the match results API.

Creates the app with:
- REST routes (teams, matches)
- Middleware stack
- Health check endpoint
- Lifespan management (database connect, schema creation, shutdown)
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from shared.config import get_settings
from shared.utils.database import DatabaseManager, connect_with_retry
from shared.utils.logging import get_logger, setup_logging
from shared.utils.metrics import start_metrics_server

from api.dependencies import init_dependencies
from api.middleware import setup_middleware
from api.routes.matches import router as matches_router
from api.routes.teams import router as teams_router

logger = get_logger(__name__)


@asynccontextmanager
async def _noop_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """No-op lifespan for testing without a database."""
    yield


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Connect to Postgres on startup, dispose of the pool on shutdown."""
    settings = get_settings()
    setup_logging("api")
    start_metrics_server(settings.metrics_port)

    db = DatabaseManager(settings)
    await connect_with_retry(db.connect, "Database")
    await db.create_schema()
    init_dependencies(db)

    logger.info("api_service_started", host=settings.api_host, port=settings.api_port)
    try:
        yield
    finally:
        await db.disconnect()
        logger.info("api_service_stopped")


def create_app(*, use_lifespan: bool = True) -> FastAPI:
    """Create and configure the FastAPI application. Set use_lifespan=False for testing without a database."""
    app = FastAPI(
        title="Match Results API",
        description="Teams, matches and scraped results",
        version="1.0.0",
        lifespan=lifespan if use_lifespan else _noop_lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    setup_middleware(app)

    app.include_router(teams_router)
    app.include_router(matches_router)

    @app.get("/health", tags=["system"])
    async def health() -> dict[str, str]:
        return {"status": "ok", "service": "api"}

    return app


# For running with uvicorn directly
app = create_app()

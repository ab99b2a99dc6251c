# ABOUTME: FastAPI application factory with database lifespan and local audio serving.
# ABOUTME: Main entry point for the Morning Brief API.

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException

from morning_brief.config import get_settings
from morning_brief.db.session import close_db, init_db
from morning_brief.web.responses import http_exception_handler, validation_exception_handler
from morning_brief.web.routes import api, briefings, newsletter, push

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan context for database setup/teardown."""
    logger.info("app_startup")
    await init_db()
    yield
    logger.info("app_shutdown")
    await close_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    app = FastAPI(
        title="Morning Brief",
        description="Daily audio news briefing across six geopolitical topics",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Audio narrated without a GCS bucket is served from the local directory
    app.mount(
        "/audio",
        StaticFiles(directory=str(settings.audio_dir), check_dir=False),
        name="audio",
    )

    app.include_router(briefings.router)
    app.include_router(newsletter.router)
    app.include_router(push.router)
    app.include_router(api.router)

    return app


# Application instance for uvicorn
app = create_app()

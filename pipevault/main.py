"""PipeVault Admin API — FastAPI application factory."""


import logging
import sys

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pipevault.core.config import settings
from pipevault.core.exceptions import register_exception_handlers
from pipevault.db.base import get_db
from pipevault.middleware.request_log import RequestLogMiddleware
from pipevault.schemas.common import HealthResponse

# v1 routers
from pipevault.routers.v1.audit import router as audit_v1_router
from pipevault.routers.v1.companies import router as companies_v1_router
from pipevault.routers.v1.notifications import router as notifications_v1_router
from pipevault.routers.v1.racks import router as racks_v1_router
from pipevault.routers.v1.requests import router as requests_v1_router

logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    """Set up structured logging for the application."""
    level = logging.DEBUG if settings.app_env == "development" else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    # Quiet noisy libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def create_app() -> FastAPI:
    _configure_logging()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url="/docs" if settings.app_env == "development" else None,
        redoc_url="/redoc" if settings.app_env == "development" else None,
    )

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    # --- Request logging ---
    app.add_middleware(RequestLogMiddleware)

    # --- Global exception handlers ---
    register_exception_handlers(app)

    # --- v1 API routes (/api/v1/*) ---
    app.include_router(companies_v1_router, prefix="/api/v1")
    app.include_router(requests_v1_router, prefix="/api/v1")
    app.include_router(racks_v1_router, prefix="/api/v1")
    app.include_router(notifications_v1_router, prefix="/api/v1")
    app.include_router(audit_v1_router, prefix="/api/v1")

    # --- Health check ---
    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health(session: AsyncSession = Depends(get_db)):
        database = "ok"
        try:
            await session.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            logger.error("Health check could not reach the database: %s", exc)
            database = "unavailable"
        return HealthResponse(app=settings.app_name, env=settings.app_env, database=database)

    logger.info("%s started (%s)", settings.app_name, settings.app_env)
    return app


app = create_app()

"""FastAPI application factory — entry point for MediaShelf."""

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from mediashelf.api.errors import register_exception_handlers
from mediashelf.api.routes.ratings import router as ratings_router
from mediashelf.api.routes.recommendations import router as recommendations_router
from mediashelf.api.routes.users import router as users_router
from mediashelf.api.routes.works import router as works_router
from mediashelf.config import settings
from mediashelf.database import create_schema

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)

SLOW_REQUEST_SECONDS = 1.0


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: startup and shutdown events."""
    logger.info("MediaShelf starting up...")
    logger.info("Database: %s", settings.database_url.split("@")[-1])
    if settings.create_schema_on_startup:
        await create_schema()
    yield
    logger.info("MediaShelf shutting down...")


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="MediaShelf",
        description="Media catalog with ratings and personalized recommendations",
        version="1.0.0",
        lifespan=lifespan,
    )

    # ── Middleware ──────────────────────────────────
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @application.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - started
        level = logging.WARNING if elapsed > SLOW_REQUEST_SECONDS else logging.INFO
        logger.log(
            level,
            "%s %s -> %d (%.3fs)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed,
        )
        return response

    # ── Errors ─────────────────────────────────────
    register_exception_handlers(application)

    # ── Routes ─────────────────────────────────────
    application.include_router(users_router)
    application.include_router(recommendations_router)
    application.include_router(works_router)
    application.include_router(ratings_router)

    # ── Health Check ───────────────────────────────
    @application.get("/health", tags=["System"])
    async def health() -> dict[str, str]:
        return {"status": "healthy", "service": "mediashelf"}

    return application


app = create_app()

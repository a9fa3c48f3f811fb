"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from orgaccess import __version__
from orgaccess.api.router import api_router
from orgaccess.config import settings
from orgaccess.core.database import init_db
from orgaccess.core.errors import register_exception_handlers
from orgaccess.core.logging import (
    RequestIdMiddleware,
    RequestLoggingMiddleware,
    configure_logging,
)


configure_logging()

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler.

    Creates missing tables on startup.
    """
    logger.info(
        "application_startup",
        app_name=settings.app_name,
        environment=settings.environment,
    )

    await init_db()
    logger.info("database_initialized")

    yield

    logger.info("application_shutdown")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    app = FastAPI(
        title=settings.app_name,
        description="Role-based hierarchical access control",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        openapi_url="/openapi.json" if not settings.is_production else None,
    )

    cors_origins = settings.cors_origins
    if settings.is_development and not cors_origins:
        cors_origins = ["http://localhost:3000", "http://localhost:5173"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    )

    # Last added runs first: request ID is bound before request logging
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIdMiddleware)

    # Register exception handlers for RFC 7807 error responses
    register_exception_handlers(app)

    app.include_router(api_router)

    return app

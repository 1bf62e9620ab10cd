from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from myday.core import settings, setup_logging, get_logger
from myday.exceptions import (
    AppException,
    app_exception_handler,
    general_exception_handler,
    request_validation_handler,
)
from myday.api.v1 import api_router
from myday.db import Base, engine
from myday.testing import configure_test_overrides, is_test_mode
from myday import models  # noqa: F401  registers tables on Base.metadata

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    setup_logging()
    logger.info(f"Starting up MyDay API (storage mode: {settings.storage_mode})")

    # Create database tables
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/verified")

    yield

    # Shutdown
    logger.info("Shutting down MyDay API")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description=settings.api_description,
        lifespan=lifespan
    )

    # CORS middleware - environment-specific origins
    cors_origins = settings.cors_origins

    if settings.environment == "production":
        localhost_origins = [origin for origin in cors_origins if "localhost" in origin or "127.0.0.1" in origin]
        if localhost_origins:
            logger.warning(f"Production environment detected with localhost origins: {localhost_origins}")

    logger.info(f"CORS allowed origins: {cors_origins}")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,     # exact origins only (no "*")
        allow_credentials=True,         # required for cookies
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    # Include API routes
    app.include_router(api_router)

    if is_test_mode():
        configure_test_overrides(app)

    @app.get("/")
    async def root():
        """Root endpoint for basic health check."""
        return {"status": "ok", "message": "MyDay API is running"}

    @app.get("/healthz")
    async def healthz():
        """Production health check endpoint."""
        return {"status": "ok"}

    return app


# Create the app instance
app = create_app()

"""
FastAPI application entry point for the Preflight feedback service.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from slowapi.middleware import SlowAPIMiddleware

from . import __version__
from .api.dependencies.rate_limit import limiter
from .api.errors import register_exception_handlers
from .api.feedback import router as feedback_router
from .api.health import router as health_router
from .api.intake import router as intake_router
from .core.config import get_settings
from .database.mongodb import (
    FEEDBACK,
    FEEDBACK_COMMENTS,
    FEEDBACK_INTAKE_EVENTS,
    FEEDBACK_NOTIFICATION_PREFERENCES,
    PROFILES,
    PROJECTS,
    MongoDB,
)
from .database.redis import RedisCache
from .database.repositories import (
    CommentRepository,
    FeedbackRepository,
    IntakeRepository,
    NotificationPreferenceRepository,
    ProfileRepository,
    ProjectRepository,
)
from .services.email_service import EmailService

# Set the root logger level to INFO so we can see detailed logs
logging.basicConfig(level=logging.INFO)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan management for database connections."""
    settings = get_settings()

    logger.info("Starting Preflight feedback service", environment=settings.environment)

    mongodb = MongoDB()
    redis_cache = RedisCache()
    email_service = EmailService(settings.resend_api_key, settings.resend_from_email)

    try:
        await mongodb.connect(settings.mongodb_url)
        await redis_cache.connect(settings.redis_url)

        # Create database indexes for optimal query performance
        for repository in (
            ProjectRepository(mongodb.get_collection(PROJECTS)),
            ProfileRepository(mongodb.get_collection(PROFILES)),
            FeedbackRepository(mongodb.get_collection(FEEDBACK)),
            CommentRepository(mongodb.get_collection(FEEDBACK_COMMENTS)),
            IntakeRepository(mongodb.get_collection(FEEDBACK_INTAKE_EVENTS)),
            NotificationPreferenceRepository(
                mongodb.get_collection(FEEDBACK_NOTIFICATION_PREFERENCES)
            ),
        ):
            await repository.ensure_indexes()

        if not settings.email_configured:
            logger.warning("Resend not configured - notification emails disabled")

        # Store in app state for dependency injection
        app.state.mongodb = mongodb
        app.state.redis = redis_cache
        app.state.email_service = email_service

        logger.info("Database connections started")

        yield

    finally:
        await email_service.close()
        await mongodb.disconnect()
        await redis_cache.disconnect()
        logger.info("Database connections stopped")


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Preflight Feedback API",
        description="Feedback collection and roadmap tracking",
        version=__version__,
        docs_url="/docs" if settings.environment == "development" else None,
        redoc_url="/redoc" if settings.environment == "development" else None,
        lifespan=lifespan,
    )

    # Security middleware - only in production
    if settings.environment == "production":
        app.add_middleware(
            TrustedHostMiddleware,
            allowed_hosts=settings.allowed_hosts,
        )

    # CORS middleware for the web frontend and the embeddable widget
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH"],
        allow_headers=["*"],
    )

    # Rate limiting - SlowAPI integration
    app.state.limiter = limiter
    # Only add middleware in non-test environments (middleware breaks FastAPI TestClient)
    if settings.environment != "test":
        app.add_middleware(SlowAPIMiddleware)

    register_exception_handlers(app)

    # Include routers
    app.include_router(health_router, prefix="/api", tags=["health"])
    app.include_router(feedback_router)
    app.include_router(intake_router)

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint for basic connectivity check."""
        return {
            "message": "Preflight Feedback API",
            "version": __version__,
            "environment": settings.environment,
        }

    return app


# Create app instance
app = create_app()

if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "preflight.main:app",
        host="0.0.0.0",  # nosec B104 - Required for Docker container
        port=8000,
        reload=settings.environment == "development",
        log_config=None,  # Use structlog configuration
    )

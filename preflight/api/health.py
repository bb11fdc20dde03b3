"""
Health check endpoints for monitoring and connectivity verification.
"""

from typing import Any

import structlog
from fastapi import APIRouter, Depends, Request

from .. import __version__
from ..core.config import Settings, get_settings
from ..core.utils.date_utils import utcnow
from ..database.mongodb import MongoDB
from ..database.redis import RedisCache

logger = structlog.get_logger()

router = APIRouter()


def get_mongodb(request: Request) -> MongoDB:
    """Dependency to get MongoDB instance from app state."""
    mongodb: MongoDB = request.app.state.mongodb
    return mongodb


def get_redis(request: Request) -> RedisCache:
    """Dependency to get Redis instance from app state."""
    redis: RedisCache = request.app.state.redis
    return redis


@router.get("/health")
async def health_check(
    mongodb: MongoDB = Depends(get_mongodb),
    redis_cache: RedisCache = Depends(get_redis),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """
    Comprehensive health check endpoint.

    Tests connectivity to MongoDB and Redis and reports which optional
    integrations (attachment storage, email) are configured.
    """
    mongodb_status = await mongodb.health_check()
    redis_status = await redis_cache.health_check()

    all_healthy = mongodb_status.get("connected", False) and redis_status.get(
        "connected", False
    )

    health_response = {
        "status": "ok" if all_healthy else "degraded",
        "environment": settings.environment,
        "version": __version__,
        "timestamp": utcnow().isoformat(),
        "dependencies": {
            "mongodb": mongodb_status,
            "redis": redis_status,
        },
        "configuration": {
            "database_name": settings.database_name,
            "project_slug": settings.project_slug,
            "email_enabled": settings.email_configured,
            "oss_bucket": settings.oss_bucket,
        },
    }

    if not all_healthy:
        logger.warning(
            "Health check failed",
            status="degraded",
            dependencies=health_response["dependencies"],
        )

    return health_response


@router.get("/health/ready")
async def readiness_check(
    mongodb: MongoDB = Depends(get_mongodb),
    redis_cache: RedisCache = Depends(get_redis),
) -> dict[str, Any]:
    """
    Readiness probe endpoint.

    Reports ready only when all dependencies can serve traffic.
    """
    mongodb_status = await mongodb.health_check()
    redis_status = await redis_cache.health_check()

    ready = mongodb_status.get("connected", False) and redis_status.get(
        "connected", False
    )

    return {
        "ready": ready,
        "dependencies": {
            "mongodb": mongodb_status.get("connected", False),
            "redis": redis_status.get("connected", False),
        },
    }


@router.get("/health/live")
async def liveness_check() -> dict[str, Any]:
    """Liveness probe endpoint."""
    return {"alive": True, "status": "ok"}

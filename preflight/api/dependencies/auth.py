"""
Shared authentication dependencies for all API endpoints.
"""

import secrets

import structlog
from fastapi import Depends, Header, HTTPException, status

from ...core.config import Settings, get_settings
from ...models.auth import RequestContext
from ...services.auth_service import AuthService

logger = structlog.get_logger()


def get_auth_service(settings: Settings = Depends(get_settings)) -> AuthService:
    """Get auth service for token verification."""
    return AuthService(settings.secret_key, settings.admin_email_list)


async def get_request_context(
    authorization: str | None = Header(None),
    auth_service: AuthService = Depends(get_auth_service),
) -> RequestContext:
    """
    Resolve the caller identity (optional authentication).

    Returns:
        Context with the session email and admin flag; anonymous when the
        header is missing or the token does not verify
    """
    return auth_service.context_from_authorization(authorization)


async def require_admin(
    x_admin_secret: str | None = Header(None),
    context: RequestContext = Depends(get_request_context),
    settings: Settings = Depends(get_settings),
) -> RequestContext:
    """
    Require admin privileges for endpoint access.

    Supports two authentication methods:
    1. Admin secret header (for intake channels / service-to-service)
    2. JWT token whose email is a configured admin (for API/UI)

    Returns:
        Admin request context (email is None for admin secret access)

    Raises:
        HTTPException: If not authenticated (401) or not an admin (403)

    Usage:
        @router.post("/admin/endpoint")
        async def admin_endpoint(
            context: RequestContext = Depends(require_admin),
        ):
            pass
    """
    # Method 1: Admin secret header
    if x_admin_secret:
        # Use constant-time comparison to prevent timing attacks
        if settings.admin_secret and secrets.compare_digest(
            x_admin_secret, settings.admin_secret
        ):
            logger.info("Admin access via admin secret header")
            return RequestContext(email=context.email, is_admin=True)

        logger.warning("Invalid admin secret provided")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid admin secret.",
        )

    # Method 2: JWT token with admin email
    if context.is_authenticated:
        if context.is_admin:
            logger.info("Admin access via JWT token")
            return context

        logger.warning("Non-admin user attempted admin access")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required.",
        )

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Authentication required.",
        headers={"WWW-Authenticate": "Bearer"},
    )

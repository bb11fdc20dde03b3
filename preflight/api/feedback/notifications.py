"""
Notification preference endpoints.

Subscribers are identified by their session email, or by the email passed in
the request when anonymous.
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...core.exceptions import AppError
from ...core.identity import normalize_profile_email
from ...models.auth import RequestContext
from ...models.notification import (
    NotificationPreferences,
    NotificationPreferencesResponse,
    NotificationPreferencesUpdate,
)
from ...services.feedback_service import FeedbackService
from ...services.notification_service import NotificationService
from ..dependencies.auth import get_request_context
from ..dependencies.feedback_deps import get_feedback_service, get_notification_service

logger = structlog.get_logger()

router = APIRouter()


@router.get(
    "/{feedback_id}/notification-preferences",
    response_model=NotificationPreferencesResponse,
)
async def get_notification_preferences(
    feedback_id: str,
    email: str | None = Query(None, description="Subscriber email when anonymous"),
    context: RequestContext = Depends(get_request_context),
    feedback_service: FeedbackService = Depends(get_feedback_service),
    notifications: NotificationService = Depends(get_notification_service),
) -> NotificationPreferencesResponse:
    """
    Get notification preferences for a feedback item.

    **Authentication**: Optional

    **Response**: Defaults when no email is known, stored values otherwise
    """
    try:
        await feedback_service.require_record(feedback_id)

        subscriber = normalize_profile_email(context.email or email)
        if not subscriber:
            return NotificationPreferencesResponse(
                email=None, preferences=NotificationPreferences()
            )

        preferences = await notifications.get_preferences(feedback_id, subscriber)

        return NotificationPreferencesResponse(email=subscriber, preferences=preferences)

    except AppError:
        raise
    except Exception as e:
        logger.error(
            "Failed to load notification preferences",
            error=str(e),
            feedback_id=feedback_id,
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to load notification preferences: {e}",
        ) from e


@router.post(
    "/{feedback_id}/notification-preferences",
    response_model=NotificationPreferencesResponse,
)
async def update_notification_preferences(
    feedback_id: str,
    update: NotificationPreferencesUpdate,
    context: RequestContext = Depends(get_request_context),
    feedback_service: FeedbackService = Depends(get_feedback_service),
    notifications: NotificationService = Depends(get_notification_service),
) -> NotificationPreferencesResponse:
    """
    Save notification preferences for a feedback item.

    Flags left out of the body keep their stored (or default) value.

    **Authentication**: Optional (email required in the body when anonymous)
    """
    try:
        await feedback_service.require_record(feedback_id)

        subscriber = normalize_profile_email(context.email or update.email)
        preferences = await notifications.update_preferences(
            feedback_id, subscriber, update.changes()
        )

        logger.info("Notification preferences updated", feedback_id=feedback_id)

        return NotificationPreferencesResponse(email=subscriber, preferences=preferences)

    except AppError:
        raise
    except Exception as e:
        logger.error(
            "Failed to save notification preferences",
            error=str(e),
            feedback_id=feedback_id,
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to save notification preferences: {e}",
        ) from e

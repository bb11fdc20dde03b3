"""
Feedback admin endpoints.

This module provides the admin-only status workflow.
"""

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status

from ...core.exceptions import AppError
from ...models.auth import RequestContext
from ...models.feedback import FeedbackStatusResponse, FeedbackStatusUpdate
from ...services.feedback_service import FeedbackService
from ..dependencies.auth import require_admin
from ..dependencies.feedback_deps import get_feedback_service

logger = structlog.get_logger()

router = APIRouter()


@router.patch("/{feedback_id}/status", response_model=FeedbackStatusResponse)
async def update_feedback_status(
    feedback_id: str,
    status_update: FeedbackStatusUpdate,
    background_tasks: BackgroundTasks,
    context: RequestContext = Depends(require_admin),
    service: FeedbackService = Depends(get_feedback_service),
) -> FeedbackStatusResponse:
    """
    Update the status of a feedback item (admin only).

    **Authentication**: Required (Bearer token of an admin email) or X-Admin-Secret

    **Request Body**:
    - `status`: "open" (alias "new"), "planned", "in_progress" or "shipped"

    **Response**: New and previous status; the author is notified by email
    """
    try:
        previous, previous_status = await service.update_status(
            feedback_id, status_update.status
        )

        background_tasks.add_task(
            service.notify_status_changed,
            previous,
            previous_status,
            status_update.status,
            context.email,
        )

        logger.info(
            "Status updated by admin",
            feedback_id=feedback_id,
            new_status=status_update.status,
        )

        return FeedbackStatusResponse(
            status=status_update.status, previous_status=previous_status
        )

    except AppError:
        raise
    except Exception as e:
        logger.error("Failed to update status", error=str(e), feedback_id=feedback_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to update status: {e}",
        ) from e

"""
Feedback comment endpoints.

This module provides endpoints for adding and retrieving comments on feedback items.
"""

import structlog
from fastapi import (
    APIRouter,
    BackgroundTasks,
    Depends,
    HTTPException,
    Request,
    status,
)

from ...core.config import Settings, get_settings
from ...core.exceptions import AppError
from ...core.rate_limiter import RateLimiter
from ...models.auth import RequestContext
from ...models.comment import CommentCreate, CommentListResponse, CommentResponse
from ...services.feedback_service import FeedbackService
from ..dependencies.auth import get_request_context
from ..dependencies.feedback_deps import get_feedback_service
from ..dependencies.rate_limit import client_key, get_rate_limiter

logger = structlog.get_logger()

router = APIRouter()


@router.post(
    "/{feedback_id}/comments",
    status_code=status.HTTP_201_CREATED,
    response_model=CommentResponse,
)
async def add_comment(
    feedback_id: str,
    comment: CommentCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    context: RequestContext = Depends(get_request_context),
    service: FeedbackService = Depends(get_feedback_service),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
    settings: Settings = Depends(get_settings),
) -> CommentResponse:
    """
    Add a comment to a feedback item.

    **Authentication**: Optional (email required in the body when anonymous)
    **Rate Limit**: 5 comments per minute per email

    **Request Body**:
    ```json
    {
      "body": "Same here, the export button does nothing.",
      "email": "someone@example.com"
    }
    ```

    **Response**: `{"item": {...}}`; the feedback author is notified by email
    """
    actor = context.email or (comment.email or "").strip().lower()

    await rate_limiter.enforce_limit(
        key=f"add_comment:{actor or client_key(request)}",
        limit=settings.comment_limit_per_minute,
        window_seconds=60,
    )

    try:
        created, record = await service.add_comment(feedback_id, comment, context)

        background_tasks.add_task(service.notify_comment_added, record, created)

        logger.info(
            "Comment added",
            comment_id=created.id,
            feedback_id=feedback_id,
            author_role=created.author_role,
        )

        return CommentResponse(item=created)

    except AppError:
        raise
    except Exception as e:
        logger.error("Failed to add comment", error=str(e), feedback_id=feedback_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to create comment: {e}",
        ) from e


@router.get("/{feedback_id}/comments", response_model=CommentListResponse)
async def get_comments(
    feedback_id: str,
    service: FeedbackService = Depends(get_feedback_service),
) -> CommentListResponse:
    """
    Get all comments for a feedback item.

    **Authentication**: Not required (public endpoint)

    **Response**: Comments sorted by creation date (oldest first)
    """
    try:
        comments = await service.list_comments(feedback_id)

        logger.info("Comments retrieved", feedback_id=feedback_id, count=len(comments))

        return CommentListResponse(items=comments)

    except AppError:
        raise
    except Exception as e:
        logger.error("Failed to get comments", error=str(e), feedback_id=feedback_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to load comments: {e}",
        ) from e

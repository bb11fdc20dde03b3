"""
Feedback CRUD endpoints.

This module provides core operations for feedback items including
submission, listing, retrieval, and upvoting.
"""

import structlog
from fastapi import (
    APIRouter,
    BackgroundTasks,
    Depends,
    HTTPException,
    Query,
    Request,
    status,
)

from ...core.config import Settings, get_settings
from ...core.exceptions import AppError
from ...core.rate_limiter import RateLimiter
from ...models.auth import RequestContext
from ...models.feedback import (
    FeedbackCreateResponse,
    FeedbackItem,
    FeedbackItemCreate,
    FeedbackListResponse,
    UpvoteResponse,
)
from ...services.feedback_service import FeedbackService
from ..dependencies.auth import get_request_context
from ..dependencies.feedback_deps import get_feedback_service
from ..dependencies.rate_limit import client_key, get_rate_limiter

logger = structlog.get_logger()

router = APIRouter()


@router.post(
    "", status_code=status.HTTP_201_CREATED, response_model=FeedbackCreateResponse
)
async def create_feedback_item(
    item: FeedbackItemCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    context: RequestContext = Depends(get_request_context),
    service: FeedbackService = Depends(get_feedback_service),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
    settings: Settings = Depends(get_settings),
) -> FeedbackCreateResponse:
    """
    Submit a new feedback item (feature request or bug report).

    **Authentication**: Optional (email required in the body when anonymous)
    **Rate Limit**: 5 submissions per hour per email

    **Request Body**:
    ```json
    {
      "subject": "Add dark mode",
      "description": "The dashboard is too bright at night.",
      "type": "FEATURE_REQUEST",
      "priority": "HIGH",
      "email": "someone@example.com",
      "attachments": ["https://cdn.example.com/shot.png"]
    }
    ```

    **Response**: `{"success": true, "id": "..."}`
    """
    reporter_email = context.email or (item.email or "").strip().lower() or None

    await rate_limiter.enforce_limit(
        key=f"create_feedback:{reporter_email or client_key(request)}",
        limit=settings.feedback_create_limit_per_hour,
        window_seconds=3600,
    )

    try:
        record = await service.create_item(item, context)

        # Intake trail entry is best-effort and runs after the response
        background_tasks.add_task(
            service.log_submission, record, item, reporter_email
        )

        logger.info("Feedback item created via API", feedback_id=record.id)

        return FeedbackCreateResponse(id=record.id)

    except AppError:
        raise
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Failed to create feedback item", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to create feedback item: {e}",
        ) from e


@router.get("", response_model=FeedbackListResponse)
async def list_feedback_items(
    sort: str | None = Query(None, description="new, popular or trending"),
    status_filter: str | None = Query(
        None, alias="status", description="Comma-separated statuses"
    ),
    service: FeedbackService = Depends(get_feedback_service),
) -> FeedbackListResponse:
    """
    List the feedback board.

    **Authentication**: Not required (public endpoint)

    **Query Parameters**:
    - `sort`: `new` (default), `popular` or `trending`
    - `status`: e.g. `new,planned`; unknown values are ignored

    **Response**: Decoded items in display order plus the effective sort key
    """
    try:
        items, sort_key = await service.list_items(sort=sort, status=status_filter)

        return FeedbackListResponse(items=items, sort=sort_key)

    except AppError:
        raise
    except Exception as e:
        logger.error("Failed to list feedback items", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to load feedback: {e}",
        ) from e


@router.get("/{feedback_id}", response_model=FeedbackItem)
async def get_feedback_item(
    feedback_id: str,
    service: FeedbackService = Depends(get_feedback_service),
) -> FeedbackItem:
    """
    Get one decoded feedback item.

    **Authentication**: Not required (public endpoint)

    **Response**: Feedback item or 404
    """
    try:
        return await service.get_item(feedback_id)

    except AppError:
        raise
    except Exception as e:
        logger.error("Failed to get feedback item", error=str(e), feedback_id=feedback_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to load feedback: {e}",
        ) from e


@router.post("/{feedback_id}/upvote", response_model=UpvoteResponse)
async def upvote_feedback_item(
    feedback_id: str,
    request: Request,
    service: FeedbackService = Depends(get_feedback_service),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
    settings: Settings = Depends(get_settings),
) -> UpvoteResponse:
    """
    Add an upvote. Every call counts; clients remember what they voted on.

    **Authentication**: Not required
    **Rate Limit**: 30 upvotes per minute per client

    **Response**: `{"success": true, "upvotes": <new count>}` or 404
    """
    await rate_limiter.enforce_limit(
        key=f"upvote:{client_key(request)}",
        limit=settings.upvote_limit_per_minute,
        window_seconds=60,
    )

    try:
        upvotes = await service.upvote(feedback_id)

        return UpvoteResponse(upvotes=upvotes)

    except AppError:
        raise
    except Exception as e:
        logger.error("Failed to upvote", error=str(e), feedback_id=feedback_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to upvote: {e}",
        ) from e

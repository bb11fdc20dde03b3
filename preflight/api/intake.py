"""
Intake log endpoints (admin only).

External channels (email, Discord, Slack, ...) post reports here with the
X-Admin-Secret header; admins review them and convert or link them to
feedback items.
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from ..core.exceptions import AppError
from ..models.auth import RequestContext
from ..models.intake import (
    DEFAULT_INTAKE_LIMIT,
    IntakeConvertResponse,
    IntakeCreateResponse,
    IntakeEventCreate,
    IntakeLinkRequest,
    IntakeLinkResponse,
    IntakeListResponse,
)
from ..services.intake_service import IntakeService
from .dependencies.auth import require_admin
from .dependencies.feedback_deps import get_intake_service

logger = structlog.get_logger()

router = APIRouter(prefix="/api/intake", tags=["intake"])


@router.get("", response_model=IntakeListResponse)
async def list_intake_events(
    limit: int = Query(DEFAULT_INTAKE_LIMIT, description="Clamped to 1..100"),
    _: RequestContext = Depends(require_admin),
    service: IntakeService = Depends(get_intake_service),
) -> IntakeListResponse:
    """
    List logged intake events, newest first (admin only).

    **Query Parameters**:
    - `limit`: Number of events (default 30, clamped to 1..100)
    """
    try:
        events = await service.list_events(limit)

        return IntakeListResponse(items=events)

    except AppError:
        raise
    except Exception as e:
        logger.error("Failed to list intake events", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to load intake events: {e}",
        ) from e


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=IntakeCreateResponse,
    responses={200: {"model": IntakeCreateResponse, "description": "Duplicate"}},
)
async def create_intake_event(
    data: IntakeEventCreate,
    response: Response,
    _: RequestContext = Depends(require_admin),
    service: IntakeService = Depends(get_intake_service),
) -> IntakeCreateResponse:
    """
    Log an external report (admin or admin secret).

    **Request Body**:
    ```json
    {
      "source": "email",
      "title": "Crash on load",
      "notes": "Reported by a customer on the support inbox.",
      "reporter_email": "customer@example.com",
      "reference_url": "https://mail.example.com/thread/42"
    }
    ```

    **Response**: 201 with the new event, or 200 with `duplicate: true` and
    the event already logged under the same dedupe key
    """
    try:
        event, duplicate = await service.log_event(data)

        if duplicate:
            response.status_code = status.HTTP_200_OK

        return IntakeCreateResponse(item=event, duplicate=duplicate)

    except AppError:
        raise
    except Exception as e:
        logger.error("Failed to log intake event", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to log intake event: {e}",
        ) from e


@router.post("/{intake_id}/convert", response_model=IntakeConvertResponse)
async def convert_intake_event(
    intake_id: str,
    context: RequestContext = Depends(require_admin),
    service: IntakeService = Depends(get_intake_service),
) -> IntakeConvertResponse:
    """
    Create a feedback item from an intake event (admin only).

    **Response**: ID of the new feedback item; 409 if the event is already linked
    """
    try:
        feedback_id = await service.convert(intake_id, context.email)

        return IntakeConvertResponse(feedback_id=feedback_id)

    except AppError:
        raise
    except Exception as e:
        logger.error("Failed to convert intake event", error=str(e), intake_id=intake_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to convert intake event: {e}",
        ) from e


@router.post("/{intake_id}/link", response_model=IntakeLinkResponse)
async def link_intake_event(
    intake_id: str,
    link: IntakeLinkRequest,
    context: RequestContext = Depends(require_admin),
    service: IntakeService = Depends(get_intake_service),
) -> IntakeLinkResponse:
    """
    Attach an intake event to an existing feedback item (admin only).

    **Request Body**: `{"feedback_id": "..."}`

    **Response**: The linked event; 404 if the target feedback item is not in
    the project, 409 if the event is already linked
    """
    try:
        event = await service.link(intake_id, link.feedback_id, context.email)

        return IntakeLinkResponse(item=event)

    except AppError:
        raise
    except Exception as e:
        logger.error("Failed to link intake event", error=str(e), intake_id=intake_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to link intake event: {e}",
        ) from e

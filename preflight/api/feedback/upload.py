"""
Feedback image upload endpoint.

Files are posted as multipart form data and stored in OSS by the backend.
"""

import structlog
from fastapi import (
    APIRouter,
    Depends,
    File,
    HTTPException,
    Request,
    UploadFile,
    status,
)

from ...core.config import Settings, get_settings
from ...core.exceptions import AppError
from ...core.rate_limiter import RateLimiter
from ...models.feedback import AttachmentUploadResponse
from ...services.attachment_service import AttachmentService
from ..dependencies.feedback_deps import get_attachment_service
from ..dependencies.rate_limit import client_key, get_rate_limiter

logger = structlog.get_logger()

router = APIRouter()


@router.post("/upload", response_model=AttachmentUploadResponse)
async def upload_attachment(
    request: Request,
    file: UploadFile | None = File(None),
    attachments: AttachmentService = Depends(get_attachment_service),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
    settings: Settings = Depends(get_settings),
) -> AttachmentUploadResponse:
    """
    Upload an image attachment for a feedback submission.

    **Authentication**: Not required
    **Rate Limit**: 10 uploads per minute per client

    **Form Data**:
    - `file`: Image file (`image/*`, at most `MAX_ATTACHMENT_MB`)

    **Response**: Public URL, object path, size, content type and bucket.
    Errors: 400 without a file, 413 when too large, 415 when not an image.
    """
    await rate_limiter.enforce_limit(
        key=f"upload_image:{client_key(request)}",
        limit=settings.upload_limit_per_minute,
        window_seconds=60,
    )

    try:
        data = None
        if file is not None:
            # One byte past the limit is enough to reject oversized files
            data = await file.read(attachments.max_bytes + 1)

        return await attachments.upload(
            filename=file.filename if file else None,
            content_type=file.content_type if file else None,
            data=data,
        )

    except AppError:
        raise
    except Exception as e:
        logger.error("Failed to upload attachment", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to upload attachment: {e}",
        ) from e

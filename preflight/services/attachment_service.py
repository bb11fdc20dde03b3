"""
Image attachment uploads for feedback submissions.
"""

import asyncio
import re
import time
import uuid

import structlog
from oss2.exceptions import OssError

from ..core.exceptions import (
    PayloadTooLargeError,
    StorageError,
    UnsupportedMediaTypeError,
    ValidationError,
)
from ..models.feedback import AttachmentUploadResponse
from .oss_service import OSSService

logger = structlog.get_logger()

DEFAULT_FILENAME = "attachment"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


def sanitize_filename(name: str | None) -> str:
    """Replace everything except letters, digits, dot, dash and underscore."""
    return _UNSAFE_FILENAME_CHARS.sub("_", name or DEFAULT_FILENAME)


def build_object_key(project_slug: str, filename: str | None) -> str:
    """Object key: ``{slug}/{epoch ms}-{uuid}-{sanitized filename}``."""
    millis = int(time.time() * 1000)
    return f"{project_slug}/{millis}-{uuid.uuid4()}-{sanitize_filename(filename)}"


class AttachmentService:
    """Validates and stores image attachments."""

    def __init__(self, oss_service: OSSService, project_slug: str, max_bytes: int):
        """
        Initialize attachment service.

        Args:
            oss_service: Object storage client
            project_slug: Prefix for object keys
            max_bytes: Largest accepted file size
        """
        self.oss_service = oss_service
        self.project_slug = project_slug
        self.max_bytes = max_bytes

    async def upload(
        self,
        filename: str | None,
        content_type: str | None,
        data: bytes | None,
    ) -> AttachmentUploadResponse:
        """
        Store an image and return where it lives.

        Raises:
            ValidationError: If no file was sent
            PayloadTooLargeError: If the file exceeds the size limit
            UnsupportedMediaTypeError: If the file is not an image
            StorageError: If the object store rejects the upload
        """
        if data is None:
            raise ValidationError("file is required.")

        if len(data) > self.max_bytes:
            max_mb = self.max_bytes // (1024 * 1024)
            raise PayloadTooLargeError(
                f"file exceeds {max_mb}MB limit.", size=len(data)
            )

        media_type = (content_type or "").strip().lower()
        if not media_type.startswith("image/"):
            raise UnsupportedMediaTypeError(
                "only image uploads are allowed.", content_type=media_type
            )

        object_key = build_object_key(self.project_slug, filename)

        try:
            url = await asyncio.to_thread(
                self.oss_service.upload_file, object_key, data, media_type
            )
        except OssError as e:
            logger.error("Attachment upload failed", object_key=object_key, error=str(e))
            raise StorageError(
                f"Failed to store attachment: {e}", object_key=object_key
            ) from e

        logger.info("Attachment stored", object_key=object_key, size=len(data))

        return AttachmentUploadResponse(
            url=url,
            path=object_key,
            size=len(data),
            content_type=media_type,
            bucket=self.oss_service.bucket_name,
        )

"""
Tests for image attachment uploads and the OSS client.

Tests cover:
- Filename sanitization and object key layout
- Size, presence and media type checks
- Storage failures mapped to StorageError
- OSS public URLs and uploads
"""

import re
from unittest.mock import Mock

import pytest
from oss2.exceptions import ClientError

from preflight.core.exceptions import (
    PayloadTooLargeError,
    StorageError,
    UnsupportedMediaTypeError,
    ValidationError,
)
from preflight.services.attachment_service import (
    AttachmentService,
    build_object_key,
    sanitize_filename,
)
from preflight.services.oss_service import OSSService

MAX_BYTES = 1024 * 1024


# ===== Fixtures =====


@pytest.fixture
def mock_oss():
    oss = Mock()
    oss.bucket_name = "test-bucket"
    oss.upload_file = Mock(
        side_effect=lambda key, data, content_type: f"https://test-bucket.oss.example.com/{key}"
    )
    return oss


@pytest.fixture
def service(mock_oss):
    return AttachmentService(mock_oss, project_slug="preflight", max_bytes=MAX_BYTES)


class TestObjectKeys:
    """Test filename sanitization and key layout"""

    def test_sanitize_replaces_unsafe_characters(self):
        assert sanitize_filename("my screen shot (1).png") == "my_screen_shot__1_.png"
        assert sanitize_filename("../../etc/passwd") == ".._.._etc_passwd"

    def test_sanitize_default_name(self):
        assert sanitize_filename(None) == "attachment"
        assert sanitize_filename("") == "attachment"

    def test_object_key_layout(self):
        key = build_object_key("preflight", "shot.png")

        assert re.fullmatch(
            r"preflight/\d+-[0-9a-f-]{36}-shot\.png", key
        ), key

    def test_object_keys_are_unique(self):
        assert build_object_key("p", "a.png") != build_object_key("p", "a.png")


class TestUpload:
    """Test upload validation and storage"""

    @pytest.mark.asyncio
    async def test_upload_image(self, service, mock_oss):
        # Act
        result = await service.upload("shot.png", "Image/PNG", b"\x89PNG data")

        # Assert
        assert result.path.startswith("preflight/")
        assert result.url.endswith(result.path)
        assert result.size == len(b"\x89PNG data")
        assert result.content_type == "image/png"
        assert result.bucket == "test-bucket"
        mock_oss.upload_file.assert_called_once_with(
            result.path, b"\x89PNG data", "image/png"
        )

    @pytest.mark.asyncio
    async def test_missing_file(self, service):
        with pytest.raises(ValidationError) as exc_info:
            await service.upload(None, None, None)

        assert exc_info.value.message == "file is required."

    @pytest.mark.asyncio
    async def test_size_limit_boundary(self, service, mock_oss):
        """Test that exactly max bytes passes and one more byte fails"""
        await service.upload("a.png", "image/png", b"x" * MAX_BYTES)

        with pytest.raises(PayloadTooLargeError) as exc_info:
            await service.upload("a.png", "image/png", b"x" * (MAX_BYTES + 1))

        assert exc_info.value.message == "file exceeds 1MB limit."
        assert mock_oss.upload_file.call_count == 1

    @pytest.mark.asyncio
    async def test_non_image_rejected(self, service, mock_oss):
        with pytest.raises(UnsupportedMediaTypeError) as exc_info:
            await service.upload("notes.pdf", "application/pdf", b"%PDF")

        assert exc_info.value.message == "only image uploads are allowed."
        mock_oss.upload_file.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_content_type_rejected(self, service):
        with pytest.raises(UnsupportedMediaTypeError):
            await service.upload("a.png", None, b"data")

    @pytest.mark.asyncio
    async def test_storage_failure(self, service, mock_oss):
        mock_oss.upload_file.side_effect = ClientError("network unreachable")

        with pytest.raises(StorageError):
            await service.upload("a.png", "image/png", b"data")


class TestOSSService:
    """Test the OSS client wrapper"""

    @pytest.fixture
    def oss_service(self):
        return OSSService(
            access_key_id="test_key",
            access_key_secret="test_secret",
            endpoint="https://oss-cn-hangzhou.aliyuncs.com",
            bucket_name="test-bucket",
        )

    def test_endpoint_scheme_is_stripped(self, oss_service):
        assert oss_service.endpoint == "oss-cn-hangzhou.aliyuncs.com"
        assert oss_service.bucket is not None

    def test_public_url(self, oss_service):
        assert oss_service.public_url("preflight/a.png") == (
            "https://test-bucket.oss-cn-hangzhou.aliyuncs.com/preflight/a.png"
        )

    def test_upload_file_puts_object(self, oss_service):
        oss_service.bucket = Mock()
        oss_service.bucket.put_object.return_value = Mock(status=200)

        url = oss_service.upload_file("preflight/a.png", b"data", "image/png")

        oss_service.bucket.put_object.assert_called_once_with(
            "preflight/a.png", b"data", headers={"Content-Type": "image/png"}
        )
        assert url.endswith("/preflight/a.png")

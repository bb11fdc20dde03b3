"""
Alibaba Cloud OSS (Object Storage Service) client for attachment uploads.

Supports both static credentials and STS (ECS instance role). The SDK is
synchronous; callers run uploads in a worker thread.
"""

import oss2
import structlog
from oss2.credentials import EnvironmentVariableCredentialsProvider

logger = structlog.get_logger()


class OSSService:
    """Service for uploading files to Alibaba Cloud OSS."""

    def __init__(
        self,
        access_key_id: str,
        access_key_secret: str,
        endpoint: str,
        bucket_name: str,
    ):
        """
        Initialize OSS client.

        Supports two authentication modes:
        1. Static credentials: Provide access_key_id and access_key_secret
        2. STS/ECS instance role: Leave credentials empty, uses EnvironmentVariableCredentialsProvider

        Args:
            access_key_id: Alibaba Cloud Access Key ID (empty for STS mode)
            access_key_secret: Alibaba Cloud Access Key Secret (empty for STS mode)
            endpoint: OSS endpoint (e.g., "oss-cn-shanghai.aliyuncs.com")
            bucket_name: OSS bucket name
        """
        self.endpoint = endpoint.removeprefix("https://").removeprefix("http://")
        self.bucket_name = bucket_name

        https_endpoint = f"https://{self.endpoint}"

        if access_key_id and access_key_secret:
            auth = oss2.Auth(access_key_id, access_key_secret)
            auth_mode = "static"
        else:
            # Falls back to OSS_ACCESS_KEY_ID / OSS_ACCESS_KEY_SECRET env vars
            credentials_provider = EnvironmentVariableCredentialsProvider()
            auth = oss2.ProviderAuth(credentials_provider)
            auth_mode = "sts"

        self.bucket = oss2.Bucket(auth, https_endpoint, bucket_name)

        logger.info(
            "OSS service initialized",
            bucket=bucket_name,
            endpoint=self.endpoint,
            auth_mode=auth_mode,
        )

    def public_url(self, object_key: str) -> str:
        return f"https://{self.bucket_name}.{self.endpoint}/{object_key}"

    def upload_file(
        self,
        object_key: str,
        file_data: bytes,
        content_type: str,
    ) -> str:
        """
        Upload file directly to OSS (backend upload).

        Args:
            object_key: OSS object key (path)
            file_data: File binary data
            content_type: MIME type

        Returns:
            Public URL of uploaded file
        """
        result = self.bucket.put_object(
            object_key,
            file_data,
            headers={"Content-Type": content_type},
        )

        logger.info(
            "File uploaded to OSS",
            object_key=object_key,
            content_type=content_type,
            status=result.status,
        )

        return self.public_url(object_key)

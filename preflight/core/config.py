"""
Application configuration using Pydantic Settings.

Supports hierarchical environment configuration:
- .env.base: Common non-secret defaults (committed to git)
- .env.{ENVIRONMENT}: Environment-specific overrides (gitignored)
- Environment variables: Highest priority
"""

import os
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

# Get environment from env var, default to development
ENV = os.getenv("ENVIRONMENT", "development")


class Settings(BaseSettings):
    """Application settings with hierarchical env file support."""

    model_config = SettingsConfigDict(
        # Load base first, then environment-specific override
        env_file=[
            ".env.base",  # Common defaults (committed)
            f".env.{ENV}",  # Environment overrides (gitignored)
        ],
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "test", "production"] = "development"

    # Database connections
    mongodb_url: str = "mongodb://localhost:27017/preflight"
    redis_url: str = "redis://localhost:6379"

    # Security
    secret_key: str = "dev-secret-key-change-in-production"  # Verifies session JWTs
    admin_secret: str = "dev-admin-secret-change-in-production"  # Intake channels
    admin_emails: str = ""  # Comma-separated; empty means nobody is admin
    allowed_hosts: list[str] = ["*"]
    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Tenancy
    project_slug: str = "preflight"

    # Cloud storage (Alibaba OSS) for feedback attachments
    oss_access_key: str = ""
    oss_secret_key: str = ""
    oss_bucket: str = "preflight-feedback-attachments"
    oss_endpoint: str = "oss-cn-shanghai.aliyuncs.com"
    max_attachment_mb: int = 8

    # Transactional email (Resend); sending is skipped when either is empty
    resend_api_key: str = ""
    resend_from_email: str = ""
    app_base_url: str = "http://localhost:3000"

    # Rate limiting
    rate_limit_requests: int = 200
    rate_limit_window: int = 60  # per minute
    feedback_create_limit_per_hour: int = 5
    upvote_limit_per_minute: int = 30
    comment_limit_per_minute: int = 5
    upload_limit_per_minute: int = 10

    @property
    def database_name(self) -> str:
        """Extract database name from MongoDB URL."""
        db_with_params = self.mongodb_url.split("/")[-1]
        return db_with_params.split("?")[0] if "?" in db_with_params else db_with_params

    @property
    def admin_email_list(self) -> list[str]:
        """Configured admin emails, trimmed and lower-cased."""
        return [
            value.strip().lower()
            for value in self.admin_emails.split(",")
            if value.strip()
        ]

    @property
    def max_attachment_bytes(self) -> int:
        return max(1, self.max_attachment_mb) * 1024 * 1024

    @property
    def email_configured(self) -> bool:
        return bool(self.resend_api_key and self.resend_from_email)

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()

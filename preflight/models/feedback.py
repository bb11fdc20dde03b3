"""
Feedback models for user feature requests and bug reports.

This module defines the data models for the feedback board and roadmap,
including the stored record, the decoded description envelope, and the
request/response shapes of the feedback endpoints.
"""

from datetime import datetime
from typing import Literal, get_args

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    computed_field,
    field_validator,
)

# Type aliases for clarity
FeedbackType = Literal["FEATURE_REQUEST", "BUG_REPORT", "IMPROVEMENT"]
FeedbackPriority = Literal["LOW", "MEDIUM", "HIGH", "CRITICAL"]
FeedbackStatus = Literal["open", "planned", "in_progress", "shipped"]
FeedbackSort = Literal["new", "popular", "trending"]

FEEDBACK_TYPES: tuple[str, ...] = get_args(FeedbackType)
FEEDBACK_PRIORITIES: tuple[str, ...] = get_args(FeedbackPriority)
FEEDBACK_STATUSES: tuple[str, ...] = get_args(FeedbackStatus)

DEFAULT_TYPE: FeedbackType = "FEATURE_REQUEST"
DEFAULT_PRIORITY: FeedbackPriority = "MEDIUM"
DEFAULT_SOURCE = "web"
DEFAULT_STATUS: FeedbackStatus = "open"
EMPTY_PREVIEW = "No details provided."

MAX_ATTACHMENTS = 4


def is_http_url(value: str) -> bool:
    return value.startswith("http://") or value.startswith("https://")


def reject_line_breaks(value: str, field_name: str) -> str:
    """Header values are written as single ``Key: value`` lines."""
    if "\r" in value or "\n" in value:
        raise ValueError(f"{field_name} must be a single line.")
    return value


# ===== Envelope =====


class FeedbackEnvelope(BaseModel):
    """Structured metadata packed into a feedback description."""

    type: str = DEFAULT_TYPE
    priority: str = DEFAULT_PRIORITY
    source: str = DEFAULT_SOURCE
    reference: str = ""
    body: str = ""
    attachments: list[str] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def preview(self) -> str:
        """First non-empty body line, used as a one-line summary."""
        for line in self.body.split("\n"):
            if line.strip():
                return line.strip()
        return EMPTY_PREVIEW


# ===== Request Models =====


class FeedbackItemCreate(BaseModel):
    """Request model for submitting a new feedback item."""

    model_config = ConfigDict(str_strip_whitespace=True)

    subject: str = Field(..., min_length=1, max_length=200, description="Title")
    description: str = Field(
        ...,
        min_length=1,
        max_length=10000,
        description="Free-text body",
    )
    type: FeedbackType = Field(DEFAULT_TYPE, description="Kind of feedback")
    priority: FeedbackPriority = Field(DEFAULT_PRIORITY, description="Urgency")
    source: str = Field(DEFAULT_SOURCE, max_length=40, description="Intake channel")
    reference: str = Field("", max_length=2000, description="Reference URL")
    email: str | None = Field(
        None,
        max_length=320,
        description="Reporter email, required when unauthenticated",
    )
    attachments: list[str] = Field(
        default_factory=list,
        description=f"Up to {MAX_ATTACHMENTS} http(s) attachment URLs",
    )

    @field_validator("subject", "description", mode="before")
    @classmethod
    def require_text(cls, value: object) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValueError("subject and description are required.")
        return value

    @field_validator("type", "priority", mode="before")
    @classmethod
    def upper_case_enums(cls, value: object, info: ValidationInfo) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_TYPE if info.field_name == "type" else DEFAULT_PRIORITY
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("source", mode="before")
    @classmethod
    def default_source(cls, value: object) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_SOURCE
        return value

    @field_validator("reference", mode="before")
    @classmethod
    def default_reference(cls, value: object) -> object:
        return "" if value is None else value

    @field_validator("source", "reference")
    @classmethod
    def single_line_headers(cls, value: str, info: ValidationInfo) -> str:
        return reject_line_breaks(value, info.field_name)

    @field_validator("attachments", mode="before")
    @classmethod
    def default_attachments(cls, value: object) -> object:
        return [] if value is None else value

    @field_validator("attachments")
    @classmethod
    def validate_attachments(cls, value: list[str]) -> list[str]:
        urls = [url.strip() for url in value if url and url.strip()]
        for url in urls:
            if not is_http_url(url):
                raise ValueError("attachments must be http(s) URLs.")
        if len(urls) > MAX_ATTACHMENTS:
            raise ValueError(f"at most {MAX_ATTACHMENTS} attachments are allowed.")
        return urls


class FeedbackStatusUpdate(BaseModel):
    """Request model for updating feedback status (admin only)."""

    status: FeedbackStatus = Field(..., description="New workflow status")

    @field_validator("status", mode="before")
    @classmethod
    def normalize_alias(cls, value: object) -> str:
        cleaned = value.strip().lower() if isinstance(value, str) else ""
        cleaned = "open" if cleaned == "new" else cleaned
        if cleaned not in FEEDBACK_STATUSES:
            raise ValueError("Invalid status.")
        return cleaned


# ===== Response Models =====


class FeedbackItem(BaseModel):
    """Response model for a feedback item with its decoded envelope."""

    id: str = Field(..., description="Unique feedback identifier")
    created_at: datetime = Field(..., description="Creation timestamp")
    title: str = Field(..., description="Title of the feedback item")
    description: str = Field(..., description="Decoded body text")
    status: FeedbackStatus = Field(DEFAULT_STATUS, description="Workflow status")
    upvotes: int = Field(0, description="Total upvotes")
    preview: str = Field(EMPTY_PREVIEW, description="First non-empty body line")
    type: str = Field(DEFAULT_TYPE, description="Envelope type")
    priority: str = Field(DEFAULT_PRIORITY, description="Envelope priority")
    source: str = Field(DEFAULT_SOURCE, description="Intake channel")
    reference: str = Field("", description="Reference URL")
    attachments: list[str] = Field(default_factory=list)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "feedback_abc123def456",
                "created_at": "2026-03-01T10:00:00Z",
                "title": "Add dark mode",
                "description": "Dark mode for the dashboard, please.",
                "status": "planned",
                "upvotes": 12,
                "preview": "Dark mode for the dashboard, please.",
                "type": "FEATURE_REQUEST",
                "priority": "HIGH",
                "source": "web",
                "reference": "",
                "attachments": ["https://cdn.example.com/shot.png"],
            }
        }
    )


class FeedbackCreateResponse(BaseModel):
    success: bool = True
    id: str


class FeedbackListResponse(BaseModel):
    items: list[FeedbackItem]
    sort: FeedbackSort


class FeedbackStatusResponse(BaseModel):
    success: bool = True
    status: FeedbackStatus
    previous_status: FeedbackStatus


class UpvoteResponse(BaseModel):
    success: bool = True
    upvotes: int


class AttachmentUploadResponse(BaseModel):
    """Response model for an uploaded image attachment."""

    url: str = Field(..., description="Public URL of the stored image")
    path: str = Field(..., description="Object key inside the bucket")
    size: int = Field(..., description="Size in bytes")
    content_type: str = Field(..., description="MIME type")
    bucket: str = Field(..., description="Bucket name")


# ===== Database Models =====


class FeedbackRecord(BaseModel):
    """Database model for feedback documents (internal use)."""

    id: str
    project_id: str
    user_id: str | None = None
    title: str
    description: str
    status: str | None = DEFAULT_STATUS
    upvotes: int = 0
    created_at: datetime
    updated_at: datetime | None = None

"""
Intake models for reports captured from external channels.

An intake event is an append-only log entry. It can be converted into a new
feedback item or linked to an existing one, exactly once.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from .feedback import (
    DEFAULT_PRIORITY,
    DEFAULT_TYPE,
    FeedbackPriority,
    FeedbackType,
    reject_line_breaks,
)

DEFAULT_INTAKE_SOURCE = "other"
DEFAULT_INTAKE_LIMIT = 30
MAX_INTAKE_LIMIT = 100


class IntakePayload(BaseModel):
    """Free-form report content carried by an intake event."""

    model_config = ConfigDict(extra="allow")

    title: str | None = None
    notes: str | None = None
    type: str | None = None
    priority: str | None = None
    attachments_count: int | None = None


class IntakeEventCreate(BaseModel):
    """Request model for logging an external report."""

    model_config = ConfigDict(str_strip_whitespace=True)

    source: str = Field(DEFAULT_INTAKE_SOURCE, max_length=40)
    title: str = Field(..., min_length=1, max_length=200)
    notes: str = Field("", max_length=10000)
    reporter_email: str = Field("", max_length=320)
    reference_url: str = Field("", max_length=2000)
    type: FeedbackType = DEFAULT_TYPE
    priority: FeedbackPriority = DEFAULT_PRIORITY
    event_type: str = Field("manual_capture", max_length=60)

    @field_validator("source", mode="before")
    @classmethod
    def default_source(cls, value: object) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_INTAKE_SOURCE
        return value

    @field_validator("source", "reference_url")
    @classmethod
    def single_line_headers(cls, value: str, info: ValidationInfo) -> str:
        return reject_line_breaks(value, info.field_name)

    @field_validator("reporter_email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.lower()

    @field_validator("type", "priority", mode="before")
    @classmethod
    def upper_case_enums(cls, value: object, info: ValidationInfo) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_TYPE if info.field_name == "type" else DEFAULT_PRIORITY
        if isinstance(value, str):
            return value.strip().upper()
        return value


class IntakeEvent(BaseModel):
    """Response and database model for intake events."""

    id: str
    project_id: str
    created_at: datetime
    source: str
    reference_url: str | None = None
    reporter_email: str | None = None
    event_type: str
    payload: IntakePayload = Field(default_factory=IntakePayload)
    dedupe_key: str | None = None
    feedback_id: str | None = None
    converted_at: datetime | None = None
    converted_by: str | None = None

    @property
    def is_linked(self) -> bool:
        return bool(self.feedback_id)


class IntakeLinkRequest(BaseModel):
    """Request model for linking an intake event to existing feedback."""

    feedback_id: str = Field(..., description="Target feedback ID")

    @field_validator("feedback_id", mode="before")
    @classmethod
    def require_feedback_id(cls, value: object) -> str:
        text = str(value or "").strip()
        if not text:
            raise ValueError("feedback_id is required.")
        return text


class IntakeCreateResponse(BaseModel):
    item: IntakeEvent
    duplicate: bool = False


class IntakeListResponse(BaseModel):
    items: list[IntakeEvent]


class IntakeConvertResponse(BaseModel):
    feedback_id: str


class IntakeLinkResponse(BaseModel):
    item: IntakeEvent

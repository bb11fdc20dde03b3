"""
Comment models for discussion threads on feedback items.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

AuthorRole = Literal["admin", "user"]

MAX_COMMENT_LENGTH = 5000


class CommentCreate(BaseModel):
    """Request model for creating a new comment."""

    body: str = Field(..., description="Comment text")
    email: str | None = Field(
        None,
        max_length=320,
        description="Commenter email, required when unauthenticated",
    )

    @field_validator("body", mode="before")
    @classmethod
    def validate_body(cls, value: object) -> str:
        text = str(value or "").strip()
        if not text:
            raise ValueError("comment body is required.")
        if len(text) > MAX_COMMENT_LENGTH:
            raise ValueError(
                f"comment body exceeds {MAX_COMMENT_LENGTH} characters."
            )
        return text


class Comment(BaseModel):
    """Response and database model for comments."""

    id: str = Field(..., description="Unique comment identifier")
    feedback_id: str = Field(..., description="Feedback item this comment belongs to")
    user_id: str | None = Field(None, description="Profile ID of the author")
    author_email: str = Field(..., description="Email of the author")
    author_role: AuthorRole = Field("user", description="Role at posting time")
    body: str = Field(..., description="Comment text")
    created_at: datetime = Field(..., description="Creation timestamp")


class CommentListResponse(BaseModel):
    items: list[Comment]


class CommentResponse(BaseModel):
    item: Comment

"""
Pydantic models for MongoDB collections and API payloads.
Provides type safety and validation for database operations.
"""

from .auth import ANONYMOUS, RequestContext
from .comment import Comment, CommentCreate
from .feedback import (
    FeedbackEnvelope,
    FeedbackItem,
    FeedbackItemCreate,
    FeedbackRecord,
    FeedbackStatusUpdate,
)
from .intake import IntakeEvent, IntakeEventCreate, IntakeLinkRequest
from .notification import NotificationPreferences, NotificationPreferencesUpdate
from .project import Profile, Project

__all__ = [
    "ANONYMOUS",
    "RequestContext",
    "Comment",
    "CommentCreate",
    "FeedbackEnvelope",
    "FeedbackItem",
    "FeedbackItemCreate",
    "FeedbackRecord",
    "FeedbackStatusUpdate",
    "IntakeEvent",
    "IntakeEventCreate",
    "IntakeLinkRequest",
    "NotificationPreferences",
    "NotificationPreferencesUpdate",
    "Profile",
    "Project",
]

"""
Repository layer for MongoDB data access.
"""

from .comment_repository import CommentRepository
from .feedback_repository import FeedbackRepository
from .intake_repository import IntakeRepository
from .notification_preference_repository import NotificationPreferenceRepository
from .profile_repository import ProfileRepository
from .project_repository import ProjectRepository

__all__ = [
    "CommentRepository",
    "FeedbackRepository",
    "IntakeRepository",
    "NotificationPreferenceRepository",
    "ProfileRepository",
    "ProjectRepository",
]

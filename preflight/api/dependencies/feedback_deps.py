"""
Dependency injection for feedback board endpoints.
"""

from fastapi import Depends, Request

from ...core.config import Settings, get_settings
from ...database.mongodb import (
    FEEDBACK,
    FEEDBACK_COMMENTS,
    FEEDBACK_INTAKE_EVENTS,
    FEEDBACK_NOTIFICATION_PREFERENCES,
    PROFILES,
    PROJECTS,
    MongoDB,
)
from ...database.repositories.comment_repository import CommentRepository
from ...database.repositories.feedback_repository import FeedbackRepository
from ...database.repositories.intake_repository import IntakeRepository
from ...database.repositories.notification_preference_repository import (
    NotificationPreferenceRepository,
)
from ...database.repositories.profile_repository import ProfileRepository
from ...database.repositories.project_repository import ProjectRepository
from ...services.attachment_service import AttachmentService
from ...services.email_service import EmailService
from ...services.feedback_service import FeedbackService
from ...services.intake_service import IntakeService
from ...services.notification_service import NotificationService
from ...services.oss_service import OSSService
from ...services.profile_service import ProfileService
from ...services.project_service import ProjectService


def get_mongodb(request: Request) -> MongoDB:
    """Get MongoDB instance from app state."""
    mongodb: MongoDB = request.app.state.mongodb
    return mongodb


def get_email_service(request: Request) -> EmailService:
    """Get the shared email client from app state."""
    email_service: EmailService = request.app.state.email_service
    return email_service


# ===== Repositories =====


def get_project_repository(mongodb: MongoDB = Depends(get_mongodb)) -> ProjectRepository:
    return ProjectRepository(mongodb.get_collection(PROJECTS))


def get_profile_repository(mongodb: MongoDB = Depends(get_mongodb)) -> ProfileRepository:
    return ProfileRepository(mongodb.get_collection(PROFILES))


def get_feedback_repository(
    mongodb: MongoDB = Depends(get_mongodb),
) -> FeedbackRepository:
    """Get feedback repository instance."""
    return FeedbackRepository(mongodb.get_collection(FEEDBACK))


def get_comment_repository(
    mongodb: MongoDB = Depends(get_mongodb),
) -> CommentRepository:
    """Get comment repository instance."""
    return CommentRepository(mongodb.get_collection(FEEDBACK_COMMENTS))


def get_intake_repository(mongodb: MongoDB = Depends(get_mongodb)) -> IntakeRepository:
    """Get intake repository instance."""
    return IntakeRepository(mongodb.get_collection(FEEDBACK_INTAKE_EVENTS))


def get_notification_preference_repository(
    mongodb: MongoDB = Depends(get_mongodb),
) -> NotificationPreferenceRepository:
    return NotificationPreferenceRepository(
        mongodb.get_collection(FEEDBACK_NOTIFICATION_PREFERENCES)
    )


# ===== Services =====


def get_project_service(
    project_repo: ProjectRepository = Depends(get_project_repository),
    settings: Settings = Depends(get_settings),
) -> ProjectService:
    return ProjectService(project_repo, settings.project_slug)


def get_profile_service(
    profile_repo: ProfileRepository = Depends(get_profile_repository),
) -> ProfileService:
    return ProfileService(profile_repo)


def get_notification_service(
    preference_repo: NotificationPreferenceRepository = Depends(
        get_notification_preference_repository
    ),
    email_service: EmailService = Depends(get_email_service),
    settings: Settings = Depends(get_settings),
) -> NotificationService:
    """Get notification service instance."""
    return NotificationService(preference_repo, email_service, settings.app_base_url)


def get_feedback_service(
    feedback_repo: FeedbackRepository = Depends(get_feedback_repository),
    comment_repo: CommentRepository = Depends(get_comment_repository),
    intake_repo: IntakeRepository = Depends(get_intake_repository),
    profiles: ProfileService = Depends(get_profile_service),
    projects: ProjectService = Depends(get_project_service),
    notifications: NotificationService = Depends(get_notification_service),
) -> FeedbackService:
    """Get feedback service instance."""
    return FeedbackService(
        feedback_repo, comment_repo, intake_repo, profiles, projects, notifications
    )


def get_intake_service(
    intake_repo: IntakeRepository = Depends(get_intake_repository),
    feedback_repo: FeedbackRepository = Depends(get_feedback_repository),
    profiles: ProfileService = Depends(get_profile_service),
    projects: ProjectService = Depends(get_project_service),
) -> IntakeService:
    """Get intake service instance."""
    return IntakeService(intake_repo, feedback_repo, profiles, projects)


def get_oss_service_dep(settings: Settings = Depends(get_settings)) -> OSSService:
    """Get OSS client configured from settings."""
    return OSSService(
        access_key_id=settings.oss_access_key,
        access_key_secret=settings.oss_secret_key,
        endpoint=settings.oss_endpoint,
        bucket_name=settings.oss_bucket,
    )


def get_attachment_service(
    oss_service: OSSService = Depends(get_oss_service_dep),
    settings: Settings = Depends(get_settings),
) -> AttachmentService:
    """Get attachment upload service instance."""
    return AttachmentService(
        oss_service, settings.project_slug, settings.max_attachment_bytes
    )

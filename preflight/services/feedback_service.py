"""
Feedback service for business logic coordination.

This service orchestrates the feedback, comment and intake repositories with
profile resolution and notifications to provide the board operations:
submission, listing, upvotes, the admin status workflow and comments.
"""

from datetime import datetime

import structlog

from ..core.exceptions import NotFoundError, ValidationError
from ..core.feedback import (
    build_intake_dedupe_key,
    decode_feedback_content,
    encode_feedback_content,
    normalize_status,
    parse_sort,
    parse_status_filter,
    sort_feedback,
)
from ..database.repositories.comment_repository import CommentRepository
from ..database.repositories.feedback_repository import FeedbackRepository
from ..database.repositories.intake_repository import IntakeRepository
from ..models.auth import RequestContext
from ..models.comment import Comment, CommentCreate
from ..models.feedback import (
    FeedbackItem,
    FeedbackItemCreate,
    FeedbackRecord,
    FeedbackSort,
    FeedbackStatus,
)
from .notification_service import NotificationService
from .profile_service import ProfileService
from .project_service import ProjectService

logger = structlog.get_logger()

SUBMISSION_EVENT_TYPE = "feedback_submitted"


def record_to_item(record: FeedbackRecord) -> FeedbackItem:
    """Decode a stored record into its API shape."""
    envelope = decode_feedback_content(record.description)

    return FeedbackItem(
        id=record.id,
        created_at=record.created_at,
        title=record.title,
        # Legacy rows without an envelope keep their raw text
        description=envelope.body or record.description,
        status=normalize_status(record.status),
        upvotes=record.upvotes,
        preview=envelope.preview,
        type=envelope.type,
        priority=envelope.priority,
        source=envelope.source,
        reference=envelope.reference,
        attachments=envelope.attachments,
    )


class FeedbackService:
    """Service for feedback board business logic."""

    def __init__(
        self,
        feedback_repo: FeedbackRepository,
        comment_repo: CommentRepository,
        intake_repo: IntakeRepository,
        profiles: ProfileService,
        projects: ProjectService,
        notifications: NotificationService,
    ):
        """
        Initialize feedback service.

        Args:
            feedback_repo: Repository for feedback records
            comment_repo: Repository for comments
            intake_repo: Repository for the intake trail of web submissions
            profiles: Profile resolution for authors
            projects: Resolution of the configured project
            notifications: Author notifications
        """
        self.feedback_repo = feedback_repo
        self.comment_repo = comment_repo
        self.intake_repo = intake_repo
        self.profiles = profiles
        self.projects = projects
        self.notifications = notifications

    async def require_record(self, feedback_id: str) -> FeedbackRecord:
        """
        Get a feedback record of the configured project.

        Raises:
            NotFoundError: If the project or the record does not exist
        """
        project = await self.projects.get_current()
        record = await self.feedback_repo.get_by_id(project.id, feedback_id)

        if not record:
            raise NotFoundError("Feedback not found.", feedback_id=feedback_id)

        return record

    # ===== Submission =====

    async def create_item(
        self, item: FeedbackItemCreate, context: RequestContext
    ) -> FeedbackRecord:
        """
        Submit a new feedback item.

        Authenticated callers are identified by their session email; anonymous
        callers must supply one and get a widget-alias profile.

        Raises:
            ValidationError: If no email is known for an anonymous caller
        """
        email = context.email or (item.email or "").strip().lower()
        if not email:
            raise ValidationError("email is required when unauthenticated.")

        project = await self.projects.get_current()
        user_id = await self.profiles.resolve_profile_id(
            email, prefer_widget_alias=not context.is_authenticated
        )

        description = encode_feedback_content(
            item.type,
            item.priority,
            item.source,
            item.reference,
            item.description,
            item.attachments,
        )

        record = await self.feedback_repo.create(
            project_id=project.id,
            title=item.subject,
            description=description,
            user_id=user_id,
        )

        logger.info(
            "Feedback item submitted",
            feedback_id=record.id,
            type=item.type,
            authenticated=context.is_authenticated,
        )

        return record

    async def log_submission(
        self,
        record: FeedbackRecord,
        item: FeedbackItemCreate,
        reporter_email: str | None,
    ) -> None:
        """
        Append an intake trail entry for a web submission (best-effort).

        Runs after the response; failures are logged and swallowed.
        """
        try:
            await self.intake_repo.create(
                project_id=record.project_id,
                source=item.source,
                event_type=SUBMISSION_EVENT_TYPE,
                payload={
                    "title": item.subject,
                    "notes": item.description,
                    "type": item.type,
                    "priority": item.priority,
                    "attachments_count": len(item.attachments),
                },
                reference_url=item.reference,
                reporter_email=reporter_email,
                dedupe_key=build_intake_dedupe_key(
                    item.source, reporter_email, item.subject
                ),
                feedback_id=record.id,
            )
        except Exception as e:
            logger.warning(
                "Failed to log submission intake trail",
                feedback_id=record.id,
                error=str(e),
            )

    # ===== Reads =====

    async def list_items(
        self,
        sort: str | None = None,
        status: str | None = None,
        now: datetime | None = None,
    ) -> tuple[list[FeedbackItem], FeedbackSort]:
        """
        List the board.

        Args:
            sort: "new", "popular" or "trending" (unknown values sort by newest)
            status: Comma-separated status filter (empty keeps everything)
            now: Reference time for the trending score

        Returns:
            Tuple of (decoded items in display order, effective sort key)
        """
        sort_key = parse_sort(sort)
        statuses = parse_status_filter(status)

        project = await self.projects.get_current()
        records = await self.feedback_repo.list_by_project(project.id, statuses)

        items = sort_feedback([record_to_item(r) for r in records], sort_key, now)

        logger.info(
            "Feedback listed", count=len(items), sort=sort_key, statuses=statuses
        )

        return items, sort_key

    async def get_item(self, feedback_id: str) -> FeedbackItem:
        record = await self.require_record(feedback_id)
        return record_to_item(record)

    # ===== Upvotes =====

    async def upvote(self, feedback_id: str) -> int:
        """
        Add one upvote (no per-user deduplication).

        Returns:
            New upvote count

        Raises:
            NotFoundError: If the record does not exist
        """
        project = await self.projects.get_current()
        upvotes = await self.feedback_repo.increment_upvotes(project.id, feedback_id)

        if upvotes is None:
            raise NotFoundError("Feedback not found.", feedback_id=feedback_id)

        return upvotes

    # ===== Status workflow =====

    async def update_status(
        self, feedback_id: str, status: FeedbackStatus
    ) -> tuple[FeedbackRecord, FeedbackStatus]:
        """
        Move a feedback item to a new workflow status (admin only).

        Any state can move to any state, shipped included.

        Returns:
            Tuple of (record as it was before the change, previous status)

        Raises:
            NotFoundError: If the record does not exist
        """
        project = await self.projects.get_current()
        previous = await self.feedback_repo.update_status(
            project.id, feedback_id, status
        )

        if not previous:
            raise NotFoundError("Feedback not found.", feedback_id=feedback_id)

        previous_status = normalize_status(previous.status)

        logger.info(
            "Feedback status changed",
            feedback_id=feedback_id,
            previous_status=previous_status,
            status=status,
        )

        return previous, previous_status

    async def notify_status_changed(
        self,
        record: FeedbackRecord,
        previous_status: str,
        next_status: str,
        actor_email: str | None,
    ) -> None:
        """Email the author about a status change (best-effort)."""
        try:
            author_email = await self.profiles.get_email(record.user_id)
        except Exception as e:
            logger.warning("Author lookup failed", feedback_id=record.id, error=str(e))
            return

        await self.notifications.notify_status_changed(
            to_email=author_email,
            feedback_id=record.id,
            feedback_title=record.title,
            previous_status=previous_status,
            next_status=next_status,
            actor_email=actor_email,
        )

    # ===== Comments =====

    async def list_comments(self, feedback_id: str) -> list[Comment]:
        """Comments of an existing feedback item, oldest first."""
        await self.require_record(feedback_id)
        return await self.comment_repo.list_by_feedback(feedback_id)

    async def add_comment(
        self,
        feedback_id: str,
        comment: CommentCreate,
        context: RequestContext,
    ) -> tuple[Comment, FeedbackRecord]:
        """
        Add a comment to a feedback item.

        The author role is admin only for an authenticated admin session; an
        email typed into the request never grants it.

        Returns:
            Tuple of (created comment, the feedback record it belongs to)

        Raises:
            ValidationError: If no email is known for an anonymous caller
            NotFoundError: If the feedback item does not exist
        """
        actor_email = context.email or (comment.email or "").strip().lower()
        if not actor_email:
            raise ValidationError("email is required when unauthenticated.")

        record = await self.require_record(feedback_id)

        user_id = await self.profiles.resolve_profile_id(
            actor_email, prefer_widget_alias=not context.is_authenticated
        )

        created = await self.comment_repo.create(
            feedback_id=record.id,
            body=comment.body,
            author_email=actor_email,
            author_role="admin" if context.is_admin else "user",
            user_id=user_id,
        )

        return created, record

    async def notify_comment_added(self, record: FeedbackRecord, comment: Comment) -> None:
        """Email the author about a new comment (best-effort)."""
        try:
            author_email = await self.profiles.get_email(record.user_id)
        except Exception as e:
            logger.warning("Author lookup failed", feedback_id=record.id, error=str(e))
            return

        await self.notifications.notify_comment_added(
            to_email=author_email,
            feedback_id=record.id,
            feedback_title=record.title,
            comment_body=comment.body,
            actor_email=comment.author_email,
        )

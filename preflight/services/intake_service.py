"""
Intake service for reports captured from external channels.

Events are logged with a dedupe key so a repeated report returns the event
already on file. An admin can turn an event into a new feedback item or attach
it to an existing one; either way the link is set exactly once.
"""

import structlog
from pymongo.errors import PyMongoError

from ..core.exceptions import ConflictError, NotFoundError
from ..core.feedback import build_intake_dedupe_key, encode_feedback_content
from ..database.repositories.feedback_repository import FeedbackRepository
from ..database.repositories.intake_repository import IntakeRepository
from ..models.feedback import DEFAULT_PRIORITY, DEFAULT_TYPE
from ..models.intake import (
    DEFAULT_INTAKE_LIMIT,
    DEFAULT_INTAKE_SOURCE,
    MAX_INTAKE_LIMIT,
    IntakeEvent,
    IntakeEventCreate,
)
from .profile_service import ProfileService
from .project_service import ProjectService

logger = structlog.get_logger()

IMPORTED_TITLE = "Imported intake event"
IMPORTED_DESCRIPTION = "Imported from intake log."


def clamp_limit(limit: int | None) -> int:
    """Clamp a requested page size to 1..100 (default 30)."""
    if limit is None:
        return DEFAULT_INTAKE_LIMIT
    return max(1, min(MAX_INTAKE_LIMIT, limit))


class IntakeService:
    """Service for intake log business logic."""

    def __init__(
        self,
        intake_repo: IntakeRepository,
        feedback_repo: FeedbackRepository,
        profiles: ProfileService,
        projects: ProjectService,
    ):
        """
        Initialize intake service.

        Args:
            intake_repo: Repository for intake events
            feedback_repo: Repository for feedback records (convert and link)
            profiles: Profile resolution for reporters
            projects: Resolution of the configured project
        """
        self.intake_repo = intake_repo
        self.feedback_repo = feedback_repo
        self.profiles = profiles
        self.projects = projects

    async def log_event(self, data: IntakeEventCreate) -> tuple[IntakeEvent, bool]:
        """
        Log an external report unless the same report is already on file.

        Returns:
            Tuple of (event, duplicate) where duplicate is True when an
            existing event was returned instead of a new one
        """
        project = await self.projects.get_current()
        dedupe_key = build_intake_dedupe_key(
            data.source, data.reporter_email, data.title
        )

        existing = await self.intake_repo.find_by_dedupe_key(project.id, dedupe_key)
        if existing:
            logger.info(
                "Duplicate intake event", intake_id=existing.id, source=data.source
            )
            return existing, True

        event = await self.intake_repo.create(
            project_id=project.id,
            source=data.source,
            event_type=data.event_type,
            payload={
                "title": data.title,
                "notes": data.notes,
                "type": data.type,
                "priority": data.priority,
            },
            reference_url=data.reference_url,
            reporter_email=data.reporter_email,
            dedupe_key=dedupe_key,
        )

        return event, False

    async def list_events(self, limit: int | None = None) -> list[IntakeEvent]:
        """Newest events first, at most ``limit`` (clamped to 1..100)."""
        project = await self.projects.get_current()
        return await self.intake_repo.list_recent(project.id, clamp_limit(limit))

    async def _require_unlinked(self, project_id: str, intake_id: str) -> IntakeEvent:
        event = await self.intake_repo.get_by_id(project_id, intake_id)

        if not event:
            raise NotFoundError("Intake event not found.", intake_id=intake_id)

        if event.is_linked:
            raise ConflictError(
                "Intake event already linked.",
                intake_id=intake_id,
                feedback_id=event.feedback_id,
            )

        return event

    async def _reporter_profile_id(self, reporter_email: str | None) -> str | None:
        email = (reporter_email or "").strip().lower()
        if not email:
            return None

        try:
            return await self.profiles.resolve_profile_id(email, prefer_widget_alias=True)
        except PyMongoError as e:
            logger.warning("Reporter profile unavailable", error=str(e))
            return None

    async def convert(self, intake_id: str, actor_email: str | None) -> str:
        """
        Create a feedback item from an intake event and link the two.

        Returns:
            ID of the new feedback item

        Raises:
            NotFoundError: If the event does not exist
            ConflictError: If the event is (or concurrently became) linked
        """
        project = await self.projects.get_current()
        event = await self._require_unlinked(project.id, intake_id)

        payload = event.payload
        title = (payload.title or "").strip() or IMPORTED_TITLE
        description = (payload.notes or "").strip() or IMPORTED_DESCRIPTION

        content = encode_feedback_content(
            (payload.type or DEFAULT_TYPE).strip().upper(),
            (payload.priority or DEFAULT_PRIORITY).strip().upper(),
            event.source or DEFAULT_INTAKE_SOURCE,
            event.reference_url or "",
            description,
            [],
        )

        user_id = await self._reporter_profile_id(event.reporter_email)

        record = await self.feedback_repo.create(
            project_id=project.id,
            title=title,
            description=content,
            user_id=user_id,
        )

        linked = await self.intake_repo.link_feedback(
            project.id, intake_id, record.id, converted_by=actor_email
        )
        if not linked:
            logger.warning(
                "Intake event linked concurrently during convert",
                intake_id=intake_id,
                orphan_feedback_id=record.id,
            )
            raise ConflictError("Intake event already linked.", intake_id=intake_id)

        logger.info("Intake event converted", intake_id=intake_id, feedback_id=record.id)
        return record.id

    async def link(
        self, intake_id: str, feedback_id: str, actor_email: str | None
    ) -> IntakeEvent:
        """
        Attach an intake event to an existing feedback item.

        Raises:
            NotFoundError: If the event or the target feedback item does not exist
            ConflictError: If the event is already linked
        """
        project = await self.projects.get_current()
        await self._require_unlinked(project.id, intake_id)

        target = await self.feedback_repo.get_by_id(project.id, feedback_id)
        if not target:
            raise NotFoundError("Target feedback not found.", feedback_id=feedback_id)

        linked = await self.intake_repo.link_feedback(
            project.id, intake_id, feedback_id, converted_by=actor_email
        )
        if not linked:
            raise ConflictError("Intake event already linked.", intake_id=intake_id)

        return linked

"""
Intake repository for the external report log.
Events are append-only; the only mutation is the one-time link to feedback.
"""

import uuid
from datetime import datetime
from typing import Any

import structlog
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ReturnDocument

from ...core.utils.date_utils import utcnow
from ...models.intake import IntakeEvent, IntakePayload

logger = structlog.get_logger()


class IntakeRepository:
    """Repository for intake event data access operations."""

    def __init__(self, collection: AsyncIOMotorCollection):
        """
        Initialize intake repository.

        Args:
            collection: MongoDB collection for intake events
        """
        self.collection = collection

    async def ensure_indexes(self) -> None:
        """
        Create database indexes for optimal query performance.

        Indexes:
        - id (unique) - for fast lookups
        - (project_id, created_at desc) - for the newest-first admin log
        - (project_id, dedupe_key) - for duplicate detection
        - feedback_id - for reverse lookups from a feedback item
        """
        await self.collection.create_index("id", unique=True)
        await self.collection.create_index([("project_id", 1), ("created_at", -1)])
        await self.collection.create_index([("project_id", 1), ("dedupe_key", 1)])
        await self.collection.create_index("feedback_id", sparse=True)

        logger.info("Intake indexes created")

    async def create(
        self,
        project_id: str,
        source: str,
        event_type: str,
        payload: dict[str, Any],
        reference_url: str | None = None,
        reporter_email: str | None = None,
        dedupe_key: str | None = None,
        feedback_id: str | None = None,
    ) -> IntakeEvent:
        """
        Append an intake event.

        Args:
            project_id: Owning project
            source: Channel the report came from (e.g. "email", "web")
            event_type: Kind of event (e.g. "manual_capture")
            payload: Free-form report content
            reference_url: Link back to the original report
            reporter_email: Who reported it
            dedupe_key: Key used to detect repeated reports
            feedback_id: Feedback item already linked at creation time

        Returns:
            Created intake event with generated ID
        """
        now = utcnow()
        event = IntakeEvent(
            id=f"intake_{uuid.uuid4().hex[:12]}",
            project_id=project_id,
            created_at=now,
            source=source,
            reference_url=reference_url or None,
            reporter_email=reporter_email or None,
            event_type=event_type,
            payload=IntakePayload(**payload),
            dedupe_key=dedupe_key,
            feedback_id=feedback_id,
            converted_at=now if feedback_id else None,
        )

        await self.collection.insert_one(event.model_dump())

        logger.info(
            "Intake event logged",
            intake_id=event.id,
            source=source,
            event_type=event_type,
            feedback_id=feedback_id,
        )

        return event

    async def get_by_id(self, project_id: str, intake_id: str) -> IntakeEvent | None:
        event_dict = await self.collection.find_one(
            {"id": intake_id, "project_id": project_id}
        )

        if not event_dict:
            return None

        event_dict.pop("_id", None)
        return IntakeEvent(**event_dict)

    async def find_by_dedupe_key(
        self, project_id: str, dedupe_key: str
    ) -> IntakeEvent | None:
        """
        Get the most recent event carrying a dedupe key.

        Args:
            project_id: Owning project
            dedupe_key: Key built from source, reporter and title

        Returns:
            Matching event or None
        """
        cursor = (
            self.collection.find({"project_id": project_id, "dedupe_key": dedupe_key})
            .sort("created_at", -1)
            .limit(1)
        )

        async for event_dict in cursor:
            event_dict.pop("_id", None)
            return IntakeEvent(**event_dict)

        return None

    async def list_recent(self, project_id: str, limit: int) -> list[IntakeEvent]:
        """
        List intake events, newest first.

        Args:
            project_id: Owning project
            limit: Maximum number of events (already clamped by caller)

        Returns:
            List of intake events
        """
        cursor = (
            self.collection.find({"project_id": project_id})
            .sort("created_at", -1)
            .limit(limit)
        )

        events = []
        async for event_dict in cursor:
            event_dict.pop("_id", None)
            events.append(IntakeEvent(**event_dict))

        return events

    async def link_feedback(
        self,
        project_id: str,
        intake_id: str,
        feedback_id: str,
        converted_by: str | None = None,
        converted_at: datetime | None = None,
    ) -> IntakeEvent | None:
        """
        Attach a feedback item to an event that is not linked yet.

        The filter requires ``feedback_id`` to still be unset, so two concurrent
        links cannot both succeed.

        Args:
            project_id: Owning project
            intake_id: Intake event identifier
            feedback_id: Feedback item to link
            converted_by: Email of the admin performing the link
            converted_at: Link time (defaults to now)

        Returns:
            Updated event, or None if it does not exist or is already linked
        """
        event_dict = await self.collection.find_one_and_update(
            {"id": intake_id, "project_id": project_id, "feedback_id": None},
            {
                "$set": {
                    "feedback_id": feedback_id,
                    "converted_at": converted_at or utcnow(),
                    "converted_by": converted_by,
                }
            },
            return_document=ReturnDocument.AFTER,
        )

        if not event_dict:
            logger.warning(
                "Intake link skipped", intake_id=intake_id, feedback_id=feedback_id
            )
            return None

        event_dict.pop("_id", None)
        logger.info("Intake event linked", intake_id=intake_id, feedback_id=feedback_id)
        return IntakeEvent(**event_dict)

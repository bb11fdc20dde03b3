"""
Feedback repository for feedback record management.
Handles CRUD operations for the feedback collection.
"""

import uuid

import structlog
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ReturnDocument

from ...core.utils.date_utils import utcnow
from ...models.feedback import DEFAULT_STATUS, FeedbackRecord

logger = structlog.get_logger()


class FeedbackRepository:
    """Repository for feedback data access operations."""

    def __init__(self, collection: AsyncIOMotorCollection):
        """
        Initialize feedback repository.

        Args:
            collection: MongoDB collection for feedback records
        """
        self.collection = collection

    async def ensure_indexes(self) -> None:
        """
        Create database indexes for optimal query performance.

        Indexes:
        - id (unique) - for fast lookups
        - (project_id, status) - for filtered board listings
        - (project_id, created_at desc) - for newest-first listings
        - user_id - for author lookups
        """
        await self.collection.create_index("id", unique=True)
        await self.collection.create_index([("project_id", 1), ("status", 1)])
        await self.collection.create_index([("project_id", 1), ("created_at", -1)])
        await self.collection.create_index("user_id")

        logger.info("Feedback indexes created")

    async def create(
        self,
        project_id: str,
        title: str,
        description: str,
        user_id: str | None = None,
    ) -> FeedbackRecord:
        """
        Create a new feedback record in the ``open`` state with zero upvotes.

        Args:
            project_id: Owning project
            title: Feedback title
            description: Encoded envelope text
            user_id: Submitter profile ID

        Returns:
            Created feedback record with generated ID
        """
        now = utcnow()
        record = FeedbackRecord(
            id=f"feedback_{uuid.uuid4().hex[:12]}",
            project_id=project_id,
            user_id=user_id,
            title=title,
            description=description,
            status=DEFAULT_STATUS,
            upvotes=0,
            created_at=now,
            updated_at=now,
        )

        await self.collection.insert_one(record.model_dump())

        logger.info(
            "Feedback created",
            feedback_id=record.id,
            project_id=project_id,
            user_id=user_id,
        )

        return record

    async def get_by_id(self, project_id: str, feedback_id: str) -> FeedbackRecord | None:
        """
        Get a feedback record scoped to a project.

        Args:
            project_id: Owning project
            feedback_id: Feedback identifier

        Returns:
            Feedback record if found, None otherwise
        """
        record_dict = await self.collection.find_one(
            {"id": feedback_id, "project_id": project_id}
        )

        if not record_dict:
            return None

        record_dict.pop("_id", None)
        return FeedbackRecord(**record_dict)

    async def list_by_project(
        self,
        project_id: str,
        statuses: list[str] | None = None,
    ) -> list[FeedbackRecord]:
        """
        List feedback records of a project, optionally restricted to statuses.

        Args:
            project_id: Owning project
            statuses: Workflow statuses to keep; empty or None keeps all

        Returns:
            Feedback records in storage order (callers sort)
        """
        query: dict = {"project_id": project_id}
        if statuses:
            values: list[str | None] = list(statuses)
            if "open" in statuses:
                # Rows written before the status column existed count as open
                values.append(None)
            query["status"] = {"$in": values}

        cursor = self.collection.find(query)

        records = []
        async for record_dict in cursor:
            record_dict.pop("_id", None)
            if record_dict.get("status") is None:
                record_dict["status"] = DEFAULT_STATUS
            records.append(FeedbackRecord(**record_dict))

        return records

    async def increment_upvotes(self, project_id: str, feedback_id: str) -> int | None:
        """
        Atomically add one upvote.

        Args:
            project_id: Owning project
            feedback_id: Feedback identifier

        Returns:
            New upvote count, or None if the record does not exist
        """
        record_dict = await self.collection.find_one_and_update(
            {"id": feedback_id, "project_id": project_id},
            {"$inc": {"upvotes": 1}, "$set": {"updated_at": utcnow()}},
            return_document=ReturnDocument.AFTER,
        )

        if not record_dict:
            logger.warning("Failed to increment upvotes", feedback_id=feedback_id)
            return None

        upvotes = int(record_dict.get("upvotes") or 0)
        logger.info("Upvotes incremented", feedback_id=feedback_id, upvotes=upvotes)
        return upvotes

    async def update_status(
        self, project_id: str, feedback_id: str, status: str
    ) -> FeedbackRecord | None:
        """
        Set the workflow status of a feedback record.

        Args:
            project_id: Owning project
            feedback_id: Feedback identifier
            status: New status value

        Returns:
            The record as it was before the update, or None if not found
        """
        record_dict = await self.collection.find_one_and_update(
            {"id": feedback_id, "project_id": project_id},
            {"$set": {"status": status, "updated_at": utcnow()}},
            return_document=ReturnDocument.BEFORE,
        )

        if not record_dict:
            logger.warning("Failed to update status", feedback_id=feedback_id)
            return None

        record_dict.pop("_id", None)
        logger.info("Status updated", feedback_id=feedback_id, status=status)
        return FeedbackRecord(**record_dict)

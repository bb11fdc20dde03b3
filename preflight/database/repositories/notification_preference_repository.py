"""
Notification preference repository.
One document per (feedback_id, email); absent documents mean all defaults.
"""

import structlog
from motor.motor_asyncio import AsyncIOMotorCollection

from ...core.utils.date_utils import utcnow
from ...models.notification import NotificationPreferences

logger = structlog.get_logger()


class NotificationPreferenceRepository:
    """Repository for notification preference data access operations."""

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    async def ensure_indexes(self) -> None:
        await self.collection.create_index(
            [("feedback_id", 1), ("email", 1)], unique=True
        )
        logger.info("Notification preference indexes created")

    async def get(self, feedback_id: str, email: str) -> NotificationPreferences | None:
        """
        Get stored preferences.

        Args:
            feedback_id: Feedback item identifier
            email: Normalized subscriber email

        Returns:
            Stored preferences or None if nothing was saved
        """
        prefs_dict = await self.collection.find_one(
            {"feedback_id": feedback_id, "email": email}
        )

        if not prefs_dict:
            return None

        return NotificationPreferences(
            **{
                field: prefs_dict[field]
                for field in NotificationPreferences.model_fields
                if prefs_dict.get(field) is not None
            }
        )

    async def upsert(
        self,
        feedback_id: str,
        email: str,
        preferences: NotificationPreferences,
    ) -> NotificationPreferences:
        """
        Create or replace the preferences of one subscriber.

        Args:
            feedback_id: Feedback item identifier
            email: Normalized subscriber email
            preferences: Complete preference set to store

        Returns:
            The stored preferences
        """
        now = utcnow()
        await self.collection.update_one(
            {"feedback_id": feedback_id, "email": email},
            {
                "$set": {**preferences.model_dump(), "updated_at": now},
                "$setOnInsert": {"created_at": now},
            },
            upsert=True,
        )

        logger.info("Notification preferences saved", feedback_id=feedback_id)
        return preferences

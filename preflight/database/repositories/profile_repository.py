"""
Profile repository for submitter identities.
Handles lookups and creation in the profiles collection.
"""

import uuid

import structlog
from motor.motor_asyncio import AsyncIOMotorCollection

from ...core.utils.date_utils import utcnow
from ...models.project import Profile

logger = structlog.get_logger()


class ProfileRepository:
    """Repository for profile data access operations."""

    def __init__(self, collection: AsyncIOMotorCollection):
        """
        Initialize profile repository.

        Args:
            collection: MongoDB collection for profiles
        """
        self.collection = collection

    async def ensure_indexes(self) -> None:
        """Create unique indexes on profile id and email."""
        await self.collection.create_index("id", unique=True)
        await self.collection.create_index("email", unique=True)
        logger.info("Profile indexes created")

    async def get_by_id(self, profile_id: str) -> Profile | None:
        profile_dict = await self.collection.find_one({"id": profile_id})

        if not profile_dict:
            return None

        profile_dict.pop("_id", None)
        return Profile(**profile_dict)

    async def find_by_emails(self, emails: list[str]) -> Profile | None:
        """
        Get the first profile matching any of the candidate emails.

        Args:
            emails: Candidate emails (e.g. plain and +widget alias)

        Returns:
            Matching profile or None
        """
        profile_dict = await self.collection.find_one({"email": {"$in": emails}})

        if not profile_dict:
            return None

        profile_dict.pop("_id", None)
        return Profile(**profile_dict)

    async def create(self, email: str, full_name: str | None = None) -> Profile:
        """
        Create a new profile.

        Args:
            email: Profile email (stored as given)
            full_name: Display name

        Returns:
            Created profile with generated ID
        """
        profile = Profile(
            id=f"profile_{uuid.uuid4().hex[:12]}",
            email=email,
            full_name=full_name,
            created_at=utcnow(),
        )

        await self.collection.insert_one(profile.model_dump())

        logger.info("Profile created", profile_id=profile.id)
        return profile

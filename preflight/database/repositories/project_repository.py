"""
Project repository for board lookups.
Handles read access to the projects collection.
"""

import structlog
from motor.motor_asyncio import AsyncIOMotorCollection

from ...models.project import Project

logger = structlog.get_logger()


class ProjectRepository:
    """Repository for project data access operations."""

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    async def ensure_indexes(self) -> None:
        """Unique slug index; slugs are the public handle of a board."""
        await self.collection.create_index("slug", unique=True)
        await self.collection.create_index("id", unique=True)
        logger.info("Project indexes created")

    async def get_by_slug(self, slug: str) -> Project | None:
        """
        Get project by slug.

        Args:
            slug: Project slug (e.g. "preflight")

        Returns:
            Project if found, None otherwise
        """
        project_dict = await self.collection.find_one({"slug": slug})

        if not project_dict:
            return None

        project_dict.pop("_id", None)
        return Project(**project_dict)

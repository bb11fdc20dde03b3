"""
Resolution of the feedback board this deployment serves.
"""

import structlog

from ..core.exceptions import NotFoundError
from ..database.repositories.project_repository import ProjectRepository
from ..models.project import Project

logger = structlog.get_logger()


class ProjectService:
    """Looks up the configured project; every board operation is scoped to it."""

    def __init__(self, project_repo: ProjectRepository, slug: str):
        self.project_repo = project_repo
        self.slug = slug

    async def get_current(self) -> Project:
        """
        Get the configured project.

        Raises:
            NotFoundError: If no project has the configured slug
        """
        project = await self.project_repo.get_by_slug(self.slug)

        if not project:
            logger.warning("Configured project missing", slug=self.slug)
            raise NotFoundError("Target project was not found.", slug=self.slug)

        return project

"""
Profile resolution for submitters and commenters.

Unauthenticated submitters get a profile under their widget alias
(``name+widget@host``) so a later real sign-up with the same address does not
collide with it. Lookups match both forms.
"""

import structlog
from pymongo.errors import DuplicateKeyError

from ..core.identity import widget_email
from ..database.repositories.profile_repository import ProfileRepository

logger = structlog.get_logger()


class ProfileService:
    """Service for mapping emails to profile IDs."""

    def __init__(self, profile_repo: ProfileRepository):
        self.profile_repo = profile_repo

    async def resolve_profile_id(self, email: str, prefer_widget_alias: bool) -> str:
        """
        Find or create the profile for an email.

        Args:
            email: Submitter email (any case)
            prefer_widget_alias: Store new profiles under the widget alias

        Returns:
            Profile ID
        """
        normalized = email.strip().lower()
        alias = widget_email(normalized)

        existing = await self.profile_repo.find_by_emails([normalized, alias])
        if existing:
            return existing.id

        profile_email = alias if prefer_widget_alias else normalized
        full_name = normalized.split("@")[0] or "operator"
        try:
            profile = await self.profile_repo.create(profile_email, full_name=full_name)
        except DuplicateKeyError:
            # A concurrent submission created it first
            existing = await self.profile_repo.find_by_emails([normalized, alias])
            if not existing:
                raise
            logger.info("Profile created concurrently", profile_id=existing.id)
            return existing.id

        logger.info(
            "Profile resolved by creation",
            profile_id=profile.id,
            widget_alias=prefer_widget_alias,
        )
        return profile.id

    async def get_email(self, profile_id: str | None) -> str | None:
        """Email of a profile, or None when unknown."""
        if not profile_id:
            return None
        profile = await self.profile_repo.get_by_id(profile_id)
        return profile.email if profile else None

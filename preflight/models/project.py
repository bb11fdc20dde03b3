"""
Project and profile models.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class Project(BaseModel):
    """A feedback board. The service serves the one matching settings.project_slug."""

    id: str
    slug: str
    name: str | None = None


class Profile(BaseModel):
    """Submitter identity used as the owner of feedback and comments."""

    id: str = Field(..., description="Unique profile identifier")
    email: str = Field(..., description="Profile email (may be a +widget alias)")
    full_name: str | None = None
    created_at: datetime | None = None

"""
Notification preference models.

Preferences are stored per (feedback item, email). Missing rows and missing
fields both mean "send".
"""

from typing import Literal

from pydantic import BaseModel, Field

NotificationEvent = Literal["status", "comment", "resolution", "archive"]


class NotificationPreferences(BaseModel):
    status_updates: bool = True
    comment_updates: bool = True
    resolution_updates: bool = True
    archived_updates: bool = True

    def allows(self, event: NotificationEvent) -> bool:
        """Whether the given event type should be delivered."""
        column = {
            "status": self.status_updates,
            "comment": self.comment_updates,
            "resolution": self.resolution_updates,
            "archive": self.archived_updates,
        }
        return column[event]


class NotificationPreferencesUpdate(BaseModel):
    """Partial update; omitted flags keep their stored (or default) value."""

    email: str | None = Field(None, max_length=320)
    status_updates: bool | None = None
    comment_updates: bool | None = None
    resolution_updates: bool | None = None
    archived_updates: bool | None = None

    def changes(self) -> dict[str, bool]:
        return self.model_dump(exclude={"email"}, exclude_none=True)


class NotificationPreferencesResponse(BaseModel):
    email: str | None = None
    preferences: NotificationPreferences

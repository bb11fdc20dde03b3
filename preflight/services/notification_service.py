"""
Notification preferences and feedback update emails.

Preferences are kept per (feedback item, normalized email). Emails go to the
author of a feedback item when its status changes or someone comments on it,
unless the author made the change or opted out of that kind of update.
"""

import html
import re

import structlog

from ..core.exceptions import ValidationError
from ..core.identity import normalize_profile_email
from ..database.repositories.notification_preference_repository import (
    NotificationPreferenceRepository,
)
from ..models.notification import NotificationEvent, NotificationPreferences
from .email_service import EmailService

logger = structlog.get_logger()

DEFAULT_ACTOR = "Preflight team"
COMMENT_EXCERPT_LENGTH = 280

STATUS_LABELS = {
    "open": "NEW",
    "planned": "PLANNED",
    "in_progress": "IN_PROGRESS",
    "shipped": "SHIPPED",
}

_WHITESPACE = re.compile(r"\s+")


def status_label(status: str | None) -> str:
    """Display label of a workflow status; unknown values are upper-cased."""
    if not status:
        return STATUS_LABELS["open"]
    return STATUS_LABELS.get(status, status.upper())


def trim_comment(comment: str) -> str:
    """Collapse whitespace and cap the excerpt at 280 characters."""
    clean = _WHITESPACE.sub(" ", comment).strip()
    if len(clean) > COMMENT_EXCERPT_LENGTH:
        return f"{clean[:COMMENT_EXCERPT_LENGTH]}..."
    return clean


class NotificationService:
    """Service for notification preferences and update emails."""

    def __init__(
        self,
        preference_repo: NotificationPreferenceRepository,
        email_service: EmailService,
        app_base_url: str,
    ):
        """
        Initialize notification service.

        Args:
            preference_repo: Repository for stored preferences
            email_service: Outbound email client
            app_base_url: Public URL of the web app, used in report links
        """
        self.preference_repo = preference_repo
        self.email_service = email_service
        self.app_base_url = app_base_url.strip().rstrip("/") or "http://localhost:3000"

    def report_link(self, feedback_id: str) -> str:
        return f"{self.app_base_url}/report/{feedback_id}"

    async def get_preferences(
        self, feedback_id: str, email: str | None
    ) -> NotificationPreferences:
        """Stored preferences, or all defaults when nothing was saved."""
        normalized = normalize_profile_email(email)
        if not normalized:
            return NotificationPreferences()

        stored = await self.preference_repo.get(feedback_id, normalized)
        return stored or NotificationPreferences()

    async def update_preferences(
        self,
        feedback_id: str,
        email: str | None,
        changes: dict[str, bool],
    ) -> NotificationPreferences:
        """
        Apply a partial update over the stored (or default) preferences.

        Raises:
            ValidationError: If no email identifies the subscriber
        """
        normalized = normalize_profile_email(email)
        if not normalized:
            raise ValidationError("email is required.")

        current = await self.get_preferences(feedback_id, normalized)
        updated = current.model_copy(update=changes)

        return await self.preference_repo.upsert(feedback_id, normalized, updated)

    async def _deliver(
        self,
        event: NotificationEvent,
        to_email: str | None,
        actor_email: str | None,
        feedback_id: str,
        subject: str,
        body: str,
    ) -> bool:
        recipient = normalize_profile_email(to_email)
        if not recipient:
            return False
        if recipient == normalize_profile_email(actor_email):
            logger.info("Notification skipped - recipient is actor", event=event)
            return False

        preferences = await self.get_preferences(feedback_id, recipient)
        if not preferences.allows(event):
            logger.info(
                "Notification skipped - opted out",
                event=event,
                feedback_id=feedback_id,
            )
            return False

        return await self.email_service.send(recipient, subject, body)

    async def notify_status_changed(
        self,
        to_email: str | None,
        feedback_id: str,
        feedback_title: str,
        previous_status: str | None,
        next_status: str,
        actor_email: str | None = None,
    ) -> bool:
        """
        Tell the author their feedback moved to a new status.

        Shipping counts as a resolution update, everything else as a status
        update. Failures are logged and reported as False.
        """
        event: NotificationEvent = "resolution" if next_status == "shipped" else "status"
        previous = status_label(previous_status)
        next_label = status_label(next_status)
        title = html.escape(feedback_title)

        body = (
            "<p>Hi,</p>"
            "<p>Your feedback status was updated.</p>"
            f"<p><strong>{title}</strong></p>"
            f"<p>Status: <strong>{previous}</strong> &rarr; <strong>{next_label}</strong></p>"
            f"<p>Updated by: {html.escape(actor_email or DEFAULT_ACTOR)}</p>"
            f'<p><a href="{self.report_link(feedback_id)}">Open report</a></p>'
        )

        try:
            return await self._deliver(
                event,
                to_email,
                actor_email,
                feedback_id,
                f'[Preflight] "{feedback_title}" moved to {next_label}',
                body,
            )
        except Exception as e:
            logger.warning(
                "Status notification failed",
                feedback_id=feedback_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

    async def notify_comment_added(
        self,
        to_email: str | None,
        feedback_id: str,
        feedback_title: str,
        comment_body: str,
        actor_email: str | None = None,
    ) -> bool:
        """Tell the author someone commented on their feedback."""
        title = html.escape(feedback_title)

        body = (
            "<p>Hi,</p>"
            "<p>A new comment was added to your feedback.</p>"
            f"<p><strong>{title}</strong></p>"
            f"<p>From: {html.escape(actor_email or DEFAULT_ACTOR)}</p>"
            f"<blockquote>{html.escape(trim_comment(comment_body))}</blockquote>"
            f'<p><a href="{self.report_link(feedback_id)}">Open report</a></p>'
        )

        try:
            return await self._deliver(
                "comment",
                to_email,
                actor_email,
                feedback_id,
                f'[Preflight] New comment on "{feedback_title}"',
                body,
            )
        except Exception as e:
            logger.warning(
                "Comment notification failed",
                feedback_id=feedback_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

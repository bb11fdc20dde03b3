"""
Tests for dependency wiring of the feedback endpoints.
"""

from unittest.mock import MagicMock, Mock

from preflight.api.dependencies.feedback_deps import (
    get_attachment_service,
    get_feedback_repository,
    get_feedback_service,
    get_intake_service,
    get_notification_service,
    get_project_service,
)
from preflight.core.config import Settings
from preflight.database.mongodb import FEEDBACK
from preflight.services.email_service import EmailService


def make_settings() -> Settings:
    return Settings(
        _env_file=None,
        environment="test",
        project_slug="acme",
        app_base_url="https://feedback.acme.dev",
        max_attachment_mb=2,
    )


class TestFeedbackDeps:
    """Test that providers build collaborators from settings and app state"""

    def test_repository_uses_collection(self):
        mongodb = Mock()

        repo = get_feedback_repository(mongodb)

        mongodb.get_collection.assert_called_once_with(FEEDBACK)
        assert repo.collection is mongodb.get_collection.return_value

    def test_project_service_uses_slug(self):
        service = get_project_service(Mock(), make_settings())

        assert service.slug == "acme"

    def test_notification_service_uses_base_url(self):
        service = get_notification_service(
            Mock(), EmailService("", ""), make_settings()
        )

        assert service.report_link("feedback_1") == (
            "https://feedback.acme.dev/report/feedback_1"
        )

    def test_feedback_and_intake_services(self):
        feedback = get_feedback_service(
            Mock(), Mock(), Mock(), Mock(), Mock(), Mock()
        )
        intake = get_intake_service(Mock(), Mock(), Mock(), Mock())

        assert feedback.notifications is not None
        assert intake.feedback_repo is not None

    def test_attachment_service_limits(self):
        oss = MagicMock()

        service = get_attachment_service(oss, make_settings())

        assert service.max_bytes == 2 * 1024 * 1024
        assert service.project_slug == "acme"

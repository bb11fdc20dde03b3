"""
Unit tests for the feedback board API.

Tests cover:
- Submission (201, validation messages, anonymous email rule)
- Listing with sort/status query parameters
- Single item reads and upvotes
- Admin status workflow (401/403/secret header)
- Comments and notification preferences
- Image uploads (400/413/415)
- Error body shape {"error": ...} and rate limiting
"""

from unittest.mock import AsyncMock, Mock

import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient
from jose import jwt

from preflight.api.dependencies.feedback_deps import (
    get_attachment_service,
    get_feedback_service,
    get_notification_service,
)
from preflight.api.dependencies.rate_limit import get_rate_limiter
from preflight.api.errors import register_exception_handlers
from preflight.api.feedback import router
from preflight.core.config import Settings, get_settings
from preflight.core.exceptions import NotFoundError, ValidationError
from preflight.core.rate_limiter import RateLimiter
from preflight.core.utils.date_utils import utcnow
from preflight.models.comment import Comment
from preflight.models.feedback import FeedbackItem, FeedbackRecord
from preflight.models.notification import NotificationPreferences
from preflight.services.attachment_service import AttachmentService

ADMIN_SECRET = "test-admin-secret"
SECRET_KEY = "test-secret"
MAX_BYTES = 1024 * 1024


# ===== Fixtures =====


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        environment="test",
        secret_key=SECRET_KEY,
        admin_secret=ADMIN_SECRET,
        admin_emails="admin@example.com",
        max_attachment_mb=1,
    )


@pytest.fixture
def sample_record():
    return FeedbackRecord(
        id="feedback_1",
        project_id="project_1",
        user_id="profile_1",
        title="Dark mode",
        description="Add dark mode",
        status="open",
        upvotes=3,
        created_at=utcnow(),
    )


@pytest.fixture
def sample_item():
    return FeedbackItem(
        id="feedback_1",
        created_at=utcnow(),
        title="Dark mode",
        description="Add dark mode",
        preview="Add dark mode",
        upvotes=3,
    )


@pytest.fixture
def mock_service(sample_record, sample_item):
    """Mock FeedbackService"""
    service = Mock()
    service.create_item = AsyncMock(return_value=sample_record)
    service.log_submission = AsyncMock()
    service.list_items = AsyncMock(return_value=([sample_item], "new"))
    service.get_item = AsyncMock(return_value=sample_item)
    service.upvote = AsyncMock(return_value=4)
    service.update_status = AsyncMock(return_value=(sample_record, "open"))
    service.notify_status_changed = AsyncMock()
    service.require_record = AsyncMock(return_value=sample_record)
    service.list_comments = AsyncMock(return_value=[])
    service.add_comment = AsyncMock()
    service.notify_comment_added = AsyncMock()
    return service


@pytest.fixture
def mock_notifications():
    notifications = Mock()
    notifications.get_preferences = AsyncMock(return_value=NotificationPreferences())
    notifications.update_preferences = AsyncMock(
        return_value=NotificationPreferences(comment_updates=False)
    )
    return notifications


@pytest.fixture
def mock_oss():
    oss = Mock()
    oss.bucket_name = "test-bucket"
    oss.upload_file = Mock(
        side_effect=lambda key, data, content_type: f"https://cdn.example.com/{key}"
    )
    return oss


@pytest.fixture
def rate_limiter():
    """Rate limiter without Redis (fails open)"""
    return RateLimiter(None)


@pytest.fixture
def client(settings, mock_service, mock_notifications, mock_oss, rate_limiter):
    """Create test client with mocked dependencies."""
    app = FastAPI()
    app.include_router(router)
    register_exception_handlers(app)

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_feedback_service] = lambda: mock_service
    app.dependency_overrides[get_notification_service] = lambda: mock_notifications
    app.dependency_overrides[get_attachment_service] = lambda: AttachmentService(
        mock_oss, "preflight", MAX_BYTES
    )
    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter

    return TestClient(app)


def bearer(email: str) -> dict[str, str]:
    token = jwt.encode({"email": email}, SECRET_KEY, algorithm="HS256")
    return {"Authorization": f"Bearer {token}"}


# ===== Submission Tests =====


class TestCreateFeedback:
    """Test POST /api/feedback"""

    def test_create_success(self, client, mock_service):
        """Test anonymous submission with an email"""
        # Act
        response = client.post(
            "/api/feedback",
            json={
                "subject": "Dark mode",
                "description": "Add dark mode",
                "type": "feature_request",
                "email": "visitor@example.com",
            },
        )

        # Assert
        assert response.status_code == 201
        assert response.json() == {"success": True, "id": "feedback_1"}
        item, context = mock_service.create_item.call_args[0]
        assert item.type == "FEATURE_REQUEST"
        assert context.is_authenticated is False
        mock_service.log_submission.assert_called_once()
        assert mock_service.log_submission.call_args[0][2] == "visitor@example.com"

    def test_create_with_session(self, client, mock_service):
        response = client.post(
            "/api/feedback",
            json={"subject": "Dark mode", "description": "Please"},
            headers=bearer("member@example.com"),
        )

        assert response.status_code == 201
        _, context = mock_service.create_item.call_args[0]
        assert context.email == "member@example.com"

    def test_create_blank_subject(self, client, mock_service):
        response = client.post(
            "/api/feedback",
            json={"subject": "  ", "description": "Body", "email": "a@example.com"},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "subject and description are required."}
        mock_service.create_item.assert_not_called()

    def test_create_missing_field(self, client):
        response = client.post("/api/feedback", json={"subject": "Title"})

        assert response.status_code == 400
        assert response.json() == {"error": "description is required."}

    def test_create_too_many_attachments(self, client):
        response = client.post(
            "/api/feedback",
            json={
                "subject": "Title",
                "description": "Body",
                "attachments": [f"https://cdn.example.com/{i}.png" for i in range(5)],
            },
        )

        assert response.status_code == 400
        assert response.json() == {"error": "at most 4 attachments are allowed."}

    def test_create_multiline_source(self, client, mock_service):
        response = client.post(
            "/api/feedback",
            json={
                "subject": "Title",
                "description": "Real body",
                "email": "a@example.com",
                "source": "web\n\nInjected",
            },
        )

        assert response.status_code == 400
        assert response.json() == {"error": "source must be a single line."}
        mock_service.create_item.assert_not_called()

    def test_create_anonymous_without_email(self, client, mock_service):
        mock_service.create_item.side_effect = ValidationError(
            "email is required when unauthenticated."
        )

        response = client.post(
            "/api/feedback", json={"subject": "Title", "description": "Body"}
        )

        assert response.status_code == 400
        assert response.json() == {"error": "email is required when unauthenticated."}

    def test_create_rate_limited(self, client, rate_limiter, mock_service):
        """Test the 429 body and headers"""
        rate_limiter.enforce_limit = AsyncMock(
            side_effect=HTTPException(
                status_code=429,
                detail="Rate limit exceeded. Maximum 5 requests per 3600 seconds.",
                headers={"Retry-After": "3600"},
            )
        )

        response = client.post(
            "/api/feedback",
            json={"subject": "Title", "description": "Body", "email": "a@example.com"},
        )

        assert response.status_code == 429
        assert response.json() == {
            "error": "Rate limit exceeded. Maximum 5 requests per 3600 seconds."
        }
        assert response.headers["Retry-After"] == "3600"
        assert rate_limiter.enforce_limit.call_args.kwargs["key"] == (
            "create_feedback:a@example.com"
        )
        mock_service.create_item.assert_not_called()

    def test_create_unexpected_failure(self, client, mock_service):
        mock_service.create_item.side_effect = RuntimeError("mongo down")

        response = client.post(
            "/api/feedback",
            json={"subject": "Title", "description": "Body", "email": "a@example.com"},
        )

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to create feedback item: mongo down"}


# ===== Read Tests =====


class TestListFeedback:
    """Test GET /api/feedback"""

    def test_list_passes_query(self, client, mock_service):
        response = client.get("/api/feedback?sort=popular&status=new,planned")

        assert response.status_code == 200
        data = response.json()
        assert data["sort"] == "new"
        assert data["items"][0]["id"] == "feedback_1"
        mock_service.list_items.assert_called_once_with(
            sort="popular", status="new,planned"
        )

    def test_list_failure(self, client, mock_service):
        mock_service.list_items.side_effect = RuntimeError("timeout")

        response = client.get("/api/feedback")

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to load feedback: timeout"}


class TestGetFeedback:
    """Test GET /api/feedback/{id}"""

    def test_get_item(self, client):
        response = client.get("/api/feedback/feedback_1")

        assert response.status_code == 200
        assert response.json()["title"] == "Dark mode"

    def test_get_missing(self, client, mock_service):
        mock_service.get_item.side_effect = NotFoundError("Feedback not found.")

        response = client.get("/api/feedback/missing")

        assert response.status_code == 404
        assert response.json() == {"error": "Feedback not found."}


class TestUpvote:
    """Test POST /api/feedback/{id}/upvote"""

    def test_upvote(self, client, mock_service):
        response = client.post("/api/feedback/feedback_1/upvote")

        assert response.status_code == 200
        assert response.json() == {"success": True, "upvotes": 4}
        mock_service.upvote.assert_called_once_with("feedback_1")

    def test_upvote_missing(self, client, mock_service):
        mock_service.upvote.side_effect = NotFoundError("Feedback not found.")

        response = client.post("/api/feedback/missing/upvote")

        assert response.status_code == 404


# ===== Admin Tests =====


class TestUpdateStatus:
    """Test PATCH /api/feedback/{id}/status"""

    def test_admin_token(self, client, mock_service, sample_record):
        # Act
        response = client.patch(
            "/api/feedback/feedback_1/status",
            json={"status": "shipped"},
            headers=bearer("Admin@Example.com"),
        )

        # Assert
        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "status": "shipped",
            "previous_status": "open",
        }
        mock_service.update_status.assert_called_once_with("feedback_1", "shipped")
        mock_service.notify_status_changed.assert_called_once_with(
            sample_record, "open", "shipped", "admin@example.com"
        )

    def test_admin_secret_header(self, client, mock_service):
        response = client.patch(
            "/api/feedback/feedback_1/status",
            json={"status": "new"},
            headers={"X-Admin-Secret": ADMIN_SECRET},
        )

        assert response.status_code == 200
        mock_service.update_status.assert_called_once_with("feedback_1", "open")

    def test_wrong_admin_secret(self, client, mock_service):
        response = client.patch(
            "/api/feedback/feedback_1/status",
            json={"status": "planned"},
            headers={"X-Admin-Secret": "nope"},
        )

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid admin secret."}
        mock_service.update_status.assert_not_called()

    def test_anonymous(self, client):
        response = client.patch(
            "/api/feedback/feedback_1/status", json={"status": "planned"}
        )

        assert response.status_code == 401
        assert response.json() == {"error": "Authentication required."}

    def test_non_admin(self, client, mock_service):
        response = client.patch(
            "/api/feedback/feedback_1/status",
            json={"status": "planned"},
            headers=bearer("member@example.com"),
        )

        assert response.status_code == 403
        assert response.json() == {"error": "Admin access required."}
        mock_service.update_status.assert_not_called()

    def test_invalid_status(self, client):
        response = client.patch(
            "/api/feedback/feedback_1/status",
            json={"status": "archived"},
            headers={"X-Admin-Secret": ADMIN_SECRET},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid status."}

    def test_missing_item(self, client, mock_service):
        mock_service.update_status.side_effect = NotFoundError("Feedback not found.")

        response = client.patch(
            "/api/feedback/missing/status",
            json={"status": "planned"},
            headers={"X-Admin-Secret": ADMIN_SECRET},
        )

        assert response.status_code == 404
        assert response.json() == {"error": "Feedback not found."}


# ===== Comment Tests =====


class TestComments:
    """Test comment endpoints"""

    def test_add_comment(self, client, mock_service, sample_record):
        # Arrange
        created = Comment(
            id="comment_1",
            feedback_id="feedback_1",
            author_email="visitor@example.com",
            author_role="user",
            body="Me too",
            created_at=utcnow(),
        )
        mock_service.add_comment.return_value = (created, sample_record)

        # Act
        response = client.post(
            "/api/feedback/feedback_1/comments",
            json={"body": "  Me too ", "email": "visitor@example.com"},
        )

        # Assert
        assert response.status_code == 201
        assert response.json()["item"]["id"] == "comment_1"
        feedback_id, comment, context = mock_service.add_comment.call_args[0]
        assert feedback_id == "feedback_1"
        assert comment.body == "Me too"
        assert context.is_admin is False
        mock_service.notify_comment_added.assert_called_once_with(sample_record, created)

    def test_add_blank_comment(self, client, mock_service):
        response = client.post(
            "/api/feedback/feedback_1/comments", json={"body": "   "}
        )

        assert response.status_code == 400
        assert response.json() == {"error": "comment body is required."}
        mock_service.add_comment.assert_not_called()

    def test_list_comments(self, client, mock_service):
        response = client.get("/api/feedback/feedback_1/comments")

        assert response.status_code == 200
        assert response.json() == {"items": []}

    def test_list_comments_missing_item(self, client, mock_service):
        mock_service.list_comments.side_effect = NotFoundError("Feedback not found.")

        response = client.get("/api/feedback/missing/comments")

        assert response.status_code == 404


# ===== Notification Preference Tests =====


class TestNotificationPreferences:
    """Test notification preference endpoints"""

    def test_get_without_email_returns_defaults(self, client, mock_notifications):
        response = client.get("/api/feedback/feedback_1/notification-preferences")

        assert response.status_code == 200
        assert response.json() == {
            "email": None,
            "preferences": {
                "status_updates": True,
                "comment_updates": True,
                "resolution_updates": True,
                "archived_updates": True,
            },
        }
        mock_notifications.get_preferences.assert_not_called()

    def test_get_with_email(self, client, mock_notifications):
        response = client.get(
            "/api/feedback/feedback_1/notification-preferences?email=A@Example.com"
        )

        assert response.json()["email"] == "a@example.com"
        mock_notifications.get_preferences.assert_called_once_with(
            "feedback_1", "a@example.com"
        )

    def test_get_missing_item(self, client, mock_service):
        mock_service.require_record.side_effect = NotFoundError("Feedback not found.")

        response = client.get("/api/feedback/missing/notification-preferences")

        assert response.status_code == 404

    def test_update_uses_session_email(self, client, mock_notifications):
        response = client.post(
            "/api/feedback/feedback_1/notification-preferences",
            json={"email": "other@example.com", "comment_updates": False},
            headers=bearer("member@example.com"),
        )

        assert response.status_code == 200
        assert response.json()["preferences"]["comment_updates"] is False
        mock_notifications.update_preferences.assert_called_once_with(
            "feedback_1", "member@example.com", {"comment_updates": False}
        )

    def test_update_without_email(self, client, mock_notifications):
        mock_notifications.update_preferences.side_effect = ValidationError(
            "email is required."
        )

        response = client.post(
            "/api/feedback/feedback_1/notification-preferences",
            json={"status_updates": False},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "email is required."}


# ===== Upload Tests =====


class TestUpload:
    """Test POST /api/feedback/upload"""

    def test_upload_image(self, client, mock_oss):
        response = client.post(
            "/api/feedback/upload",
            files={"file": ("shot.png", b"\x89PNG data", "image/png")},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["path"].startswith("preflight/")
        assert data["path"].endswith("-shot.png")
        assert data["bucket"] == "test-bucket"
        assert data["content_type"] == "image/png"
        mock_oss.upload_file.assert_called_once()

    def test_upload_without_file(self, client):
        response = client.post(
            "/api/feedback/upload",
            files={"other": ("notes.txt", b"x", "text/plain")},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "file is required."}

    def test_upload_too_large(self, client, mock_oss):
        response = client.post(
            "/api/feedback/upload",
            files={"file": ("big.png", b"x" * (MAX_BYTES + 1), "image/png")},
        )

        assert response.status_code == 413
        assert response.json() == {"error": "file exceeds 1MB limit."}
        mock_oss.upload_file.assert_not_called()

    def test_upload_not_image(self, client):
        response = client.post(
            "/api/feedback/upload",
            files={"file": ("notes.pdf", b"%PDF", "application/pdf")},
        )

        assert response.status_code == 415
        assert response.json() == {"error": "only image uploads are allowed."}


# ===== Router Assembly Tests =====


class TestRouterAssembly:
    """Test the aggregated feedback router"""

    def test_routes_are_mounted_under_feedback_prefix(self):
        paths = {
            (route.path, method) for route in router.routes for method in route.methods
        }

        assert ("/api/feedback", "POST") in paths
        assert ("/api/feedback", "GET") in paths
        assert ("/api/feedback/upload", "POST") in paths
        assert ("/api/feedback/{feedback_id}", "GET") in paths
        assert ("/api/feedback/{feedback_id}/status", "PATCH") in paths
        assert ("/api/feedback/{feedback_id}/upvote", "POST") in paths
        assert ("/api/feedback/{feedback_id}/comments", "GET") in paths
        assert ("/api/feedback/{feedback_id}/notification-preferences", "POST") in paths

    def test_upload_route_precedes_item_route(self):
        paths = [route.path for route in router.routes]

        assert paths.index("/api/feedback/upload") < paths.index(
            "/api/feedback/{feedback_id}"
        )

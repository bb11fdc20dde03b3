"""
Unit tests for FeedbackRepository.

Tests MongoDB operations for feedback records:
- Index creation
- Record creation with defaults
- Project-scoped lookups
- Status-filtered listings (legacy rows without status)
- Atomic upvote increments
- Status updates returning the previous record
"""

from datetime import timedelta
from unittest.mock import AsyncMock, Mock

import pytest
from pymongo import ReturnDocument

from preflight.core.utils.date_utils import utcnow
from preflight.database.repositories.feedback_repository import FeedbackRepository
from preflight.models.feedback import FeedbackRecord


# ===== Fixtures =====


@pytest.fixture
def mock_collection():
    """Mock MongoDB collection"""
    collection = Mock()
    collection.insert_one = AsyncMock()
    collection.find_one = AsyncMock()
    collection.find = Mock()
    collection.find_one_and_update = AsyncMock()
    collection.create_index = AsyncMock()
    return collection


@pytest.fixture
def repository(mock_collection):
    """FeedbackRepository instance"""
    return FeedbackRepository(mock_collection)


@pytest.fixture
def sample_record_dict():
    """Stored feedback document as returned by MongoDB"""
    return {
        "_id": "mongo_object_id",
        "id": "feedback_abc123",
        "project_id": "project_1",
        "user_id": "profile_1",
        "title": "Dark mode",
        "description": "Type: FEATURE_REQUEST\n\nPlease add dark mode",
        "status": "planned",
        "upvotes": 4,
        "created_at": utcnow() - timedelta(days=1),
        "updated_at": utcnow(),
    }


def make_cursor(documents):
    async def mock_async_iter():
        for document in documents:
            yield document

    cursor = Mock()
    cursor.__aiter__ = lambda self: mock_async_iter()
    return cursor


# ===== Index Management Tests =====


class TestEnsureIndexes:
    """Test index creation"""

    @pytest.mark.asyncio
    async def test_ensure_indexes_creates_all_indexes(self, repository, mock_collection):
        """Test that all listing and lookup indexes are created"""
        await repository.ensure_indexes()

        assert mock_collection.create_index.call_count == 4
        mock_collection.create_index.assert_any_call("id", unique=True)


# ===== Create Tests =====


class TestCreate:
    """Test feedback creation"""

    @pytest.mark.asyncio
    async def test_create_sets_defaults(self, repository, mock_collection):
        """Test that new records start open with zero upvotes"""
        # Act
        result = await repository.create(
            project_id="project_1",
            title="Dark mode",
            description="encoded",
            user_id="profile_1",
        )

        # Assert
        assert result.id.startswith("feedback_")
        assert result.status == "open"
        assert result.upvotes == 0
        assert result.created_at == result.updated_at
        mock_collection.insert_one.assert_called_once()
        stored = mock_collection.insert_one.call_args[0][0]
        assert stored["project_id"] == "project_1"
        assert stored["description"] == "encoded"

    @pytest.mark.asyncio
    async def test_create_generates_unique_ids(self, repository):
        first = await repository.create("project_1", "A", "a")
        second = await repository.create("project_1", "B", "b")

        assert first.id != second.id


# ===== Lookup Tests =====


class TestGetById:
    """Test project-scoped lookups"""

    @pytest.mark.asyncio
    async def test_get_by_id_found(self, repository, mock_collection, sample_record_dict):
        # Arrange
        mock_collection.find_one.return_value = sample_record_dict

        # Act
        result = await repository.get_by_id("project_1", "feedback_abc123")

        # Assert
        assert isinstance(result, FeedbackRecord)
        assert result.title == "Dark mode"
        mock_collection.find_one.assert_called_once_with(
            {"id": "feedback_abc123", "project_id": "project_1"}
        )

    @pytest.mark.asyncio
    async def test_get_by_id_not_found(self, repository, mock_collection):
        mock_collection.find_one.return_value = None

        assert await repository.get_by_id("project_1", "missing") is None


class TestListByProject:
    """Test listing with status filters"""

    @pytest.mark.asyncio
    async def test_list_without_filter(self, repository, mock_collection, sample_record_dict):
        # Arrange
        mock_collection.find.return_value = make_cursor([sample_record_dict])

        # Act
        result = await repository.list_by_project("project_1")

        # Assert
        mock_collection.find.assert_called_once_with({"project_id": "project_1"})
        assert [record.id for record in result] == ["feedback_abc123"]

    @pytest.mark.asyncio
    async def test_open_filter_includes_legacy_rows(
        self, repository, mock_collection, sample_record_dict
    ):
        """Test that rows without a status are queried and returned as open"""
        # Arrange
        legacy = {**sample_record_dict, "id": "feedback_legacy", "status": None}
        mock_collection.find.return_value = make_cursor([legacy])

        # Act
        result = await repository.list_by_project("project_1", ["open", "planned"])

        # Assert
        mock_collection.find.assert_called_once_with(
            {"project_id": "project_1", "status": {"$in": ["open", "planned", None]}}
        )
        assert result[0].status == "open"

    @pytest.mark.asyncio
    async def test_filter_without_open_excludes_null(self, repository, mock_collection):
        mock_collection.find.return_value = make_cursor([])

        await repository.list_by_project("project_1", ["shipped"])

        mock_collection.find.assert_called_once_with(
            {"project_id": "project_1", "status": {"$in": ["shipped"]}}
        )


# ===== Upvote Tests =====


class TestIncrementUpvotes:
    """Test atomic upvote increments"""

    @pytest.mark.asyncio
    async def test_increment_returns_new_count(
        self, repository, mock_collection, sample_record_dict
    ):
        # Arrange
        mock_collection.find_one_and_update.return_value = {
            **sample_record_dict,
            "upvotes": 5,
        }

        # Act
        result = await repository.increment_upvotes("project_1", "feedback_abc123")

        # Assert
        assert result == 5
        args, kwargs = mock_collection.find_one_and_update.call_args
        assert args[0] == {"id": "feedback_abc123", "project_id": "project_1"}
        assert args[1]["$inc"] == {"upvotes": 1}
        assert kwargs["return_document"] == ReturnDocument.AFTER

    @pytest.mark.asyncio
    async def test_two_upvotes_increment_twice(
        self, repository, mock_collection, sample_record_dict
    ):
        """Test that repeated upvotes are not deduplicated"""
        mock_collection.find_one_and_update.side_effect = [
            {**sample_record_dict, "upvotes": 5},
            {**sample_record_dict, "upvotes": 6},
        ]

        first = await repository.increment_upvotes("project_1", "feedback_abc123")
        second = await repository.increment_upvotes("project_1", "feedback_abc123")

        assert (first, second) == (5, 6)
        assert mock_collection.find_one_and_update.call_count == 2

    @pytest.mark.asyncio
    async def test_increment_missing_record(self, repository, mock_collection):
        mock_collection.find_one_and_update.return_value = None

        assert await repository.increment_upvotes("project_1", "missing") is None


# ===== Status Tests =====


class TestUpdateStatus:
    """Test workflow status updates"""

    @pytest.mark.asyncio
    async def test_update_returns_previous_record(
        self, repository, mock_collection, sample_record_dict
    ):
        # Arrange
        mock_collection.find_one_and_update.return_value = sample_record_dict

        # Act
        result = await repository.update_status("project_1", "feedback_abc123", "shipped")

        # Assert
        assert result.status == "planned"
        args, kwargs = mock_collection.find_one_and_update.call_args
        assert args[1]["$set"]["status"] == "shipped"
        assert kwargs["return_document"] == ReturnDocument.BEFORE

    @pytest.mark.asyncio
    async def test_update_missing_record(self, repository, mock_collection):
        mock_collection.find_one_and_update.return_value = None

        assert await repository.update_status("project_1", "missing", "planned") is None

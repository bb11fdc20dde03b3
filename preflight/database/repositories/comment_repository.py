"""
Comment repository for feedback discussion threads.
Handles CRUD operations for the feedback_comments collection.
"""

import uuid

import structlog
from motor.motor_asyncio import AsyncIOMotorCollection

from ...core.utils.date_utils import utcnow
from ...models.comment import AuthorRole, Comment

logger = structlog.get_logger()


class CommentRepository:
    """Repository for comment data access operations."""

    def __init__(self, collection: AsyncIOMotorCollection):
        """
        Initialize comment repository.

        Args:
            collection: MongoDB collection for comments
        """
        self.collection = collection

    async def ensure_indexes(self) -> None:
        """
        Create database indexes for optimal query performance.

        Indexes:
        - id (unique) - for fast lookups
        - (feedback_id, created_at) - compound index for sorted threads
        """
        await self.collection.create_index("id", unique=True)
        await self.collection.create_index([("feedback_id", 1), ("created_at", 1)])

        logger.info("Comment indexes created")

    async def create(
        self,
        feedback_id: str,
        body: str,
        author_email: str,
        author_role: AuthorRole,
        user_id: str | None = None,
    ) -> Comment:
        """
        Create a new comment on a feedback item.

        Args:
            feedback_id: Feedback item this comment belongs to
            body: Comment text (already validated)
            author_email: Email shown as author
            author_role: "admin" or "user"
            user_id: Profile ID of the author

        Returns:
            Created comment with generated ID
        """
        comment = Comment(
            id=f"comment_{uuid.uuid4().hex[:12]}",
            feedback_id=feedback_id,
            user_id=user_id,
            author_email=author_email,
            author_role=author_role,
            body=body,
            created_at=utcnow(),
        )

        await self.collection.insert_one(comment.model_dump())

        logger.info(
            "Comment created",
            comment_id=comment.id,
            feedback_id=feedback_id,
            author_role=author_role,
        )

        return comment

    async def list_by_feedback(self, feedback_id: str) -> list[Comment]:
        """
        List all comments for a feedback item.

        Args:
            feedback_id: Feedback item identifier

        Returns:
            Comments sorted by creation date (oldest first)
        """
        cursor = self.collection.find({"feedback_id": feedback_id}).sort(
            "created_at", 1
        )

        comments = []
        async for comment_dict in cursor:
            comment_dict.pop("_id", None)
            comments.append(Comment(**comment_dict))

        return comments

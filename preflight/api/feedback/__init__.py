"""
Feedback API endpoints for feature requests and bug reports.

The endpoints are split into logical modules:
- crud: Submission, listing, retrieval and upvotes
- upload: Image attachment upload
- comments: Discussion threads
- notifications: Per-subscriber notification preferences
- admin: Admin-only status workflow
"""

from fastapi import APIRouter

from . import admin, comments, crud, notifications, upload

FEEDBACK_PREFIX = "/api/feedback"

# Main router that aggregates all sub-routers; each one carries the prefix
# because crud declares the bare collection path
router = APIRouter(tags=["feedback"])

# Upload first so "/upload" is never captured as a feedback ID
router.include_router(upload.router, prefix=FEEDBACK_PREFIX)
router.include_router(crud.router, prefix=FEEDBACK_PREFIX)
router.include_router(comments.router, prefix=FEEDBACK_PREFIX)
router.include_router(notifications.router, prefix=FEEDBACK_PREFIX)
router.include_router(admin.router, prefix=FEEDBACK_PREFIX)

__all__ = ["router"]

"""
Ranking and status filtering for feedback lists.

All functions are pure. ``sort_feedback`` returns a new list and never
mutates its input; Python's sort is stable so ties keep their prior order.
"""

from collections.abc import Iterable
from datetime import datetime
from typing import Protocol, TypeVar

from ...models.feedback import FEEDBACK_STATUSES, FeedbackSort, FeedbackStatus
from ..utils.date_utils import ensure_aware, hours_between, utcnow

# Policy constants for the trending score
TRENDING_DECAY_EXPONENT = 1.3
TRENDING_AGE_OFFSET_HOURS = 2.0
MIN_AGE_HOURS = 1.0

STATUS_ALIASES = {"new": "open"}


class Rankable(Protocol):
    created_at: datetime
    upvotes: int


RankableT = TypeVar("RankableT", bound=Rankable)


def parse_sort(value: str | None) -> FeedbackSort:
    """Map a query value to a sort key; anything unknown sorts by newest."""
    if value == "popular":
        return "popular"
    if value == "trending":
        return "trending"
    return "new"


def normalize_status(value: str | None) -> FeedbackStatus:
    """Coerce a stored or submitted status to a workflow status (default ``open``)."""
    cleaned = (value or "").strip().lower()
    cleaned = STATUS_ALIASES.get(cleaned, cleaned)
    if cleaned in FEEDBACK_STATUSES:
        return cleaned  # type: ignore[return-value]
    return "open"


def parse_status_filter(value: str | None) -> list[str]:
    """
    Parse a comma-separated status filter.

    ``new`` is accepted as an alias of ``open``; unknown entries are dropped.
    An empty result means no filtering.

    Examples:
        >>> parse_status_filter("new,planned")
        ['open', 'planned']
        >>> parse_status_filter("bogus")
        []
    """
    statuses: list[str] = []
    for part in (value or "").split(","):
        cleaned = part.strip().lower()
        cleaned = STATUS_ALIASES.get(cleaned, cleaned)
        if cleaned in FEEDBACK_STATUSES and cleaned not in statuses:
            statuses.append(cleaned)
    return statuses


def trending_score(upvotes: int, created_at: datetime, now: datetime | None = None) -> float:
    """
    Upvotes decayed by age: ``upvotes / (age_hours + 2) ** 1.3``.

    Age is clamped to at least one hour so brand-new items do not spike.
    """
    reference = now or utcnow()
    age_hours = max(hours_between(created_at, reference), MIN_AGE_HOURS)
    return upvotes / (age_hours + TRENDING_AGE_OFFSET_HOURS) ** TRENDING_DECAY_EXPONENT


def sort_feedback(
    rows: Iterable[RankableT],
    sort: FeedbackSort,
    now: datetime | None = None,
) -> list[RankableT]:
    """
    Order feedback rows by the requested key.

    Args:
        rows: Records exposing ``created_at`` and ``upvotes``
        sort: "new", "popular" or "trending"
        now: Reference time for trending (defaults to current UTC time)

    Returns:
        New list in descending order of the chosen key
    """
    items = list(rows)

    if sort == "popular":
        return sorted(items, key=lambda row: row.upvotes, reverse=True)

    if sort == "trending":
        reference = now or utcnow()
        return sorted(
            items,
            key=lambda row: trending_score(row.upvotes, row.created_at, reference),
            reverse=True,
        )

    return sorted(items, key=lambda row: ensure_aware(row.created_at), reverse=True)

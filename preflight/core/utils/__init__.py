"""Core utility modules."""

from .date_utils import ensure_aware, hours_between, utcnow

__all__ = ["ensure_aware", "hours_between", "utcnow"]

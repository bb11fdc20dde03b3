"""
Pure feedback logic: content codec, ranking and intake deduplication.
"""

from .content import (
    ATTACHMENTS_MARKER,
    decode_feedback_content,
    encode_envelope,
    encode_feedback_content,
)
from .dedupe import build_intake_dedupe_key, normalize_text
from .ranking import (
    normalize_status,
    parse_sort,
    parse_status_filter,
    sort_feedback,
    trending_score,
)

__all__ = [
    # Content codec
    "ATTACHMENTS_MARKER",
    "encode_feedback_content",
    "encode_envelope",
    "decode_feedback_content",
    # Ranking
    "parse_sort",
    "normalize_status",
    "parse_status_filter",
    "sort_feedback",
    "trending_score",
    # Intake
    "normalize_text",
    "build_intake_dedupe_key",
]

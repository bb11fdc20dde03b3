"""
Deduplication keys for intake events.
"""

import re

_WHITESPACE = re.compile(r"\s+")

MAX_PART_LENGTH = 120
MAX_KEY_LENGTH = 255


def normalize_text(value: str | None) -> str:
    """Trim, lower-case, collapse whitespace and cap at 120 characters."""
    text = str(value or "").strip().lower()
    return _WHITESPACE.sub(" ", text)[:MAX_PART_LENGTH]


def build_intake_dedupe_key(
    source: str | None = None,
    reporter_email: str | None = None,
    title: str | None = None,
) -> str:
    """
    Build the key that identifies repeated reports of the same thing.

    Examples:
        >>> build_intake_dedupe_key("Email ", "A@B.COM", "Crash on load")
        'email|a@b.com|crash on load'
    """
    parts = (
        normalize_text(source or "web"),
        normalize_text(reporter_email),
        normalize_text(title),
    )
    return "|".join(parts)[:MAX_KEY_LENGTH]

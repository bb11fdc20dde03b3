"""
Feedback content codec.

A feedback description is stored as one text field. Structured metadata
(type, priority, source, reference) travels as ``Key: value`` header lines,
followed by a blank line, the free-text body, and an attachment section
introduced by ``[ATTACHMENTS]``. The section is written when there are
attachments, or when the body itself holds a marker line::

    Type: BUG_REPORT
    Priority: HIGH
    Source: email
    Reference: https://mail.example.com/thread/42

    Checkout button does nothing on Safari.

    [ATTACHMENTS]
    https://cdn.example.com/shot-1.png

Decoding is lenient: missing or unrecognized values fall back to defaults and
malformed input never raises.
"""

from collections.abc import Sequence

from ...models.feedback import (
    DEFAULT_PRIORITY,
    DEFAULT_SOURCE,
    DEFAULT_TYPE,
    FEEDBACK_PRIORITIES,
    FEEDBACK_TYPES,
    FeedbackEnvelope,
    is_http_url,
)

ATTACHMENTS_MARKER = "[ATTACHMENTS]"

# Header key (lower-cased) -> envelope field
HEADER_FIELDS = {
    "type": "type",
    "priority": "priority",
    "source": "source",
    "reference": "reference",
}


def _has_marker_line(text: str) -> bool:
    return any(line.strip() == ATTACHMENTS_MARKER for line in text.split("\n"))


def encode_feedback_content(
    type: str,
    priority: str,
    source: str,
    reference: str,
    body: str,
    attachments: Sequence[str],
) -> str:
    """
    Pack envelope fields into a description blob.

    Args:
        type: Feedback type (e.g. "FEATURE_REQUEST")
        priority: Priority (e.g. "MEDIUM")
        source: Intake channel (e.g. "web", "email")
        reference: Reference URL, may be empty
        body: Free-text body, trimmed on the way in
        attachments: Attachment URLs, written in order

    Returns:
        Encoded description text
    """
    lines = [
        f"Type: {type}",
        f"Priority: {priority}",
        f"Source: {source}",
        f"Reference: {reference}",
        "",
        body.strip(),
    ]

    # A body line equal to the marker needs a trailing marker after it,
    # even with no attachments, or decoding would split the body there
    if attachments or _has_marker_line(body):
        lines.extend(["", ATTACHMENTS_MARKER, *attachments])

    return "\n".join(lines)


def encode_envelope(envelope: FeedbackEnvelope) -> str:
    return encode_feedback_content(
        envelope.type,
        envelope.priority,
        envelope.source,
        envelope.reference,
        envelope.body,
        envelope.attachments,
    )


def _parse_headers(lines: list[str]) -> tuple[dict[str, str], int]:
    """Read header lines; return the values found and the index where the body starts."""
    values: dict[str, str] = {}
    index = 0

    while index < len(lines):
        line = lines[index]
        if not line.strip():
            # Blank separator belongs to the header block
            return values, index + 1

        key, separator, value = line.partition(":")
        if not separator:
            return values, index

        field = HEADER_FIELDS.get(key.strip().lower())
        if field and field not in values:
            values[field] = value.strip()
        index += 1

    return values, index


def _find_marker(lines: list[str], start: int) -> int | None:
    # Last occurrence wins so a body line equal to the marker is not mistaken for it
    for index in range(len(lines) - 1, start - 1, -1):
        if lines[index].strip() == ATTACHMENTS_MARKER:
            return index
    return None


def _enum_or_default(value: str | None, allowed: tuple[str, ...], default: str) -> str:
    candidate = (value or "").strip().upper()
    return candidate if candidate in allowed else default


def decode_feedback_content(raw: str | None) -> FeedbackEnvelope:
    """
    Parse a description blob back into its envelope.

    Args:
        raw: Stored description text (None is treated as empty)

    Returns:
        Decoded envelope; ``preview`` is derived from the body
    """
    lines = (raw or "").replace("\r\n", "\n").split("\n")

    values, body_start = _parse_headers(lines)
    marker_index = _find_marker(lines, body_start)

    body_lines = lines[body_start:marker_index]
    body = "\n".join(body_lines).strip()

    attachments: list[str] = []
    if marker_index is not None:
        for line in lines[marker_index + 1 :]:
            url = line.strip()
            if is_http_url(url):
                attachments.append(url)

    return FeedbackEnvelope(
        type=_enum_or_default(values.get("type"), FEEDBACK_TYPES, DEFAULT_TYPE),
        priority=_enum_or_default(
            values.get("priority"), FEEDBACK_PRIORITIES, DEFAULT_PRIORITY
        ),
        source=values.get("source") or DEFAULT_SOURCE,
        reference=values.get("reference") or "",
        body=body,
        attachments=attachments,
    )

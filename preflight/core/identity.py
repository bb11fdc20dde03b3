"""
Email identity helpers shared by auth, profiles and notifications.
"""

import re

WIDGET_ALIAS = "+widget"
_WIDGET_SUFFIX = re.compile(r"\+widget(?=@)")


def is_admin_email(email: str | None, admin_emails: list[str]) -> bool:
    """
    Check an email against the configured admin list.

    Comparison is case-insensitive; an empty list grants admin to nobody.
    """
    if not email or not admin_emails:
        return False
    return email.strip().lower() in admin_emails


def widget_email(email: str) -> str:
    """Alias used for profiles created from unauthenticated submissions."""
    return email.replace("@", f"{WIDGET_ALIAS}@", 1)


def normalize_profile_email(raw: str | None) -> str:
    """Lower-case, trim and strip the widget alias so both forms compare equal."""
    value = str(raw or "").strip().lower()
    if not value:
        return ""
    return _WIDGET_SUFFIX.sub("", value, count=1)

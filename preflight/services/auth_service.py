"""
Session token verification.

Sessions are issued elsewhere; this service only verifies the HS256 JWT and
turns its ``email`` claim into a request context.
"""

import structlog
from jose import JWTError, jwt

from ..core.identity import is_admin_email
from ..models.auth import ANONYMOUS, RequestContext

logger = structlog.get_logger()


class AuthService:
    """Verifies bearer tokens and resolves admin rights."""

    ALGORITHM = "HS256"

    def __init__(self, secret_key: str, admin_emails: list[str]):
        self.secret_key = secret_key
        self.admin_emails = admin_emails

    def verify_token(self, token: str) -> str | None:
        """
        Verify JWT token and extract the caller email.

        Args:
            token: JWT token string

        Returns:
            Lower-cased email if valid, None if invalid/expired
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.ALGORITHM])
        except JWTError as e:
            logger.warning("Token verification failed", error=str(e))
            return None

        email = str(payload.get("email") or "").strip().lower()
        if not email:
            logger.warning("Invalid token: missing email claim")
            return None

        return email

    def context_for_email(self, email: str | None) -> RequestContext:
        if not email:
            return ANONYMOUS
        return RequestContext(
            email=email, is_admin=is_admin_email(email, self.admin_emails)
        )

    def context_from_authorization(self, authorization: str | None) -> RequestContext:
        """
        Resolve a request context from an Authorization header.

        A missing, malformed or invalid token yields the anonymous context.
        """
        if not authorization:
            return ANONYMOUS

        parts = authorization.split()
        if len(parts) != 2 or parts[0].lower() != "bearer":
            return ANONYMOUS

        return self.context_for_email(self.verify_token(parts[1]))

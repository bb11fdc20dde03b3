"""
Transactional email delivery through the Resend HTTP API.

Delivery is best-effort: an unconfigured sender skips silently and failures
are logged, never raised.
"""

import httpx
import structlog

logger = structlog.get_logger()

RESEND_API_URL = "https://api.resend.com/emails"


class EmailService:
    """Resend API client."""

    def __init__(
        self,
        api_key: str,
        from_email: str,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize email service.

        Args:
            api_key: Resend API key (empty disables sending)
            from_email: Sender address (empty disables sending)
            client: Optional httpx AsyncClient for connection pooling
        """
        self.api_key = api_key
        self.from_email = from_email
        self._client = client
        self._owns_client = client is None

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.from_email)

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=10.0)
        return self._client

    async def close(self) -> None:
        """Close HTTP client if we own it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def send(self, to: str, subject: str, html: str) -> bool:
        """
        Send one email.

        Args:
            to: Recipient address
            subject: Subject line
            html: HTML body

        Returns:
            True if the provider accepted the message
        """
        if not self.configured:
            logger.info("Email sending skipped - Resend not configured")
            return False

        client = await self._get_client()

        try:
            response = await client.post(
                RESEND_API_URL,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={
                    "from": self.from_email,
                    "to": [to],
                    "subject": subject,
                    "html": html,
                },
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Email delivery failed", error=str(e), subject=subject)
            return False

        logger.info("Email sent", subject=subject)
        return True

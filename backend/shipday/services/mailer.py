"""
Email delivery client — Resend-style HTTP API over httpx
- One long-lived AsyncClient per process (created in the app lifespan).
- An empty MAIL_API_KEY disables delivery; send() then reports False.
"""

import logging

import httpx

from shipday.config import settings

logger = logging.getLogger(__name__)


class Mailer:
    def __init__(
        self,
        api_url: str = settings.MAIL_API_URL,
        api_key: str = settings.MAIL_API_KEY,
        sender: str = settings.MAIL_FROM,
        timeout: float = settings.MAIL_TIMEOUT_SECONDS,
    ):
        self.sender = sender
        self._api_key = api_key
        self._client = httpx.AsyncClient(
            base_url=api_url,
            timeout=timeout,
            headers={"Authorization": f"Bearer {api_key}"} if api_key else {},
        )
        if not api_key:
            logger.warning("MAIL_API_KEY not set — email delivery disabled")

    @property
    def enabled(self) -> bool:
        return bool(self._api_key)

    async def send(self, to: str, subject: str, body: str) -> bool:
        """
        Send a plain-text email. Returns False when delivery is disabled.
        Raises httpx.HTTPError on transport or non-2xx responses.
        """
        if not self.enabled:
            logger.warning(f"Email skipped: delivery disabled ({subject})")
            return False

        response = await self._client.post(
            "/emails",
            json={"from": self.sender, "to": [to], "subject": subject, "text": body},
        )
        response.raise_for_status()
        logger.info(f"Email sent: {subject}")
        return True

    async def aclose(self):
        await self._client.aclose()

"""
Push delivery client — FCM HTTP v1 shaped requests over httpx
- One long-lived AsyncClient per process (created in the app lifespan).
- An empty PUSH_ENDPOINT disables delivery (logged once at startup).
"""

import logging

import httpx

from shipday.config import settings

logger = logging.getLogger(__name__)


class PushClient:
    def __init__(
        self,
        endpoint: str = settings.PUSH_ENDPOINT,
        auth_token: str = settings.PUSH_AUTH_TOKEN,
        timeout: float = settings.PUSH_TIMEOUT_SECONDS,
    ):
        self.endpoint = endpoint
        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers={"Authorization": f"Bearer {auth_token}"} if auth_token else {},
        )
        if not endpoint:
            logger.warning("PUSH_ENDPOINT not set — push delivery disabled")

    @property
    def enabled(self) -> bool:
        return bool(self.endpoint)

    async def send(self, token: str, title: str, body: str, data: dict | None = None) -> dict | None:
        """
        Deliver one message to a device token.
        FCM requires every data value to be a string.
        Raises httpx.HTTPError on transport or non-2xx responses.
        """
        if not self.enabled:
            logger.debug("Push skipped: delivery disabled")
            return None

        message = {
            "message": {
                "token": token,
                "notification": {"title": title, "body": body},
                "data": {k: str(v) for k, v in (data or {}).items()},
            }
        }
        response = await self._client.post(self.endpoint, json=message)
        response.raise_for_status()
        logger.info(f"Push sent: {title}")
        return response.json() if response.content else {}

    async def aclose(self):
        await self._client.aclose()

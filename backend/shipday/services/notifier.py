"""
Notification emitter
- notify(): in-app notification row. As a side effect it never raises.
- push_if_available(): device push when the target has a token.
- emit_realtime(): broadcast to connected websocket clients.
"""

import logging

from sqlalchemy.orm import Session

from shipday.models.notification import Notification, RecipientType
from shipday.schemas.notifications import NotificationResponse

logger = logging.getLogger(__name__)


def notify(
    db: Session,
    recipient_type: RecipientType | None,
    recipient_id: int | None,
    title: str,
    message: str,
    category: str,
    propagate: bool = False,
) -> Notification | None:
    """
    Persist a notification.
    With propagate=False a failed write is rolled back, logged and None is
    returned, so the caller's primary operation still succeeds.
    """
    notification = Notification(
        recipient_type=recipient_type,
        recipient_id=recipient_id,
        title=title,
        message=message,
        category=category,
    )
    try:
        db.add(notification)
        db.commit()
        db.refresh(notification)
    except Exception as e:
        db.rollback()
        if propagate:
            raise
        logger.error(f"Notification write failed ({category} -> {recipient_type}:{recipient_id}): {e}")
        return None

    logger.info(f"Notification created: {category} -> {recipient_type}:{recipient_id}")
    return notification


def serialize_notification(notification: Notification | None) -> dict | None:
    if notification is None:
        return None
    return NotificationResponse.model_validate(notification).model_dump(by_alias=True, mode="json")


async def push_if_available(push_client, token: str | None, title: str, body: str, data: dict | None = None) -> bool:
    """Send a push when a token is registered. Returns True only when a push was sent."""
    if not token:
        logger.info(f"Push skipped: no device token ({title})")
        return False
    if not push_client.enabled:
        logger.info(f"Push skipped: delivery disabled ({title})")
        return False
    try:
        await push_client.send(token, title, body, data or {})
    except Exception as e:
        logger.error(f"Push delivery failed ({title}): {e}")
        return False
    return True


async def emit_realtime(realtime, event: str, payload: dict) -> None:
    """Fire-and-forget; no acknowledgement is tracked."""
    try:
        await realtime.emit(event, payload)
    except Exception as e:
        logger.error(f"Realtime emit failed ({event}): {e}")

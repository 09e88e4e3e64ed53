"""
Notification API — in-app notification records
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy import desc
from sqlalchemy.orm import Session

from shipday.database import get_db
from shipday.errors import NotFound
from shipday.models import Notification
from shipday.models.notification import RecipientType
from shipday.schemas.notifications import (
    NotificationCreate, NotificationResponse, NotificationListResponse, ClearNotificationsResponse,
)
from shipday.services.notifier import notify

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.post("", response_model=NotificationResponse, status_code=201)
def create_notification(payload: NotificationCreate, db: Session = Depends(get_db)):
    """Explicit create: a failed write is an error here, not a side effect"""
    notification = notify(
        db,
        payload.recipient_type,
        payload.recipient_id,
        payload.title,
        payload.message,
        payload.category,
        propagate=True,
    )
    return NotificationResponse.model_validate(notification)


@router.get("", response_model=NotificationListResponse)
def list_notifications(
    recipient_type: RecipientType | None = Query(None, alias="recipientType"),
    recipient_id: int | None = Query(None, alias="recipientId"),
    unread_only: bool = Query(False, alias="unreadOnly"),
    db: Session = Depends(get_db),
):
    query = db.query(Notification)
    if recipient_type is not None:
        query = query.filter(Notification.recipient_type == recipient_type)
    if recipient_id is not None:
        query = query.filter(Notification.recipient_id == recipient_id)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))

    rows = query.order_by(desc(Notification.created_at), desc(Notification.id)).all()
    return NotificationListResponse(notifications=[NotificationResponse.model_validate(n) for n in rows])


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
def mark_as_read(notification_id: int, db: Session = Depends(get_db)):
    notification = db.query(Notification).get(notification_id)
    if not notification:
        raise NotFound("Notification not found")
    notification.is_read = True
    db.commit()
    db.refresh(notification)
    return NotificationResponse.model_validate(notification)


@router.delete("/clear-all", response_model=ClearNotificationsResponse)
def clear_all(
    recipient_type: RecipientType | None = Query(None, alias="recipientType"),
    recipient_id: int | None = Query(None, alias="recipientId"),
    db: Session = Depends(get_db),
):
    """Delete all notifications, or only those of one recipient"""
    query = db.query(Notification)
    if recipient_type is not None:
        query = query.filter(Notification.recipient_type == recipient_type)
    if recipient_id is not None:
        query = query.filter(Notification.recipient_id == recipient_id)
    deleted = query.delete(synchronize_session=False)
    db.commit()
    return ClearNotificationsResponse(message="All notifications cleared", deleted=deleted)

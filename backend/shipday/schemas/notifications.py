"""
Notification Pydantic schemas
"""

from datetime import datetime

from pydantic import Field

from shipday.models.notification import RecipientType
from shipday.schemas.common import CamelModel


class NotificationCreate(CamelModel):
    recipient_type: RecipientType | None = None
    recipient_id: int | None = None
    title: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    category: str = "general"


class NotificationResponse(CamelModel):
    id: int
    recipient_type: RecipientType | None = None
    recipient_id: int | None = None
    title: str
    message: str
    category: str
    is_read: bool
    created_at: datetime | None = None


class NotificationListResponse(CamelModel):
    notifications: list[NotificationResponse]


class ClearNotificationsResponse(CamelModel):
    message: str
    deleted: int

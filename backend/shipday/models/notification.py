"""
notifications table — in-app messages for users and drivers
- recipient_id is a weak reference; orphaned rows are tolerated.
- Only is_read is ever mutated after creation.
"""

import enum
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Boolean, Enum, DateTime, Text

from shipday.database import Base


class RecipientType(str, enum.Enum):
    USER = "user"
    DRIVER = "driver"


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    recipient_type = Column(Enum(RecipientType), nullable=True)
    recipient_id = Column(Integer, nullable=True, index=True)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    category = Column(String(50), nullable=False)  # "registration", "shipment_assigned" ...
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

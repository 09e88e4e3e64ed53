"""
orders table — customer-facing delivery requests
- Optionally linked to the Shipment that fulfils it.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship

from shipday.database import Base


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String(20), unique=True, nullable=False)  # "ORD001"
    sender_name = Column(String(100), nullable=False)
    sender_phone = Column(String(30), nullable=False)
    receiver_name = Column(String(100), nullable=False)
    receiver_phone = Column(String(30), nullable=False)
    delivery_address = Column(String(255), nullable=False)
    package_type = Column(String(50), default="parcel")
    weight = Column(Float, nullable=False)
    dimensions = Column(String(100), nullable=True)  # "30x20x10"
    delivery_type = Column(String(20), default="economy")
    pickup_date = Column(DateTime, nullable=True)
    time_slot = Column(String(50), nullable=True)
    notes = Column(Text, default="")
    cost = Column(Float, nullable=False, default=0.0)
    total_amount = Column(Float, nullable=False, default=0.0)
    status = Column(String(30), nullable=False, default="Pending")
    shipment_id = Column(Integer, ForeignKey("shipments.id"), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    shipment = relationship("Shipment", back_populates="orders")

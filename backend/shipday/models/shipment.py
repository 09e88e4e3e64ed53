"""
shipments table — parcel movement records
- Party and parcel blocks are stored as JSON documents.
- Legacy flattened columns are always populated alongside them.
- Payment columns are flat so the payment status can be updated conditionally.
"""

import enum
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Float, Enum, DateTime, ForeignKey, JSON, Text
from sqlalchemy.orm import relationship

from shipday.database import Base


class ShipmentStatus(str, enum.Enum):
    PENDING = "Pending"
    SHIPPING = "Shipping"
    DELIVERED = "Delivered"


class ServiceType(str, enum.Enum):
    ECONOMY = "economy"
    EXPRESS = "express"


class PaymentMethod(str, enum.Enum):
    EWALLET = "ewallet"
    GATEWAY = "gateway"
    COD = "cod"
    PAYFAST = "payfast"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class Shipment(Base):
    __tablename__ = "shipments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    shipment_id = Column(String(20), unique=True, nullable=False)  # "SHP001"

    sender_details = Column(JSON)
    collection_details = Column(JSON)
    delivery_details = Column(JSON)
    parcel_details = Column(JSON)

    payment_method = Column(Enum(PaymentMethod), default=PaymentMethod.GATEWAY, nullable=False)
    payment_status = Column(Enum(PaymentStatus), default=PaymentStatus.PENDING, nullable=False)
    payment_amount = Column(Float, default=0.0)
    payment_transaction_id = Column(String(100), nullable=True)

    # Legacy flattened fields
    sender_name = Column(String(100), default="N/A")
    sender_phone = Column(String(30), default="0000000000")
    receiver_name = Column(String(100), default="N/A")
    receiver_phone = Column(String(30), default="0000000000")
    start_location = Column(String(100), default="Unknown")
    end_location = Column(String(100), default="Unknown")
    parcel_weight = Column(Float, default=1.0)
    package_type = Column(String(50), default="parcel")
    cost = Column(Float, default=0.0)
    eta = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    notes = Column(Text, default="")

    status = Column(Enum(ShipmentStatus), default=ShipmentStatus.PENDING, nullable=False)
    driver_id = Column(Integer, ForeignKey("drivers.id"), nullable=True)
    driver_name = Column(String(100), default="Unassigned")

    route_id = Column(String(50), nullable=True)
    tracking_number = Column(String(50), nullable=True)

    date_shipped = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    delivered_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    driver = relationship("Driver", lazy="joined")
    orders = relationship("Order", back_populates="shipment")

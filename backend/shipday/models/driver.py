"""
drivers table — delivery fleet operators (admin approval required)
"""

import enum
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Enum, DateTime

from shipday.database import Base


class VehicleType(str, enum.Enum):
    BIKE = "bike"
    CAR = "car"
    VAN = "van"
    TRUCK = "truck"


class DriverStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Driver(Base):
    __tablename__ = "drivers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    driver_id = Column(String(20), unique=True, nullable=False)  # "DRV001"
    username = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False)  # stored lowercase
    phone = Column(String(30), nullable=False)
    password = Column(String(255), nullable=False)  # bcrypt hash
    vehicle_type = Column(Enum(VehicleType), nullable=False)
    vehicle_number = Column(String(30), unique=True, nullable=False)  # stored uppercase
    id_proof = Column(String(255), nullable=False)
    status = Column(Enum(DriverStatus), default=DriverStatus.PENDING, nullable=False)
    fcm_token = Column(String(512), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

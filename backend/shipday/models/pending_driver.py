"""
pending_drivers table — driver sign-ups waiting for email confirmation
"""

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Enum, DateTime

from shipday.database import Base
from shipday.models.driver import VehicleType


class PendingDriver(Base):
    __tablename__ = "pending_drivers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False)
    username = Column(String(100), nullable=False)
    phone = Column(String(30), nullable=False)
    password = Column(String(255), nullable=False)  # already hashed
    vehicle_type = Column(Enum(VehicleType), nullable=False)
    vehicle_number = Column(String(30), nullable=False)
    id_proof = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

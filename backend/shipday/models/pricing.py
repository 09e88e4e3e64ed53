"""
pricing_config table — single-row tariff configuration
"""

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, DateTime, JSON

from shipday.database import Base

DEFAULT_ECONOMY = {"baseAmount": 20, "divisor": 5000, "rate": 1.2, "eta": "1-4 days"}
DEFAULT_EXPRESS = {"baseAmount": 40, "divisor": 4000, "rate": 1.2, "eta": "1-2 days"}
DEFAULT_SATCHEL = {"a4": 90, "a3": 110}


class PricingConfig(Base):
    __tablename__ = "pricing_config"

    id = Column(Integer, primary_key=True, autoincrement=True)
    economy = Column(JSON, nullable=False, default=lambda: dict(DEFAULT_ECONOMY))
    express = Column(JSON, nullable=False, default=lambda: dict(DEFAULT_EXPRESS))
    satchel = Column(JSON, nullable=False, default=lambda: dict(DEFAULT_SATCHEL))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

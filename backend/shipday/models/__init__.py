"""
SQLAlchemy ORM model package
- Every model is imported here so it registers on Base.metadata.
"""

from shipday.models.driver import Driver
from shipday.models.user import User
from shipday.models.shipment import Shipment
from shipday.models.order import Order
from shipday.models.notification import Notification
from shipday.models.auth_token import AuthToken
from shipday.models.pricing import PricingConfig
from shipday.models.verification_code import VerificationCode
from shipday.models.pending_driver import PendingDriver

__all__ = [
    "Driver",
    "User",
    "Shipment",
    "Order",
    "Notification",
    "AuthToken",
    "PricingConfig",
    "VerificationCode",
    "PendingDriver",
]

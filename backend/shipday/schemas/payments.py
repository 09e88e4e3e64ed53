"""
Payment Pydantic schemas
"""

from shipday.schemas.common import CamelModel


class PaymentIntentRequest(CamelModel):
    amount: float
    currency: str | None = None
    user_id: int | None = None


class PaymentIntentResponse(CamelModel):
    payment_intent: str
    ephemeral_key: str
    customer: str
    publishable_key: str


class PayFastRequest(CamelModel):
    shipment_id: str


class PayFastResponse(CamelModel):
    redirect_url: str
    payment_data: dict[str, str]

"""
Pricing configuration Pydantic schemas
"""

from datetime import datetime

from pydantic import Field

from shipday.schemas.common import CamelModel


class TierUpdate(CamelModel):
    base_amount: float | None = Field(None, ge=0)
    divisor: float | None = Field(None, gt=0)
    rate: float | None = Field(None, ge=0)
    eta: str | None = None


class SatchelUpdate(CamelModel):
    a4: float | None = Field(None, ge=0)
    a3: float | None = Field(None, ge=0)


class PricingUpdate(CamelModel):
    economy: TierUpdate | None = None
    express: TierUpdate | None = None
    satchel: SatchelUpdate | None = None


class PricingResponse(CamelModel):
    economy: dict
    express: dict
    satchel: dict
    updated_at: datetime | None = None


class PricingUpdatedResponse(CamelModel):
    message: str
    pricing: PricingResponse

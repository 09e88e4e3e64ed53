"""
Pricing configuration API
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shipday.database import get_db
from shipday.schemas.pricing import PricingUpdate, PricingResponse, PricingUpdatedResponse
from shipday.services import pricing as pricing_service

router = APIRouter(prefix="/api/pricing", tags=["pricing"])


@router.get("", response_model=PricingResponse)
def get_pricing(db: Session = Depends(get_db)):
    return PricingResponse.model_validate(pricing_service.get_pricing(db))


@router.put("", response_model=PricingUpdatedResponse)
def update_pricing(patch: PricingUpdate, db: Session = Depends(get_db)):
    config = pricing_service.update_pricing(db, patch)
    return PricingUpdatedResponse(message="Pricing updated successfully", pricing=PricingResponse.model_validate(config))

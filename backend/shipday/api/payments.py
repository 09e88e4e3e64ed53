"""
Payment API — Stripe payment sheet, PayFast redirect and ITN callback
"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from shipday.config import settings
from shipday.database import get_db
from shipday.models.notification import RecipientType
from shipday.schemas.payments import PaymentIntentRequest, PaymentIntentResponse, PayFastRequest, PayFastResponse
from shipday.services import payments as payment_service
from shipday.services.notifier import notify
from shipday.services.shipment_lifecycle import get_shipment

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/payments", tags=["payments"])


@router.post("/create-payment-intent", response_model=PaymentIntentResponse)
async def create_payment_intent(body: PaymentIntentRequest, db: Session = Depends(get_db)):
    result = await payment_service.create_gateway_intent(body.amount, body.currency)

    currency = (body.currency or settings.STRIPE_CURRENCY).upper()
    notify(
        db,
        RecipientType.USER if body.user_id else None,
        body.user_id,
        "Payment Initiated",
        f"Your payment of {body.amount:.2f} {currency} has been initiated.",
        "transaction",
    )
    return PaymentIntentResponse(**result)


@router.post("/payfast", response_model=PayFastResponse)
def initiate_payfast(body: PayFastRequest, db: Session = Depends(get_db)):
    shipment = get_shipment(db, body.shipment_id)
    payment = payment_service.create_redirect_payment(shipment)
    return PayFastResponse(redirect_url=payment["redirectUrl"], payment_data=payment["data"])


@router.post("/payfast/notify")
async def payfast_notify(request: Request, db: Session = Depends(get_db)):
    """PayFast ITN callback (form-encoded)"""
    form = await request.form()
    result = payment_service.verify_itn(db, dict(form))
    return result

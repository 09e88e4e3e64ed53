"""
Payment adapter
- Stripe: customer + ephemeral key + PaymentIntent for the mobile payment sheet
- PayFast: signed redirect parameter set, ITN (instant transaction notification) verification
"""

import asyncio
import hashlib
import logging
from urllib.parse import quote, urlencode

import stripe
from sqlalchemy.orm import Session

from shipday.config import settings
from shipday.errors import NotFound, PaymentProviderError, ValidationError
from shipday.models.shipment import Shipment, PaymentStatus

logger = logging.getLogger(__name__)

PAYFAST_SANDBOX_URL = "https://sandbox.payfast.co.za/eng/process"
PAYFAST_LIVE_URL = "https://www.payfast.co.za/eng/process"

# PayFast ITN payment_status -> stored payment status
ITN_STATUS_MAP = {
    "COMPLETE": PaymentStatus.PAID,
    "FAILED": PaymentStatus.FAILED,
    "CANCELLED": PaymentStatus.FAILED,
}


# ── Stripe ──

def _create_stripe_intent(amount_minor: int, currency: str) -> dict:
    """Blocking Stripe calls — run in an executor."""
    stripe.api_key = settings.STRIPE_SECRET_KEY
    customer = stripe.Customer.create()
    ephemeral_key = stripe.EphemeralKey.create(
        customer=customer.id,
        stripe_version=settings.STRIPE_API_VERSION,
    )
    intent = stripe.PaymentIntent.create(
        amount=amount_minor,
        currency=currency,
        customer=customer.id,
        automatic_payment_methods={"enabled": True},
    )
    return {
        "payment_intent": intent.client_secret,
        "ephemeral_key": ephemeral_key.secret,
        "customer": customer.id,
        "publishable_key": settings.STRIPE_PUBLISHABLE_KEY,
    }


async def create_gateway_intent(amount: float, currency: str | None = None) -> dict:
    """
    Create a short-lived Stripe customer and a PaymentIntent for `amount`.
    The amount is given in major units and sent in minor units (x100).
    Raises ValidationError for a non-positive amount, PaymentProviderError otherwise.
    """
    if amount is None or amount <= 0:
        raise ValidationError("Amount must be a positive number")
    if not settings.STRIPE_SECRET_KEY:
        raise PaymentProviderError("Card payments are not configured")

    amount_minor = int(round(amount * 100))
    currency = (currency or settings.STRIPE_CURRENCY).lower()

    try:
        loop = asyncio.get_event_loop()
        result = await loop.run_in_executor(None, _create_stripe_intent, amount_minor, currency)
    except Exception as e:
        logger.error(f"Stripe PaymentIntent creation failed: {e}")
        raise PaymentProviderError(f"Payment provider error: {e}") from e

    logger.info(f"Stripe PaymentIntent created: {amount_minor} {currency} (customer {result['customer']})")
    return result


# ── PayFast ──

def _pf_encode(value: str) -> str:
    # Same escaping as JavaScript encodeURIComponent, spaces as '+'
    return quote(value.strip(), safe="!*'()").replace("%20", "+")


def payfast_signature(data: dict, passphrase: str | None = None) -> str:
    """
    MD5 over `key=value&...` for every non-empty field in insertion order,
    optionally followed by `&passphrase=...`.
    """
    pairs = [f"{key}={_pf_encode(str(value))}" for key, value in data.items() if value not in ("", None)]
    payload = "&".join(pairs)
    if passphrase is not None:
        payload += f"&passphrase={_pf_encode(passphrase)}"
    return hashlib.md5(payload.encode("utf-8")).hexdigest()


def payfast_process_url() -> str:
    return PAYFAST_SANDBOX_URL if settings.PAYFAST_MODE == "sandbox" else PAYFAST_LIVE_URL


def build_payfast_data(shipment: Shipment) -> dict:
    """Ordered PayFast parameter set (without signature) for a shipment."""
    sender = shipment.sender_details or {}
    parcel = shipment.parcel_details or {}

    names = (sender.get("fullName") or shipment.sender_name or "").split(" ")
    first_name = names[0]
    last_name = " ".join(names[1:]) or "Sender"

    return {
        "merchant_id": settings.PAYFAST_MERCHANT_ID,
        "merchant_key": settings.PAYFAST_MERCHANT_KEY,
        "return_url": f"{settings.FRONTEND_URL}/payment/success",
        "cancel_url": f"{settings.FRONTEND_URL}/payment/cancel",
        "notify_url": f"{settings.API_URL}/api/payments/payfast/notify",
        "name_first": first_name,
        "name_last": last_name,
        "email_address": sender.get("email") or "",
        "m_payment_id": shipment.shipment_id,
        "amount": f"{float(shipment.payment_amount or 0):.2f}",
        "item_name": f"Shipment {shipment.shipment_id}",
        "item_description": f"{parcel.get('serviceType') or 'economy'} delivery",
    }


def create_redirect_payment(shipment: Shipment) -> dict:
    """
    Signed PayFast redirect for a shipment.
    Returns {"url", "redirectUrl", "data"} where data includes the signature.

    The passphrase is appended once to the signed string and never becomes a
    posted field. Integrations that also add `passphrase` to the data before
    signing end up with it in the string twice, so their digest differs from
    this one for the same merchant settings.
    """
    data = build_payfast_data(shipment)
    data["signature"] = payfast_signature(data, settings.PAYFAST_PASSPHRASE or None)

    url = payfast_process_url()
    query = urlencode({k: v for k, v in data.items() if v != ""})
    logger.info(f"PayFast payment data generated: {shipment.shipment_id} ({data['amount']})")
    return {"url": url, "redirectUrl": f"{url}?{query}", "data": data}


def verify_itn(db: Session, form: dict) -> dict:
    """
    Apply a PayFast ITN to its shipment.
    - Signature is recomputed over every posted field except `signature`.
    - The payment status only moves away from pending (conditional update).
    """
    received = form.get("signature")
    fields = {k: v for k, v in form.items() if k != "signature"}
    expected = payfast_signature(fields, settings.PAYFAST_PASSPHRASE or None)
    if not received or received != expected:
        logger.warning(f"PayFast ITN rejected: signature mismatch ({form.get('m_payment_id')})")
        raise ValidationError("Invalid PayFast signature")

    shipment_id = form.get("m_payment_id")
    shipment = db.query(Shipment).filter(Shipment.shipment_id == shipment_id).first()
    if not shipment:
        raise NotFound("Shipment not found")

    gross = form.get("amount_gross")
    if gross is not None:
        try:
            gross_amount = float(gross)
        except ValueError:
            raise ValidationError("Invalid amount_gross")
        if abs(gross_amount - float(shipment.payment_amount or 0)) > 0.01:
            logger.warning(f"PayFast ITN amount mismatch: {shipment_id} ({gross} != {shipment.payment_amount})")
            raise ValidationError("Payment amount mismatch")

    new_status = ITN_STATUS_MAP.get((form.get("payment_status") or "").upper())
    if new_status is None:
        return {"shipmentId": shipment_id, "paymentStatus": shipment.payment_status.value, "updated": False}

    updated = (
        db.query(Shipment)
        .filter(Shipment.shipment_id == shipment_id, Shipment.payment_status == PaymentStatus.PENDING)
        .update(
            {
                Shipment.payment_status: new_status,
                Shipment.payment_transaction_id: form.get("pf_payment_id"),
            },
            synchronize_session=False,
        )
    )
    db.commit()

    if updated:
        logger.info(f"PayFast ITN applied: {shipment_id} -> {new_status.value}")
    else:
        logger.info(f"PayFast ITN ignored: {shipment_id} payment already settled")

    db.refresh(shipment)
    return {"shipmentId": shipment_id, "paymentStatus": shipment.payment_status.value, "updated": bool(updated)}

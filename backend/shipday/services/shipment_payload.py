"""
Shipment payload normalisation
Two accepted request shapes, one stored shape:
  - detailed: senderDetails + collectionDetails + deliveryDetails + parcelDetails (+ payment)
  - legacy:   flat senderName / senderPhone / receiverName / receiverPhone / start / end ...
Whichever is given, the other is derived so every stored shipment carries both.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from pydantic.alias_generators import to_camel

from shipday.config import settings
from shipday.errors import ValidationError
from shipday.models.shipment import ServiceType, PaymentMethod, PaymentStatus
from shipday.schemas.shipments import ShipmentCreate

LEGACY_EMAIL = "legacy@example.com"
PLACEHOLDER_PHONE = "0000000000"

DETAILED_BLOCKS = ("sender_details", "collection_details", "delivery_details", "parcel_details")
LEGACY_REQUIRED = ("sender_name", "sender_phone", "receiver_name", "receiver_phone", "start", "end")


@dataclass
class NormalizedShipment:
    sender_details: dict
    collection_details: dict
    delivery_details: dict
    parcel_details: dict
    payment_method: PaymentMethod
    payment_amount: float
    payment_transaction_id: str | None
    sender_name: str
    sender_phone: str
    receiver_name: str
    receiver_phone: str
    start_location: str
    end_location: str
    parcel_weight: float
    package_type: str
    cost: float
    eta: datetime
    notes: str = ""
    payment_status: PaymentStatus = field(default=PaymentStatus.PENDING)

    def as_columns(self) -> dict:
        return dict(self.__dict__)


def is_detailed(payload: ShipmentCreate) -> bool:
    return all(getattr(payload, name) is not None for name in DETAILED_BLOCKS)


def estimate_eta(service_type: ServiceType | None, now: datetime) -> datetime:
    """Creation date + 2 days for express, + 4 otherwise."""
    days = settings.EXPRESS_ETA_DAYS if service_type == ServiceType.EXPRESS else settings.ECONOMY_ETA_DAYS
    return now + timedelta(days=days)


def normalize_shipment_payload(payload: ShipmentCreate, now: datetime | None = None) -> NormalizedShipment:
    """Map either request shape onto the stored shape. Raises ValidationError on missing fields."""
    now = now or datetime.now(timezone.utc)

    if is_detailed(payload):
        return _from_detailed(payload, now)

    given = [name for name in DETAILED_BLOCKS if getattr(payload, name) is not None]
    if given:
        raise ValidationError(
            "senderDetails, collectionDetails, deliveryDetails and parcelDetails must be provided together"
        )
    return _from_legacy(payload, now)


def _dump(block) -> dict:
    return block.model_dump(mode="json", by_alias=True, exclude_none=True)


def _from_detailed(payload: ShipmentCreate, now: datetime) -> NormalizedShipment:
    sender = payload.sender_details
    collection = payload.collection_details
    delivery = payload.delivery_details
    parcel = payload.parcel_details

    missing = []
    if not sender.full_name:
        missing.append("senderDetails.fullName")
    if not delivery.receiver_name:
        missing.append("deliveryDetails.receiverName")
    if collection.address is None:
        missing.append("collectionDetails.address")
    if delivery.address is None:
        missing.append("deliveryDetails.address")
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    payment = payload.payment
    amount = (payment.amount if payment else None) or payload.cost or 0
    weight = parcel.dimensions.weight if parcel.dimensions else None

    parcel_block = _dump(parcel)
    parcel_block.setdefault("serviceType", ServiceType.ECONOMY.value)

    return NormalizedShipment(
        sender_details=_dump(sender),
        collection_details=_dump(collection),
        delivery_details=_dump(delivery),
        parcel_details=parcel_block,
        payment_method=(payment.method if payment and payment.method else PaymentMethod.GATEWAY),
        payment_amount=float(amount),
        payment_transaction_id=payment.transaction_id if payment else None,
        sender_name=sender.full_name,
        sender_phone=sender.mobile or PLACEHOLDER_PHONE,
        receiver_name=delivery.receiver_name,
        receiver_phone=delivery.mobile or PLACEHOLDER_PHONE,
        start_location=collection.address.city or "Unknown",
        end_location=delivery.address.city or "Unknown",
        parcel_weight=weight or 1,
        package_type=parcel.parcel_type or "parcel",
        cost=float(amount),
        eta=estimate_eta(parcel.service_type, now),
        notes=payload.notes or "",
    )


def _legacy_address(city: str) -> dict:
    return {"street": "N/A", "suburb": "N/A", "city": city, "province": "N/A", "postalCode": "0000"}


def _from_legacy(payload: ShipmentCreate, now: datetime) -> NormalizedShipment:
    missing = [name for name in LEGACY_REQUIRED if not getattr(payload, name)]
    if missing:
        camel = [to_camel(name) for name in missing]
        raise ValidationError(f"Missing required fields: {', '.join(camel)}")

    weight = payload.parcel_weight or 1
    package_type = payload.package_type or "parcel"
    cost = float(payload.cost or 0)
    eta = (payload.eta or now) + timedelta(days=settings.LEGACY_ETA_DAYS)

    return NormalizedShipment(
        sender_details={
            "fullName": payload.sender_name,
            "email": LEGACY_EMAIL,
            "mobile": payload.sender_phone,
            "address": _legacy_address(payload.start),
        },
        collection_details={
            "dispatcherName": payload.sender_name,
            "email": LEGACY_EMAIL,
            "mobile": payload.sender_phone,
            "address": _legacy_address(payload.start),
            "numberOfItems": 1,
        },
        delivery_details={
            "receiverName": payload.receiver_name,
            "email": LEGACY_EMAIL,
            "mobile": payload.receiver_phone,
            "address": _legacy_address(payload.end),
        },
        parcel_details={
            "serviceType": ServiceType.ECONOMY.value,
            "parcelType": package_type,
            "dimensions": {"weight": weight},
        },
        payment_method=PaymentMethod.COD,
        payment_amount=cost,
        payment_transaction_id=None,
        sender_name=payload.sender_name,
        sender_phone=payload.sender_phone,
        receiver_name=payload.receiver_name,
        receiver_phone=payload.receiver_phone,
        start_location=payload.start,
        end_location=payload.end,
        parcel_weight=weight,
        package_type=package_type,
        cost=cost,
        eta=eta,
        notes=payload.notes or "",
    )

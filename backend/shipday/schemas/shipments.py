"""
Shipment Pydantic schemas
- ShipmentCreate accepts both the detailed and the legacy flattened payload.
"""

from datetime import datetime

from pydantic import Field

from shipday.models.shipment import ServiceType, PaymentMethod
from shipday.schemas.common import CamelModel


class Address(CamelModel):
    street: str | None = None
    suburb: str | None = None
    city: str | None = None
    complex: str | None = None
    province: str | None = None
    postal_code: str | None = None
    latitude: float | None = None
    longitude: float | None = None


class SenderDetails(CamelModel):
    full_name: str | None = None
    company: str | None = None
    email: str | None = None
    mobile: str | None = None
    telephone: str | None = None
    address: Address | None = None


class CollectionDetails(CamelModel):
    dispatcher_name: str | None = None
    company: str | None = None
    mobile: str | None = None
    office: str | None = None
    email: str | None = None
    address: Address | None = None
    number_of_items: int = Field(1, ge=1)


class DeliveryDetails(CamelModel):
    receiver_name: str | None = None
    company: str | None = None
    mobile: str | None = None
    office: str | None = None
    email: str | None = None
    address: Address | None = None


class Dimensions(CamelModel):
    length: float | None = Field(None, ge=0)
    width: float | None = Field(None, ge=0)
    height: float | None = Field(None, ge=0)
    weight: float | None = Field(None, ge=0)


class ParcelDetails(CamelModel):
    service_type: ServiceType | None = None
    parcel_type: str | None = None
    dimensions: Dimensions | None = None
    special_instructions: str | None = None


class PaymentInput(CamelModel):
    method: PaymentMethod | None = None
    amount: float | None = Field(None, ge=0)
    transaction_id: str | None = None


class ShipmentCreate(CamelModel):
    # Detailed payload
    sender_details: SenderDetails | None = None
    collection_details: CollectionDetails | None = None
    delivery_details: DeliveryDetails | None = None
    parcel_details: ParcelDetails | None = None
    payment: PaymentInput | None = None

    # Legacy flattened payload
    sender_name: str | None = None
    sender_phone: str | None = None
    receiver_name: str | None = None
    receiver_phone: str | None = None
    start: str | None = None
    end: str | None = None
    parcel_weight: float | None = Field(None, ge=0)
    package_type: str | None = None
    cost: float | None = Field(None, ge=0)
    eta: datetime | None = None
    notes: str | None = None


class ShipmentUpdate(CamelModel):
    sender_name: str | None = None
    sender_phone: str | None = None
    receiver_name: str | None = None
    receiver_phone: str | None = None
    start: str | None = None
    end: str | None = None
    parcel_weight: float | None = Field(None, ge=0)
    package_type: str | None = None
    cost: float | None = Field(None, ge=0)
    eta: datetime | None = None
    notes: str | None = None


class AssignShipmentRequest(CamelModel):
    shipment_id: str
    driver_id: str


class ShipmentStatusUpdate(CamelModel):
    shipment_id: str
    status: str


class AttachOrdersRequest(CamelModel):
    order_ids: list[str] = Field(..., min_length=1)


class DriverRef(CamelModel):
    driver_id: str
    username: str


class PaymentResponse(CamelModel):
    method: str
    status: str
    amount: float
    transaction_id: str | None = None


class ShipmentResponse(CamelModel):
    shipment_id: str
    sender_details: dict | None = None
    collection_details: dict | None = None
    delivery_details: dict | None = None
    parcel_details: dict | None = None
    payment: PaymentResponse
    sender_name: str
    sender_phone: str
    receiver_name: str
    receiver_phone: str
    start: str
    end: str
    parcel_weight: float
    package_type: str
    cost: float
    eta: datetime | None = None
    notes: str = ""
    status: str
    driver: DriverRef | None = None
    driver_name: str
    route_id: str | None = None
    tracking_number: str | None = None
    order_ids: list[str] = []
    date_shipped: datetime | None = None
    delivered_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ShipmentEnvelope(CamelModel):
    message: str | None = None
    shipment: ShipmentResponse


class ShipmentCreatedResponse(ShipmentEnvelope):
    payment_data: dict | None = None


class ShipmentListResponse(CamelModel):
    total: int
    shipments: list[ShipmentResponse]

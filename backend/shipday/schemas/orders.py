"""
Order Pydantic schemas
"""

from datetime import datetime

from pydantic import Field

from shipday.models.shipment import ServiceType
from shipday.schemas.common import CamelModel


class OrderCreate(CamelModel):
    sender_name: str
    sender_phone: str
    receiver_name: str
    receiver_phone: str
    delivery_address: str
    package_type: str = "parcel"
    weight: float = Field(..., gt=0)
    dimensions: str | None = None
    delivery_type: ServiceType = ServiceType.ECONOMY
    pickup_date: datetime | None = None
    time_slot: str | None = None
    notes: str = ""


class OrderStatusUpdate(CamelModel):
    status: str = Field(..., min_length=1)


class OrderResponse(CamelModel):
    order_id: str
    sender_name: str
    sender_phone: str
    receiver_name: str
    receiver_phone: str
    delivery_address: str
    package_type: str
    weight: float
    dimensions: str | None = None
    delivery_type: str
    pickup_date: datetime | None = None
    time_slot: str | None = None
    notes: str | None = ""
    cost: float
    total_amount: float
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class OrderWithTracking(OrderResponse):
    tracking_number: str | None = None
    shipment_id: str | None = None
    shipment_status: str = "Unassigned"
    driver: str = "Unassigned"


class OrderListResponse(CamelModel):
    total: int
    orders: list[OrderResponse]


class OrderTrackingListResponse(CamelModel):
    orders: list[OrderWithTracking]


class CustomerSummary(CamelModel):
    name: str
    phone: str
    email: str
    address: str


class OrdersByPhoneResponse(CamelModel):
    user: CustomerSummary
    orders: list[OrderResponse]


class OrderEnvelope(CamelModel):
    message: str | None = None
    order: OrderResponse

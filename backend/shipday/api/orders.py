"""
Order API — customer orders, tracking view
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shipday.database import get_db
from shipday.schemas.common import MessageResponse
from shipday.schemas.orders import (
    OrderCreate, OrderStatusUpdate, OrderResponse, OrderEnvelope, OrderListResponse,
    OrderWithTracking, OrderTrackingListResponse, CustomerSummary, OrdersByPhoneResponse,
)
from shipday.services import orders as order_service

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.post("", response_model=OrderEnvelope, status_code=201)
def create_order(payload: OrderCreate, db: Session = Depends(get_db)):
    """Create an order; cost and total are computed from weight and delivery type"""
    order = order_service.create_order(db, payload)
    return OrderEnvelope(message="Order created successfully", order=OrderResponse.model_validate(order))


@router.get("", response_model=OrderListResponse)
def list_orders(db: Session = Depends(get_db)):
    orders = order_service.list_orders(db)
    return OrderListResponse(total=len(orders), orders=[OrderResponse.model_validate(o) for o in orders])


@router.get("/with-tracking", response_model=OrderTrackingListResponse)
def list_orders_with_tracking(db: Session = Depends(get_db)):
    rows = order_service.list_orders_with_tracking(db)
    return OrderTrackingListResponse(orders=[
        OrderWithTracking(
            **OrderResponse.model_validate(row["order"]).model_dump(),
            tracking_number=row["tracking_number"],
            shipment_id=row["shipment_id"],
            shipment_status=row["shipment_status"],
            driver=row["driver"],
        )
        for row in rows
    ])


@router.get("/by-phone/{phone}", response_model=OrdersByPhoneResponse)
def orders_by_phone(phone: str, db: Session = Depends(get_db)):
    user, orders = order_service.orders_by_phone(db, phone)
    return OrdersByPhoneResponse(
        user=CustomerSummary(name=user.name, phone=user.phone, email=user.email, address=user.location or "N/A"),
        orders=[OrderResponse.model_validate(o) for o in orders],
    )


@router.get("/{order_id}", response_model=OrderEnvelope)
def get_order(order_id: str, db: Session = Depends(get_db)):
    return OrderEnvelope(order=OrderResponse.model_validate(order_service.get_order(db, order_id)))


@router.put("/{order_id}/status", response_model=OrderEnvelope)
def update_order_status(order_id: str, body: OrderStatusUpdate, db: Session = Depends(get_db)):
    order = order_service.update_order_status(db, order_id, body.status)
    return OrderEnvelope(message="Order status updated", order=OrderResponse.model_validate(order))


@router.delete("/{order_id}", response_model=MessageResponse)
def delete_order(order_id: str, db: Session = Depends(get_db)):
    order_service.delete_order(db, order_id)
    return MessageResponse(message="Order deleted successfully")

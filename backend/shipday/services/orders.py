"""
Customer orders — tariff, creation, tracking view
"""

import logging

from sqlalchemy import desc
from sqlalchemy.orm import Session

from shipday.config import settings
from shipday.errors import NotFound
from shipday.models import Order, User
from shipday.models.notification import RecipientType
from shipday.models.shipment import ServiceType
from shipday.schemas.orders import OrderCreate
from shipday.services.id_generator import insert_with_fresh_id
from shipday.services.notifier import notify

logger = logging.getLogger(__name__)

INSURANCE_FEE = 20
GST_RATE = 0.18

# (max weight kg, price); the last band has no upper bound
TARIFF = {
    ServiceType.EXPRESS: [(1, 100), (5, 250), (None, 400)],
    ServiceType.ECONOMY: [(1, 50), (5, 150), (None, 250)],
}


def calculate_cost(weight: float, delivery_type: ServiceType | str) -> int:
    """Base price by weight band; anything but express is priced as economy."""
    tier = ServiceType.EXPRESS if delivery_type in (ServiceType.EXPRESS, ServiceType.EXPRESS.value) else ServiceType.ECONOMY
    w = float(weight)
    for limit, price in TARIFF[tier]:
        if limit is None or w <= limit:
            return price
    return TARIFF[tier][-1][1]


def calculate_total(cost: float) -> int:
    """cost + insurance + GST, rounded to whole units."""
    return round(cost + INSURANCE_FEE + GST_RATE * cost)


def create_order(db: Session, payload: OrderCreate) -> Order:
    cost = calculate_cost(payload.weight, payload.delivery_type)
    total = calculate_total(cost)

    order = insert_with_fresh_id(
        db,
        lambda new_id: Order(
            order_id=new_id,
            sender_name=payload.sender_name,
            sender_phone=payload.sender_phone,
            receiver_name=payload.receiver_name,
            receiver_phone=payload.receiver_phone,
            delivery_address=payload.delivery_address,
            package_type=payload.package_type,
            weight=payload.weight,
            dimensions=payload.dimensions,
            delivery_type=payload.delivery_type.value,
            pickup_date=payload.pickup_date,
            time_slot=payload.time_slot,
            notes=payload.notes,
            cost=cost,
            total_amount=total,
        ),
        Order,
        Order.order_id,
        settings.ORDER_ID_PREFIX,
        attempts=settings.ID_RETRY_ATTEMPTS,
    )
    logger.info(f"Order created: {order.order_id} ({order.delivery_type}, {order.weight}kg, total {total})")

    # Recipient is whoever registered with the sender's phone, if anyone
    user = db.query(User).filter(User.phone == payload.sender_phone).first()
    notify(
        db,
        RecipientType.USER if user else None,
        user.id if user else None,
        "New Order Created",
        f"Order {order.order_id} has been placed successfully.",
        "order",
    )
    return order


def get_order(db: Session, order_id: str) -> Order:
    order = db.query(Order).filter(Order.order_id == order_id).first()
    if not order:
        raise NotFound("Order not found")
    return order


def list_orders(db: Session) -> list[Order]:
    return db.query(Order).order_by(desc(Order.created_at), desc(Order.id)).all()


def list_orders_with_tracking(db: Session) -> list[dict]:
    """Orders plus the tracking state of the shipment they are linked to."""
    result = []
    for order in list_orders(db):
        shipment = order.shipment
        result.append({
            "order": order,
            "tracking_number": shipment.tracking_number if shipment else None,
            "shipment_id": shipment.shipment_id if shipment else None,
            "shipment_status": shipment.status.value if shipment else "Unassigned",
            "driver": (shipment.driver_name or "Unassigned") if shipment else "Unassigned",
        })
    return result


def orders_by_phone(db: Session, phone: str) -> tuple[User, list[Order]]:
    user = db.query(User).filter(User.phone == phone).first()
    if not user:
        raise NotFound("User not found")
    orders = (
        db.query(Order)
        .filter(Order.sender_phone == phone)
        .order_by(desc(Order.created_at), desc(Order.id))
        .all()
    )
    return user, orders


def update_order_status(db: Session, order_id: str, status: str) -> Order:
    order = get_order(db, order_id)
    order.status = status.strip()
    db.commit()
    db.refresh(order)
    logger.info(f"Order {order_id} status → {order.status}")
    return order


def delete_order(db: Session, order_id: str) -> None:
    order = get_order(db, order_id)
    db.delete(order)
    db.commit()
    logger.info(f"Order deleted: {order_id}")

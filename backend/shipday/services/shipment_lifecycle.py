"""
Shipment lifecycle — Pending → Shipping → Delivered
- Every transition is a conditional UPDATE on the expected prior status,
  so two concurrent callers cannot both advance the same shipment.
- Assignment side effects (notification, push, realtime event) run as
  post-commit hooks; none of them can undo the assignment.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import desc
from sqlalchemy.orm import Session

from shipday.config import settings
from shipday.errors import NotFound, ValidationError
from shipday.models import Shipment, Driver, Order
from shipday.models.driver import DriverStatus
from shipday.models.notification import RecipientType
from shipday.models.shipment import ShipmentStatus, PaymentMethod
from shipday.schemas.shipments import (
    ShipmentCreate, ShipmentUpdate, ShipmentResponse, PaymentResponse, DriverRef,
)
from shipday.services.hooks import PostCommitHooks
from shipday.services.id_generator import insert_with_fresh_id
from shipday.services.notifier import notify, serialize_notification, push_if_available, emit_realtime
from shipday.services.payments import create_redirect_payment
from shipday.services.shipment_payload import normalize_shipment_payload

logger = logging.getLogger(__name__)

ASSIGNED_EVENT = "shipment-assigned"


def shipment_to_response(shipment: Shipment) -> ShipmentResponse:
    """Shipment ORM → ShipmentResponse, with the driver reference resolved for display."""
    driver = shipment.driver
    return ShipmentResponse(
        shipment_id=shipment.shipment_id,
        sender_details=shipment.sender_details,
        collection_details=shipment.collection_details,
        delivery_details=shipment.delivery_details,
        parcel_details=shipment.parcel_details,
        payment=PaymentResponse(
            method=shipment.payment_method.value,
            status=shipment.payment_status.value,
            amount=shipment.payment_amount or 0.0,
            transaction_id=shipment.payment_transaction_id,
        ),
        sender_name=shipment.sender_name,
        sender_phone=shipment.sender_phone,
        receiver_name=shipment.receiver_name,
        receiver_phone=shipment.receiver_phone,
        start=shipment.start_location,
        end=shipment.end_location,
        parcel_weight=shipment.parcel_weight,
        package_type=shipment.package_type,
        cost=shipment.cost,
        eta=shipment.eta,
        notes=shipment.notes or "",
        status=shipment.status.value,
        driver=DriverRef(driver_id=driver.driver_id, username=driver.username) if driver else None,
        driver_name=driver.username if driver else (shipment.driver_name or "Unassigned"),
        route_id=shipment.route_id,
        tracking_number=shipment.tracking_number,
        order_ids=[o.order_id for o in shipment.orders],
        date_shipped=shipment.date_shipped,
        delivered_at=shipment.delivered_at,
        created_at=shipment.created_at,
        updated_at=shipment.updated_at,
    )


# ── Create ──

def create_shipment(db: Session, payload: ShipmentCreate, now: datetime | None = None) -> tuple[Shipment, dict | None]:
    """
    Normalise, persist with a fresh shipment id and status Pending.
    Returns the shipment and PayFast redirect data for online payment methods.
    """
    normalized = normalize_shipment_payload(payload, now=now)

    shipment = insert_with_fresh_id(
        db,
        lambda new_id: Shipment(shipment_id=new_id, status=ShipmentStatus.PENDING, **normalized.as_columns()),
        Shipment,
        Shipment.shipment_id,
        settings.SHIPMENT_ID_PREFIX,
        attempts=settings.ID_RETRY_ATTEMPTS,
    )
    logger.info(f"Shipment created: {shipment.shipment_id} ({shipment.start_location} → {shipment.end_location})")

    payment_data = None
    if shipment.payment_method != PaymentMethod.COD:
        try:
            payment_data = create_redirect_payment(shipment)
        except Exception as e:
            logger.error(f"PayFast data generation failed for {shipment.shipment_id}: {e}")

    return shipment, payment_data


# ── Reads ──

def get_shipment(db: Session, shipment_id: str) -> Shipment:
    shipment = db.query(Shipment).filter(Shipment.shipment_id == shipment_id).first()
    if not shipment:
        raise NotFound("Shipment not found")
    return shipment


def list_shipments(
    db: Session,
    status: ShipmentStatus | None = None,
    limit: int = 100,
    offset: int = 0,
) -> tuple[int, list[Shipment]]:
    query = db.query(Shipment)
    if status is not None:
        query = query.filter(Shipment.status == status)
    total = query.count()
    shipments = query.order_by(desc(Shipment.created_at), desc(Shipment.id)).offset(offset).limit(limit).all()
    return total, shipments


def list_assigned(db: Session) -> list[Shipment]:
    return (
        db.query(Shipment)
        .filter(Shipment.driver_id.isnot(None))
        .order_by(desc(Shipment.created_at), desc(Shipment.id))
        .all()
    )


def list_for_driver(db: Session, driver: Driver) -> list[Shipment]:
    return (
        db.query(Shipment)
        .filter(Shipment.driver_id == driver.id)
        .order_by(desc(Shipment.created_at), desc(Shipment.id))
        .all()
    )


# ── Free-form update / delete ──

# Legacy column -> (details block, key path) kept in step with it
_DETAIL_MIRRORS = {
    "sender_name": ("sender_details", ("fullName",)),
    "sender_phone": ("sender_details", ("mobile",)),
    "receiver_name": ("delivery_details", ("receiverName",)),
    "receiver_phone": ("delivery_details", ("mobile",)),
    "start_location": ("collection_details", ("address", "city")),
    "end_location": ("delivery_details", ("address", "city")),
    "package_type": ("parcel_details", ("parcelType",)),
    "parcel_weight": ("parcel_details", ("dimensions", "weight")),
}


def _mirror(shipment: Shipment, column: str, value):
    block_name, path = _DETAIL_MIRRORS[column]
    # Copy so SQLAlchemy sees a new JSON value
    block = dict(getattr(shipment, block_name) or {})
    target = block
    for key in path[:-1]:
        target[key] = dict(target.get(key) or {})
        target = target[key]
    target[path[-1]] = value
    setattr(shipment, block_name, block)


def update_shipment(db: Session, shipment_id: str, patch: ShipmentUpdate) -> Shipment:
    """Patch descriptive fields in any status; status itself only moves through assign/complete."""
    shipment = get_shipment(db, shipment_id)

    changes = patch.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise ValidationError("No fields to update")

    renamed = {"start": "start_location", "end": "end_location"}
    for field_name, value in changes.items():
        column = renamed.get(field_name, field_name)
        setattr(shipment, column, value)
        if column in _DETAIL_MIRRORS:
            _mirror(shipment, column, value)
        if column == "cost":
            shipment.payment_amount = value

    db.commit()
    db.refresh(shipment)
    logger.info(f"Shipment updated: {shipment_id} ({', '.join(changes)})")
    return shipment


def delete_shipment(db: Session, shipment_id: str) -> None:
    shipment = get_shipment(db, shipment_id)
    for order in shipment.orders:
        order.shipment_id = None
    db.delete(shipment)
    db.commit()
    logger.info(f"Shipment deleted: {shipment_id}")


def attach_orders(db: Session, shipment_id: str, order_ids: list[str]) -> Shipment:
    """Link orders to a shipment for tracking. Unknown order ids are a NotFound."""
    shipment = get_shipment(db, shipment_id)
    orders = db.query(Order).filter(Order.order_id.in_(order_ids)).all()
    found = {o.order_id for o in orders}
    missing = [oid for oid in order_ids if oid not in found]
    if missing:
        raise NotFound(f"Orders not found: {', '.join(missing)}")

    for order in orders:
        order.shipment_id = shipment.id
    db.commit()
    db.refresh(shipment)
    logger.info(f"Orders linked to {shipment_id}: {', '.join(sorted(found))}")
    return shipment


# ── Transitions ──

def assign_shipment(db: Session, shipment_id: str, driver_id: str) -> tuple[Shipment, Driver]:
    """
    Pending → Shipping with the driver set.
    Raises NotFound when the shipment is not Pending or the driver is not approved;
    in both cases nothing is written.
    """
    shipment = (
        db.query(Shipment)
        .filter(Shipment.shipment_id == shipment_id, Shipment.status == ShipmentStatus.PENDING)
        .first()
    )
    if not shipment:
        raise NotFound("Pending shipment not found")

    driver = (
        db.query(Driver)
        .filter(Driver.driver_id == driver_id, Driver.status == DriverStatus.APPROVED)
        .first()
    )
    if not driver:
        raise NotFound("Approved driver not found")

    updated = (
        db.query(Shipment)
        .filter(Shipment.shipment_id == shipment_id, Shipment.status == ShipmentStatus.PENDING)
        .update(
            {
                Shipment.driver_id: driver.id,
                Shipment.driver_name: driver.username,
                Shipment.status: ShipmentStatus.SHIPPING,
                Shipment.updated_at: datetime.now(timezone.utc),
            },
            synchronize_session=False,
        )
    )
    db.commit()
    if not updated:
        # Another request advanced it between the read and the write
        raise NotFound("Pending shipment not found")

    db.refresh(shipment)
    logger.info(f"Shipment assigned: {shipment_id} → {driver.driver_id} ({driver.username})")
    return shipment, driver


def assignment_message(shipment: Shipment) -> str:
    eta = shipment.eta.isoformat() if shipment.eta else ""
    return (
        f"Shipment ID: {shipment.shipment_id}\n"
        f"From: {shipment.start_location}\n"
        f"To: {shipment.end_location}\n"
        f"Package: {shipment.package_type}\n"
        f"Weight: {shipment.parcel_weight}kg\n"
        f"ETA: {eta}\n"
        f"Notes: {shipment.notes or 'None'}"
    )


def assignment_hooks(db: Session, shipment: Shipment, driver: Driver, push_client, realtime) -> PostCommitHooks:
    """notification → push → realtime event, each in its own failure boundary."""

    def write_notification(ctx: dict):
        ctx["notification"] = notify(
            db,
            RecipientType.DRIVER,
            driver.id,
            "New Shipment Assigned",
            assignment_message(shipment),
            "shipment_assigned",
            propagate=True,
        )

    async def send_push(ctx: dict):
        ctx["pushed"] = await push_if_available(
            push_client,
            driver.fcm_token,
            "New Shipment Assigned",
            f"You have been assigned shipment {shipment.shipment_id} "
            f"from {shipment.start_location} to {shipment.end_location}",
            {
                "shipmentId": shipment.shipment_id,
                "type": "shipment_assigned",
                "start": shipment.start_location,
                "end": shipment.end_location,
            },
        )

    async def broadcast(ctx: dict):
        await emit_realtime(realtime, ASSIGNED_EVENT, {
            "driverId": driver.driver_id,
            "shipmentId": shipment.shipment_id,
            "notification": serialize_notification(ctx.get("notification")),
        })

    return (
        PostCommitHooks(f"assign {shipment.shipment_id}")
        .add("notification", write_notification)
        .add("push", send_push)
        .add("realtime", broadcast)
    )


async def assign_and_notify(db: Session, shipment_id: str, driver_id: str, push_client, realtime) -> tuple[Shipment, dict]:
    shipment, driver = assign_shipment(db, shipment_id, driver_id)
    ctx = await assignment_hooks(db, shipment, driver, push_client, realtime).run()
    if ctx["failed"]:
        logger.warning(f"Assignment {shipment_id} committed; side effects failed: {', '.join(ctx['failed'])}")
    db.refresh(shipment)
    return shipment, ctx


def complete_shipment(db: Session, shipment_id: str, status: str) -> Shipment:
    """Shipping → Delivered. Only a 'Delivered' status update is accepted."""
    if status != ShipmentStatus.DELIVERED.value:
        raise ValidationError("Only 'Delivered' status update is allowed")

    now = datetime.now(timezone.utc)
    updated = (
        db.query(Shipment)
        .filter(Shipment.shipment_id == shipment_id, Shipment.status == ShipmentStatus.SHIPPING)
        .update(
            {
                Shipment.status: ShipmentStatus.DELIVERED,
                Shipment.delivered_at: now,
                Shipment.updated_at: now,
            },
            synchronize_session=False,
        )
    )
    db.commit()
    if not updated:
        raise NotFound("Shipping shipment not found")

    logger.info(f"Shipment delivered: {shipment_id}")
    return get_shipment(db, shipment_id)

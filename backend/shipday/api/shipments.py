"""
Shipment API — create, read, patch, delete, documents, linked orders
"""

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from shipday.database import get_db
from shipday.models.shipment import ShipmentStatus
from shipday.schemas.common import MessageResponse
from shipday.schemas.shipments import (
    ShipmentCreate, ShipmentUpdate, AttachOrdersRequest,
    ShipmentEnvelope, ShipmentCreatedResponse, ShipmentListResponse, ShipmentResponse,
)
from shipday.services import shipment_lifecycle as lifecycle
from shipday.services.documents import render_waybill, render_proof_of_delivery

router = APIRouter(prefix="/api/shipments", tags=["shipments"])


def _pdf(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("", response_model=ShipmentCreatedResponse, status_code=201)
def create_shipment(payload: ShipmentCreate, db: Session = Depends(get_db)):
    """Create a shipment from the detailed or the legacy payload"""
    shipment, payment_data = lifecycle.create_shipment(db, payload)
    return ShipmentCreatedResponse(
        message="Shipment created successfully",
        shipment=lifecycle.shipment_to_response(shipment),
        payment_data=payment_data,
    )


@router.get("", response_model=ShipmentListResponse)
def list_shipments(
    status: ShipmentStatus | None = Query(None, description="Pending | Shipping | Delivered"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    total, shipments = lifecycle.list_shipments(db, status=status, limit=limit, offset=offset)
    return ShipmentListResponse(
        total=total,
        shipments=[lifecycle.shipment_to_response(s) for s in shipments],
    )


@router.get("/{shipment_id}", response_model=ShipmentResponse)
def get_shipment(shipment_id: str, db: Session = Depends(get_db)):
    return lifecycle.shipment_to_response(lifecycle.get_shipment(db, shipment_id))


@router.put("/{shipment_id}", response_model=ShipmentEnvelope)
@router.patch("/{shipment_id}", response_model=ShipmentEnvelope)
def update_shipment(shipment_id: str, patch: ShipmentUpdate, db: Session = Depends(get_db)):
    """Patch descriptive fields; status is not touched"""
    shipment = lifecycle.update_shipment(db, shipment_id, patch)
    return ShipmentEnvelope(
        message="Shipment updated successfully",
        shipment=lifecycle.shipment_to_response(shipment),
    )


@router.delete("/{shipment_id}", response_model=MessageResponse)
def delete_shipment(shipment_id: str, db: Session = Depends(get_db)):
    lifecycle.delete_shipment(db, shipment_id)
    return MessageResponse(message="Shipment deleted successfully")


@router.post("/{shipment_id}/orders", response_model=ShipmentEnvelope)
def attach_orders(shipment_id: str, body: AttachOrdersRequest, db: Session = Depends(get_db)):
    """Link existing orders to a shipment for tracking"""
    shipment = lifecycle.attach_orders(db, shipment_id, body.order_ids)
    return ShipmentEnvelope(
        message="Orders linked successfully",
        shipment=lifecycle.shipment_to_response(shipment),
    )


@router.get("/{shipment_id}/waybill")
def download_waybill(shipment_id: str, db: Session = Depends(get_db)):
    shipment = lifecycle.get_shipment(db, shipment_id)
    return _pdf(render_waybill(shipment), f"waybill-{shipment.shipment_id}.pdf")


@router.get("/{shipment_id}/pod")
def download_proof_of_delivery(shipment_id: str, db: Session = Depends(get_db)):
    shipment = lifecycle.get_shipment(db, shipment_id)
    return _pdf(render_proof_of_delivery(shipment), f"pod-{shipment.shipment_id}.pdf")

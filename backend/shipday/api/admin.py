"""
Admin API — driver approval, shipment management, assignment
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shipday.api.deps import get_push_client, get_realtime
from shipday.database import get_db
from shipday.models.driver import DriverStatus, VehicleType
from shipday.schemas.common import MessageResponse
from shipday.schemas.drivers import DriverListResponse, DriverResponse, DriverStatusUpdate, DriverEnvelope
from shipday.schemas.shipments import (
    ShipmentCreate, ShipmentUpdate, AssignShipmentRequest,
    ShipmentEnvelope, ShipmentCreatedResponse, ShipmentListResponse, ShipmentResponse,
)
from shipday.services import drivers as driver_service
from shipday.services import shipment_lifecycle as lifecycle

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


def _driver_list(drivers) -> DriverListResponse:
    return DriverListResponse(drivers=[DriverResponse.model_validate(d) for d in drivers])


# ── Drivers ──

@router.get("/drivers/all", response_model=DriverListResponse)
def all_drivers(db: Session = Depends(get_db)):
    return _driver_list(driver_service.list_drivers(db))


@router.get("/drivers/pending", response_model=DriverListResponse)
def pending_drivers(db: Session = Depends(get_db)):
    return _driver_list(driver_service.list_drivers(db, status=DriverStatus.PENDING))


@router.get("/drivers/approved", response_model=DriverListResponse)
def approved_drivers(db: Session = Depends(get_db)):
    return _driver_list(driver_service.list_drivers(db, status=DriverStatus.APPROVED))


@router.get("/drivers/{vehicle_type}", response_model=DriverListResponse)
def drivers_by_vehicle_type(vehicle_type: VehicleType, db: Session = Depends(get_db)):
    """Approved drivers with the given vehicle type"""
    return _driver_list(driver_service.list_drivers(db, status=DriverStatus.APPROVED, vehicle_type=vehicle_type))


@router.patch("/drivers/status", response_model=DriverEnvelope)
def update_driver_status(body: DriverStatusUpdate, db: Session = Depends(get_db)):
    """Approve or reject a driver account"""
    driver = driver_service.set_driver_status(db, body.driver_id, DriverStatus(body.status))
    return DriverEnvelope(
        message=f"Driver {body.status} successfully",
        driver=DriverResponse.model_validate(driver),
    )


# ── Shipments ──

@router.get("/shipments", response_model=ShipmentListResponse)
def all_shipments(db: Session = Depends(get_db)):
    total, shipments = lifecycle.list_shipments(db, limit=500)
    return ShipmentListResponse(total=total, shipments=[lifecycle.shipment_to_response(s) for s in shipments])


@router.post("/shipments", response_model=ShipmentCreatedResponse, status_code=201)
def create_shipment(payload: ShipmentCreate, db: Session = Depends(get_db)):
    shipment, payment_data = lifecycle.create_shipment(db, payload)
    return ShipmentCreatedResponse(
        message="Shipment created successfully",
        shipment=lifecycle.shipment_to_response(shipment),
        payment_data=payment_data,
    )


@router.get("/shipments/assigned", response_model=ShipmentListResponse)
def assigned_shipments(db: Session = Depends(get_db)):
    shipments = lifecycle.list_assigned(db)
    return ShipmentListResponse(total=len(shipments), shipments=[lifecycle.shipment_to_response(s) for s in shipments])


@router.post("/shipments/assign", response_model=ShipmentEnvelope)
async def assign_shipment(
    body: AssignShipmentRequest,
    db: Session = Depends(get_db),
    push_client=Depends(get_push_client),
    realtime=Depends(get_realtime),
):
    """
    Assign a Pending shipment to an approved driver.
    The driver is notified in-app, by push when a device token is registered,
    and connected clients receive a shipment-assigned event.
    """
    shipment, _ = await lifecycle.assign_and_notify(db, body.shipment_id, body.driver_id, push_client, realtime)
    return ShipmentEnvelope(
        message="Shipment assigned successfully",
        shipment=lifecycle.shipment_to_response(shipment),
    )


@router.get("/shipments/{shipment_id}", response_model=ShipmentResponse)
def get_shipment(shipment_id: str, db: Session = Depends(get_db)):
    return lifecycle.shipment_to_response(lifecycle.get_shipment(db, shipment_id))


@router.patch("/shipments/{shipment_id}", response_model=ShipmentEnvelope)
def update_shipment(shipment_id: str, patch: ShipmentUpdate, db: Session = Depends(get_db)):
    shipment = lifecycle.update_shipment(db, shipment_id, patch)
    return ShipmentEnvelope(message="Shipment updated successfully", shipment=lifecycle.shipment_to_response(shipment))


@router.delete("/shipments/{shipment_id}", response_model=MessageResponse)
def delete_shipment(shipment_id: str, db: Session = Depends(get_db)):
    lifecycle.delete_shipment(db, shipment_id)
    return MessageResponse(message="Shipment deleted successfully")

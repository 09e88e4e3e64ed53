"""
Driver API — mobile app endpoints
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shipday.api.deps import get_mailer, get_push_client
from shipday.database import get_db
from shipday.models import Driver
from shipday.schemas.auth import PasswordReset
from shipday.schemas.common import MessageResponse
from shipday.schemas.drivers import (
    DriverRegister, DriverLogin, DriverResponse, DriverEnvelope, DriverLoginResponse,
    DriverStatistics, FcmTokenUpdate, DriverVerification, DriverForgotPassword,
)
from shipday.schemas.notifications import NotificationListResponse, NotificationResponse
from shipday.schemas.shipments import ShipmentStatusUpdate, ShipmentEnvelope, ShipmentListResponse
from shipday.services import drivers as driver_service
from shipday.services import shipment_lifecycle as lifecycle
from shipday.services.auth import get_current_driver

router = APIRouter(prefix="/api/driver", tags=["driver"])


@router.post("/register", response_model=MessageResponse)
async def register(payload: DriverRegister, db: Session = Depends(get_db), mailer=Depends(get_mailer)):
    """Collect details and email a verification code"""
    await driver_service.register_driver(db, payload, mailer)
    return MessageResponse(message="Verification code sent to email. Please verify to complete registration.")


@router.post("/request-verification", response_model=DriverEnvelope, status_code=201)
def confirm_registration(body: DriverVerification, db: Session = Depends(get_db)):
    """Confirm the emailed code and create the account"""
    driver = driver_service.confirm_registration(db, body.email, body.code)
    return DriverEnvelope(
        message="Driver registered successfully. Account is pending approval.",
        driver=DriverResponse.model_validate(driver),
    )


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(body: DriverForgotPassword, db: Session = Depends(get_db), mailer=Depends(get_mailer)):
    await driver_service.request_password_reset(db, mailer, body.email)
    return MessageResponse(message="Password reset code sent to your email")


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(body: PasswordReset, db: Session = Depends(get_db)):
    driver_service.reset_password(db, body)
    return MessageResponse(message="Password reset successful. Please log in again.")


@router.post("/login", response_model=DriverLoginResponse)
def login(payload: DriverLogin, db: Session = Depends(get_db)):
    driver, token, statistics = driver_service.login_driver(db, payload.email_or_phone, payload.password)
    return DriverLoginResponse(
        message="Login successful",
        token=token,
        driver=DriverResponse.model_validate(driver),
        statistics=DriverStatistics(**statistics),
    )


@router.get("/me", response_model=DriverResponse)
def me(driver: Driver = Depends(get_current_driver)):
    return DriverResponse.model_validate(driver)


@router.get("/notifications/{driver_id}", response_model=NotificationListResponse)
def notifications(driver_id: str, db: Session = Depends(get_db)):
    rows = driver_service.driver_notifications(db, driver_id)
    return NotificationListResponse(notifications=[NotificationResponse.model_validate(n) for n in rows])


@router.get("/shipments/{driver_id}", response_model=ShipmentListResponse)
def shipments(driver_id: str, db: Session = Depends(get_db)):
    driver = driver_service.get_driver(db, driver_id)
    rows = lifecycle.list_for_driver(db, driver)
    return ShipmentListResponse(total=len(rows), shipments=[lifecycle.shipment_to_response(s) for s in rows])


@router.put("/update-shipment-status", response_model=ShipmentEnvelope)
def update_shipment_status(body: ShipmentStatusUpdate, db: Session = Depends(get_db)):
    """Mark a Shipping shipment as Delivered"""
    shipment = lifecycle.complete_shipment(db, body.shipment_id, body.status)
    return ShipmentEnvelope(
        message="Shipment status updated successfully",
        shipment=lifecycle.shipment_to_response(shipment),
    )


@router.put("/fcm-token/{driver_id}", response_model=MessageResponse)
def update_fcm_token(driver_id: str, body: FcmTokenUpdate, db: Session = Depends(get_db)):
    driver_service.set_fcm_token(db, driver_id, body.fcm_token)
    return MessageResponse(message="FCM token updated successfully")


@router.post("/test-notification/{driver_id}", response_model=MessageResponse)
async def test_notification(driver_id: str, db: Session = Depends(get_db), push_client=Depends(get_push_client)):
    await driver_service.send_test_push(db, driver_id, push_client)
    return MessageResponse(message="Test push notification sent successfully")


@router.get("/check/{driver_id}", response_model=DriverEnvelope)
def check_driver(driver_id: str, db: Session = Depends(get_db)):
    driver = driver_service.get_driver(db, driver_id)
    return DriverEnvelope(message="Driver found", driver=DriverResponse.model_validate(driver))

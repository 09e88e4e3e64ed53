"""
Driver accounts — emailed-code registration, login, password reset, admin approval, device tokens
"""

import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy import desc, or_
from sqlalchemy.orm import Session

from shipday.config import settings
from shipday.errors import Forbidden, NotFound, Unauthorized, ValidationError
from shipday.models import AuthToken, Driver, PendingDriver, Shipment, Notification
from shipday.models.driver import DriverStatus, VehicleType
from shipday.models.notification import RecipientType
from shipday.models.shipment import ShipmentStatus
from shipday.schemas.auth import PasswordReset
from shipday.schemas.drivers import DriverRegister
from shipday.services.auth import (
    hash_password, verify_password, check_password_strength, issue_token, SUBJECT_DRIVER,
)
from shipday.services.id_generator import insert_with_fresh_id
from shipday.services.notifier import notify
from shipday.services.verification import check_code, is_expired, normalize_email, send_code

logger = logging.getLogger(__name__)

STATUS_MESSAGES = {
    DriverStatus.APPROVED: ("Account Approved", "Your driver account has been approved. You can now log in."),
    DriverStatus.REJECTED: ("Account Rejected", "Your driver account registration has been rejected."),
}


def get_driver(db: Session, driver_id: str) -> Driver:
    driver = db.query(Driver).filter(Driver.driver_id == driver_id).first()
    if not driver:
        raise NotFound("Driver not found")
    return driver


def list_drivers(
    db: Session,
    status: DriverStatus | None = None,
    vehicle_type: VehicleType | None = None,
) -> list[Driver]:
    query = db.query(Driver)
    if status is not None:
        query = query.filter(Driver.status == status)
    if vehicle_type is not None:
        query = query.filter(Driver.vehicle_type == vehicle_type)
    return query.order_by(desc(Driver.created_at), desc(Driver.id)).all()


async def register_driver(db: Session, payload: DriverRegister, mailer) -> PendingDriver:
    """
    Stage a sign-up and email a verification code.
    The driver account (status pending) is created by confirm_registration().
    """
    email = normalize_email(payload.email)
    vehicle_number = payload.vehicle_number.strip().upper()
    if not payload.username.strip() or not email or not payload.phone.strip() or not vehicle_number:
        raise ValidationError("All fields including ID proof are required")
    if not payload.id_proof.strip():
        raise ValidationError("All fields including ID proof are required")
    check_password_strength(payload.password)
    _ensure_unregistered(db, email, vehicle_number)

    pending = db.query(PendingDriver).filter(PendingDriver.email == email).first()
    if pending is None:
        pending = PendingDriver(email=email)
        db.add(pending)
    pending.username = payload.username.strip()
    pending.phone = payload.phone.strip()
    pending.password = hash_password(payload.password)
    pending.vehicle_type = payload.vehicle_type
    pending.vehicle_number = vehicle_number
    pending.id_proof = payload.id_proof.strip()
    pending.created_at = datetime.now(timezone.utc)
    db.commit()
    logger.info(f"Driver sign-up staged: {email} ({payload.vehicle_type.value} {vehicle_number})")

    await send_code(db, mailer, SUBJECT_DRIVER, email, "Driver Verification Code", "Your driver verification code is:")
    return pending


def _ensure_unregistered(db: Session, email: str, vehicle_number: str):
    existing = (
        db.query(Driver)
        .filter(or_(Driver.email == email, Driver.vehicle_number == vehicle_number))
        .first()
    )
    if existing:
        raise ValidationError("Driver already exists with this email or vehicle number")


def confirm_registration(db: Session, email: str, code: str) -> Driver:
    """Verify the emailed code and turn the staged sign-up into a pending driver account."""
    email = normalize_email(email)
    if not email or not code:
        raise ValidationError("Email and verification code are required")
    check_code(db, SUBJECT_DRIVER, email, code, consume=True)

    pending = db.query(PendingDriver).filter(PendingDriver.email == email).first()
    if pending and is_expired(pending.created_at + timedelta(minutes=settings.PENDING_DRIVER_TTL_MINUTES)):
        db.delete(pending)
        db.commit()
        pending = None
    if pending is None:
        raise ValidationError("Registration data not found. Please register again.")
    _ensure_unregistered(db, email, pending.vehicle_number)

    driver = insert_with_fresh_id(
        db,
        lambda new_id: Driver(
            driver_id=new_id,
            username=pending.username,
            email=email,
            phone=pending.phone,
            password=pending.password,
            vehicle_type=pending.vehicle_type,
            vehicle_number=pending.vehicle_number,
            id_proof=pending.id_proof,
            status=DriverStatus.PENDING,
        ),
        Driver,
        Driver.driver_id,
        settings.DRIVER_ID_PREFIX,
        attempts=settings.ID_RETRY_ATTEMPTS,
    )
    db.delete(pending)
    db.commit()
    logger.info(f"Driver registered: {driver.driver_id} ({driver.vehicle_type.value} {driver.vehicle_number})")

    notify(
        db,
        RecipientType.DRIVER,
        driver.id,
        "Registration Successful",
        f"Welcome {driver.username}! Your driver account has been registered and is pending approval.",
        "registration",
    )
    return driver


async def request_password_reset(db: Session, mailer, email: str) -> None:
    email = normalize_email(email)
    if not email:
        raise ValidationError("Valid email is required")
    if not db.query(Driver).filter(Driver.email == email).first():
        raise NotFound("Driver not found with this email")
    await send_code(db, mailer, SUBJECT_DRIVER, email, "Password Reset Code", "Your password reset code is:")


def reset_password(db: Session, payload: PasswordReset) -> Driver:
    """New password after a code check; the driver's issued tokens are revoked."""
    email = normalize_email(payload.email)
    if not email or not payload.code or not payload.new_password:
        raise ValidationError("Email, verification code, and new password are required")
    check_password_strength(payload.new_password)

    driver = db.query(Driver).filter(Driver.email == email).first()
    if not driver:
        raise NotFound("Driver not found")
    check_code(db, SUBJECT_DRIVER, email, payload.code, consume=True)

    driver.password = hash_password(payload.new_password)
    db.query(AuthToken).filter(
        AuthToken.subject_type == SUBJECT_DRIVER, AuthToken.subject_id == driver.id,
    ).delete(synchronize_session=False)
    db.commit()
    logger.info(f"Password reset: driver {driver.driver_id}")

    notify(
        db,
        RecipientType.DRIVER,
        driver.id,
        "Password Reset Successful",
        "Your password has been successfully reset.",
        "password_reset",
    )
    return driver


def driver_statistics(db: Session, driver: Driver) -> dict:
    assigned = (
        db.query(Shipment)
        .filter(Shipment.driver_id == driver.id, Shipment.status == ShipmentStatus.SHIPPING)
        .count()
    )
    completed = (
        db.query(Shipment)
        .filter(Shipment.driver_id == driver.id, Shipment.status == ShipmentStatus.DELIVERED)
        .count()
    )
    return {
        "assigned_deliveries": assigned,
        "completed_deliveries": completed,
        "earnings": completed * settings.DRIVER_RATE_PER_DELIVERY,
    }


def login_driver(db: Session, email_or_phone: str, password: str) -> tuple[Driver, str, dict]:
    """Unknown account or wrong password → Unauthorized; not approved → Forbidden."""
    identifier = (email_or_phone or "").strip()
    if not identifier or not password:
        raise ValidationError("Email/phone and password are required")

    driver = (
        db.query(Driver)
        .filter(or_(Driver.email == identifier.lower(), Driver.phone == identifier))
        .first()
    )
    if not driver or not verify_password(password, driver.password):
        raise Unauthorized("Invalid credentials")
    if driver.status != DriverStatus.APPROVED:
        raise Forbidden("Account not approved yet")

    token = issue_token(db, SUBJECT_DRIVER, driver.id, "driver")
    statistics = driver_statistics(db, driver)

    notify(db, RecipientType.DRIVER, driver.id, "Login Successful", "You have logged in to your account.", "login")
    logger.info(f"Driver logged in: {driver.driver_id}")
    return driver, token, statistics


def set_driver_status(db: Session, driver_id: str, status: DriverStatus) -> Driver:
    """Admin approval / rejection. The notification is best-effort."""
    if status not in STATUS_MESSAGES:
        raise ValidationError("Invalid status value")

    driver = get_driver(db, driver_id)
    driver.status = status
    db.commit()
    db.refresh(driver)
    logger.info(f"Driver {driver_id} status → {status.value}")

    title, message = STATUS_MESSAGES[status]
    notify(db, RecipientType.DRIVER, driver.id, title, message, "status_update")
    return driver


def set_fcm_token(db: Session, driver_id: str, fcm_token: str) -> Driver:
    if not fcm_token or not fcm_token.strip():
        raise ValidationError("FCM token is required")
    driver = get_driver(db, driver_id)
    driver.fcm_token = fcm_token.strip()
    db.commit()
    logger.info(f"Device token updated for driver {driver_id}")
    return driver


def driver_notifications(db: Session, driver_id: str) -> list[Notification]:
    driver = get_driver(db, driver_id)
    return (
        db.query(Notification)
        .filter(Notification.recipient_type == RecipientType.DRIVER, Notification.recipient_id == driver.id)
        .order_by(desc(Notification.created_at), desc(Notification.id))
        .all()
    )


async def send_test_push(db: Session, driver_id: str, push_client) -> None:
    """Explicitly requested push — delivery errors propagate to the caller."""
    driver = get_driver(db, driver_id)
    if not driver.fcm_token:
        raise ValidationError("Driver has no FCM token")
    await push_client.send(
        driver.fcm_token,
        "Test Notification",
        f"This is a test push notification for driver {driver.username}",
        {"type": "test"},
    )

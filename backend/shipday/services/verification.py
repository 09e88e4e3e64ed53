"""
Email verification codes
- Customers get a 5-character code, drivers a 6-digit one; both expire after
  VERIFICATION_CODE_TTL_MINUTES.
- issue_code() replaces any live code for the same (subject_type, email).
- check_code() deletes expired codes; consume=True also deletes a matching one.
"""

import logging
import secrets
import string
from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from shipday.config import settings
from shipday.errors import DeliveryError, ValidationError
from shipday.models import VerificationCode
from shipday.services.auth import SUBJECT_DRIVER

logger = logging.getLogger(__name__)

USER_CODE_ALPHABET = string.ascii_uppercase + string.digits
USER_CODE_LENGTH = 5
DRIVER_CODE_LENGTH = 6


def normalize_email(email: str | None) -> str | None:
    sanitized = (email or "").strip().lower()
    local, _, domain = sanitized.partition("@")
    if not local or "." not in domain or " " in sanitized or domain.startswith("."):
        return None
    return sanitized


def generate_code(subject_type: str) -> str:
    if subject_type == SUBJECT_DRIVER:
        return "".join(secrets.choice(string.digits) for _ in range(DRIVER_CODE_LENGTH))
    return "".join(secrets.choice(USER_CODE_ALPHABET) for _ in range(USER_CODE_LENGTH))


def is_expired(expires_at: datetime) -> bool:
    # SQLite hands back naive datetimes; they are stored as UTC
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return expires_at < datetime.now(timezone.utc)


def issue_code(db: Session, subject_type: str, email: str) -> str:
    code = generate_code(subject_type)
    expires_at = datetime.now(timezone.utc) + timedelta(minutes=settings.VERIFICATION_CODE_TTL_MINUTES)

    record = (
        db.query(VerificationCode)
        .filter(VerificationCode.subject_type == subject_type, VerificationCode.email == email)
        .first()
    )
    if record:
        record.code = code
        record.expires_at = expires_at
    else:
        db.add(VerificationCode(subject_type=subject_type, email=email, code=code, expires_at=expires_at))
    db.commit()
    logger.info(f"Verification code issued: {subject_type}:{email}")
    return code


def check_code(db: Session, subject_type: str, email: str, code: str | None, consume: bool = False) -> None:
    """Raises ValidationError unless `code` is the live code for this address."""
    record = (
        db.query(VerificationCode)
        .filter(VerificationCode.subject_type == subject_type, VerificationCode.email == email)
        .first()
    )
    if not record:
        raise ValidationError("Verification code not found")

    if is_expired(record.expires_at):
        db.delete(record)
        db.commit()
        raise ValidationError("Verification code expired")

    if not code or record.code != code.strip().upper():
        raise ValidationError("Invalid verification code")

    if consume:
        db.delete(record)
        db.commit()


async def send_code(db: Session, mailer, subject_type: str, email: str, subject: str, intro: str) -> None:
    """Issue a code and email it. Delivery failures surface as DeliveryError."""
    code = issue_code(db, subject_type, email)
    body = f"{intro} {code}. It will expire in {settings.VERIFICATION_CODE_TTL_MINUTES} minutes."
    try:
        delivered = await mailer.send(email, subject, body)
    except Exception as e:
        logger.error(f"Verification email failed ({subject_type}:{email}): {e}")
        raise DeliveryError("Failed to send verification code") from e
    if not delivered:
        raise DeliveryError("Failed to send verification code")

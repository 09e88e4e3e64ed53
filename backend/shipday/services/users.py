"""
Customer accounts — email verification, registration, login/logout, password reset, profile
"""

import logging

from sqlalchemy.orm import Session

from shipday.errors import NotFound, Unauthorized, ValidationError
from shipday.models import AuthToken, User, Order
from shipday.models.notification import RecipientType
from shipday.models.user import UserRole
from shipday.schemas.auth import UserRegister, ProfileUpdate, PasswordReset
from shipday.services.auth import (
    hash_password, verify_password, check_password_strength, issue_token, revoke_token, SUBJECT_USER,
)
from shipday.services.notifier import notify
from shipday.services.verification import check_code, normalize_email, send_code

logger = logging.getLogger(__name__)


VERIFICATION_SOURCES = ("register", "forgot")


async def request_verification_code(db: Session, mailer, email: str, source: str) -> None:
    """
    Email a code to confirm an address.
    source="register" needs a new address, source="forgot" an existing account.
    """
    email = normalize_email(email)
    if not email:
        raise ValidationError("Valid email is required")
    if source not in VERIFICATION_SOURCES:
        raise ValidationError("Invalid verification source")

    exists = db.query(User).filter(User.email == email).first() is not None
    if source == "register" and exists:
        raise ValidationError("User already exists")
    if source == "forgot" and not exists:
        raise NotFound("User not found")

    await send_code(db, mailer, SUBJECT_USER, email, "Your Verification Code", "Your verification code is:")


def verify_code(db: Session, email: str, code: str) -> None:
    """Check a code without using it up; register/reset still need it."""
    email = normalize_email(email)
    if not email or not code:
        raise ValidationError("Valid email and code are required")
    check_code(db, SUBJECT_USER, email, code)


def register_user(db: Session, payload: UserRegister) -> User:
    """Create a customer account. The email must carry a live verification code."""
    email = normalize_email(payload.email)
    if not email or not payload.name.strip() or not payload.phone.strip():
        raise ValidationError("Valid name, email, phone and password are required")
    check_password_strength(payload.password)

    if db.query(User).filter(User.email == email).first():
        raise ValidationError("User already exists")
    check_code(db, SUBJECT_USER, email, payload.code, consume=True)

    user = User(
        name=payload.name.strip(),
        email=email,
        phone=payload.phone.strip(),
        password=hash_password(payload.password),
        role=UserRole.CUSTOMER,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"User registered: {user.id} ({email})")

    notify(
        db,
        RecipientType.USER,
        user.id,
        "Welcome to ShipDay",
        f"Your account ({email}) has been successfully registered.",
        "registration",
    )
    return user


def login_user(db: Session, email: str, password: str) -> tuple[User, str]:
    user = db.query(User).filter(User.email == (email or "").strip().lower()).first()
    if not user or not verify_password(password or "", user.password):
        raise Unauthorized("Invalid credentials")

    token = issue_token(db, SUBJECT_USER, user.id, user.role.value)
    notify(db, RecipientType.USER, user.id, "Login Successful", "You have logged in to your account.", "login")
    logger.info(f"User logged in: {user.id}")
    return user, token


def logout_user(db: Session, token: str) -> None:
    if not revoke_token(db, token):
        raise Unauthorized("Invalid or expired token")


def reset_password(db: Session, payload: PasswordReset) -> User:
    """Set a new password with a code from source="forgot". Every issued token is revoked."""
    email = normalize_email(payload.email)
    if not email or not payload.code or not payload.new_password:
        raise ValidationError("Email, verification code, and new password are required")
    check_password_strength(payload.new_password)

    user = db.query(User).filter(User.email == email).first()
    if not user:
        raise NotFound("User not found")
    check_code(db, SUBJECT_USER, email, payload.code, consume=True)

    user.password = hash_password(payload.new_password)
    revoked = (
        db.query(AuthToken)
        .filter(AuthToken.subject_type == SUBJECT_USER, AuthToken.subject_id == user.id)
        .delete(synchronize_session=False)
    )
    db.commit()
    logger.info(f"Password reset: user {user.id} ({revoked} tokens revoked)")

    notify(
        db,
        RecipientType.USER,
        user.id,
        "Password Reset",
        "Your account password has been successfully reset.",
        "password_reset",
    )
    return user


def update_profile(db: Session, user: User, patch: ProfileUpdate) -> User:
    changes = patch.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise ValidationError("No fields to update")
    for field_name, value in changes.items():
        setattr(user, field_name, value.strip() if isinstance(value, str) else value)
    db.commit()
    db.refresh(user)

    notify(
        db,
        RecipientType.USER,
        user.id,
        "Profile Updated",
        f"Your account ({user.email}) has been successfully updated.",
        "profile_update",
    )
    return user


def list_customers(db: Session) -> list[dict]:
    """Customers with the number of orders they sent (matched by phone)."""
    customers = db.query(User).filter(User.role == UserRole.CUSTOMER).order_by(User.id).all()
    result = []
    for user in customers:
        total = db.query(Order).filter(Order.sender_phone == user.phone).count()
        result.append({
            "id": user.id,
            "name": user.name,
            "email": user.email,
            "phone": user.phone,
            "total_orders": total,
        })
    return result

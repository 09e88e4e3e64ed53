"""
Authentication — bcrypt password hashing, HS256 access tokens
- Issued tokens are stored in auth_tokens; a token is valid only while its
  row exists (logout deletes it) and its signature/expiry check out.
"""

import logging
import re
import uuid
from datetime import datetime, timedelta, timezone

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from shipday.config import settings
from shipday.database import get_db
from shipday.errors import Unauthorized, ValidationError
from shipday.models import AuthToken, Driver, User

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# auto_error=False: a missing header is reported as 401 by us, not 403 by FastAPI
bearer_scheme = HTTPBearer(auto_error=False)

STRONG_PASSWORD = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[\W_]).{8,}$")
STRONG_PASSWORD_MESSAGE = (
    "Password must be at least 8 characters and include uppercase, lowercase, number, and special character."
)

SUBJECT_USER = "user"
SUBJECT_DRIVER = "driver"


def hash_password(password: str) -> str:
    # bcrypt only looks at the first 72 bytes
    return pwd_context.hash(password.encode("utf-8")[:72].decode("utf-8", errors="ignore"))


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password.encode("utf-8")[:72].decode("utf-8", errors="ignore"), hashed_password)
    except ValueError as e:
        logger.warning(f"Password verification error: {e}")
        return False


def check_password_strength(password: str):
    if not STRONG_PASSWORD.match(password or ""):
        raise ValidationError(STRONG_PASSWORD_MESSAGE)


def issue_token(db: Session, subject_type: str, subject_id: int, role: str) -> str:
    """Sign a token and record it so it can be revoked."""
    expires_at = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {
        "sub": f"{subject_type}:{subject_id}",
        "role": role,
        "exp": expires_at,
        "jti": uuid.uuid4().hex,
    }
    token = jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    db.add(AuthToken(subject_type=subject_type, subject_id=subject_id, token=token, expires_at=expires_at))
    db.commit()
    return token


def revoke_token(db: Session, token: str) -> bool:
    deleted = db.query(AuthToken).filter(AuthToken.token == token).delete(synchronize_session=False)
    db.commit()
    return bool(deleted)


def _resolve(db: Session, credentials: HTTPAuthorizationCredentials | None, expected_type: str) -> tuple[int, str]:
    if credentials is None or not credentials.credentials:
        raise Unauthorized("Token missing")
    token = credentials.credentials

    try:
        claims = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise Unauthorized("Invalid or expired token")

    subject_type, _, subject_id = str(claims.get("sub", "")).partition(":")
    if subject_type != expected_type or not subject_id.isdigit():
        raise Unauthorized("Invalid or expired token")

    stored = db.query(AuthToken).filter(AuthToken.token == token).first()
    if stored is None:
        raise Unauthorized("Invalid or expired token")

    return int(subject_id), token


def get_bearer_token(credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme)) -> str:
    if credentials is None or not credentials.credentials:
        raise Unauthorized("Token missing")
    return credentials.credentials


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    user_id, _ = _resolve(db, credentials, SUBJECT_USER)
    user = db.query(User).get(user_id)
    if user is None:
        raise Unauthorized("Invalid or expired token")
    return user


def get_current_driver(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Driver:
    driver_pk, _ = _resolve(db, credentials, SUBJECT_DRIVER)
    driver = db.query(Driver).get(driver_pk)
    if driver is None:
        raise Unauthorized("Invalid or expired token")
    return driver

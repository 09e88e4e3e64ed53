"""
Customer account API — verification codes, registration, login, password reset, profile
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shipday.api.deps import get_mailer
from shipday.database import get_db
from shipday.models import User
from shipday.schemas.auth import (
    UserRegister, UserLogin, UserResponse, UserEnvelope, UserLoginResponse, ProfileUpdate,
    CustomerListResponse, CustomerResponse, VerificationRequest, VerificationCheck, PasswordReset,
)
from shipday.schemas.common import MessageResponse
from shipday.services import users as user_service
from shipday.services.auth import get_current_user, get_bearer_token

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/verification/request", response_model=MessageResponse)
async def request_verification(body: VerificationRequest, db: Session = Depends(get_db), mailer=Depends(get_mailer)):
    await user_service.request_verification_code(db, mailer, body.email, body.source)
    return MessageResponse(message="Verification code sent")


@router.post("/verification/verify", response_model=MessageResponse)
def verify(body: VerificationCheck, db: Session = Depends(get_db)):
    user_service.verify_code(db, body.email, body.code)
    return MessageResponse(message="Verification successful")


@router.post("/register", response_model=UserEnvelope, status_code=201)
def register(payload: UserRegister, db: Session = Depends(get_db)):
    user = user_service.register_user(db, payload)
    return UserEnvelope(message="User registered successfully", user=UserResponse.model_validate(user))


@router.post("/login", response_model=UserLoginResponse)
def login(payload: UserLogin, db: Session = Depends(get_db)):
    user, token = user_service.login_user(db, payload.email, payload.password)
    return UserLoginResponse(message="Login successful", token=token, user=UserResponse.model_validate(user))


@router.post("/logout", response_model=MessageResponse)
def logout(
    user: User = Depends(get_current_user),
    token: str = Depends(get_bearer_token),
    db: Session = Depends(get_db),
):
    user_service.logout_user(db, token)
    return MessageResponse(message="Logged out successfully")


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(body: PasswordReset, db: Session = Depends(get_db)):
    user_service.reset_password(db, body)
    return MessageResponse(message="Password reset successful. Please log in again.")


@router.get("/profile", response_model=UserEnvelope)
def get_profile(user: User = Depends(get_current_user)):
    return UserEnvelope(user=UserResponse.model_validate(user))


@router.patch("/profile", response_model=UserEnvelope)
def update_profile(
    patch: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user = user_service.update_profile(db, user, patch)
    return UserEnvelope(message="Profile updated", user=UserResponse.model_validate(user))


@router.get("/customers", response_model=CustomerListResponse)
def customers(db: Session = Depends(get_db)):
    return CustomerListResponse(customers=[CustomerResponse(**c) for c in user_service.list_customers(db)])

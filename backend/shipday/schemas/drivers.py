"""
Driver Pydantic schemas
"""

from datetime import datetime
from typing import Literal

from shipday.models.driver import VehicleType, DriverStatus
from shipday.schemas.common import CamelModel


class DriverRegister(CamelModel):
    username: str
    email: str
    phone: str
    password: str
    vehicle_type: VehicleType
    vehicle_number: str
    id_proof: str


class DriverVerification(CamelModel):
    email: str
    code: str


class DriverForgotPassword(CamelModel):
    email: str


class DriverLogin(CamelModel):
    email_or_phone: str
    password: str


class DriverResponse(CamelModel):
    driver_id: str
    username: str
    email: str
    phone: str
    vehicle_type: VehicleType
    vehicle_number: str
    status: DriverStatus
    created_at: datetime | None = None


class DriverListResponse(CamelModel):
    drivers: list[DriverResponse]


class DriverStatusUpdate(CamelModel):
    driver_id: str
    status: Literal["approved", "rejected"]


class FcmTokenUpdate(CamelModel):
    fcm_token: str


class DriverStatistics(CamelModel):
    assigned_deliveries: int
    completed_deliveries: int
    earnings: float


class DriverLoginResponse(CamelModel):
    message: str
    token: str
    driver: DriverResponse
    statistics: DriverStatistics


class DriverEnvelope(CamelModel):
    message: str
    driver: DriverResponse

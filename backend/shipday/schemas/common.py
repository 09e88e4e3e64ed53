"""
Shared Pydantic schemas
- CamelModel: snake_case attributes, camelCase on the wire.
"""

from datetime import datetime
from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
    }


class HealthResponse(BaseModel):
    status: str
    db_connected: bool
    redis_connected: bool
    timestamp: datetime


class MessageResponse(BaseModel):
    message: str
    detail: str | None = None

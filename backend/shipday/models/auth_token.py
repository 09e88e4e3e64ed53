"""
auth_tokens table — issued access tokens, deleted on logout
"""

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime

from shipday.database import Base


class AuthToken(Base):
    __tablename__ = "auth_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    subject_type = Column(String(20), nullable=False)  # "user" | "driver"
    subject_id = Column(Integer, nullable=False, index=True)
    token = Column(String(1024), unique=True, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

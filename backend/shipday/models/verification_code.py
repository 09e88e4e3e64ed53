"""
verification_codes table — one-time email codes
- One live code per (subject_type, email); requesting again replaces it.
- Deleted once used or found expired.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, UniqueConstraint

from shipday.database import Base


class VerificationCode(Base):
    __tablename__ = "verification_codes"
    __table_args__ = (UniqueConstraint("subject_type", "email", name="uq_verification_subject_email"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    subject_type = Column(String(20), nullable=False)  # "user" | "driver"
    email = Column(String(255), nullable=False)
    code = Column(String(12), nullable=False)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

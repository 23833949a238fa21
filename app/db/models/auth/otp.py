# app/db/models/auth/otp.py
from sqlmodel import SQLModel, Field
from datetime import datetime
from typing import Optional

from ....utils import utcnow


class OTPCode(SQLModel, table=True):
    """The single outstanding OTP for a phone number."""
    __tablename__ = "otp_codes"
    phone: str = Field(max_length=20, primary_key=True)
    code_hash: str = Field(max_length=64)
    attempts: int = Field(default=0)
    expires_at: datetime = Field(index=True)
    consumed_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=utcnow)

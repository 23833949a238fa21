# app/schemas/auth/auth.py
from pydantic import BaseModel, Field
from typing import Optional

from ..users.profile import ProfileUser


class RequestOTPRequest(BaseModel):
    phone: Optional[str] = Field(None, description="Phone number; non-digits are stripped")


class RequestOTPResponse(BaseModel):
    ok: bool = True
    success: bool = True
    message: str
    phone: str
    expiresInSec: int
    otp: Optional[str] = Field(None, description="Only present with ALLOW_DEMO_OTP outside production")


class VerifyOTPRequest(BaseModel):
    phone: Optional[str] = Field(None, description="Phone number used for request-otp")
    otp: Optional[str] = Field(None, description="The code received by SMS")


class VerifyOTPResponse(BaseModel):
    ok: bool = True
    success: bool = True
    message: str
    token: str
    user: ProfileUser

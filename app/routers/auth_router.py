from fastapi import APIRouter, Depends
import logging

from ..application.services.auth_service import AuthService
from ..application.services.profile_service import to_profile_dict
from ..dependencies import get_auth_service
from ..schemas import ErrorResponse, RequestOTPRequest, RequestOTPResponse, VerifyOTPRequest, VerifyOTPResponse

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
    responses={400: {"model": ErrorResponse}, 429: {"model": ErrorResponse}},
)


@router.post("/request-otp", response_model=RequestOTPResponse, response_model_exclude_none=True)
def request_otp(body: RequestOTPRequest, service: AuthService = Depends(get_auth_service)):
    """
    Issue a one-time passcode for a phone number.
    Any earlier unconsumed code for the same phone stops working.
    """
    issued = service.request_otp(body.phone)
    return RequestOTPResponse(
        message="OTP sent",
        phone=issued.phone,
        expiresInSec=issued.expires_in_sec,
        otp=issued.code,
    )


@router.post("/verify-otp", response_model=VerifyOTPResponse, response_model_exclude_none=True)
def verify_otp(body: VerifyOTPRequest, service: AuthService = Depends(get_auth_service)):
    """
    Verify the code, create the user on first login and return a bearer token.
    """
    result = service.verify_otp(body.phone, body.otp)
    return VerifyOTPResponse(
        message="OTP verified",
        token=result.token,
        user=to_profile_dict(result.user),
    )

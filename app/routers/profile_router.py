from fastapi import APIRouter, Depends
import logging

from ..application.services.profile_service import ProfileService
from ..dependencies import get_current_phone, get_profile_service
from ..schemas import ErrorResponse, ProfileResponse, SaveProfileRequest

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/profile",
    tags=["Profile"],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
    },
)


@router.post("/save", response_model=ProfileResponse, response_model_exclude_none=True)
def save_profile(
    body: SaveProfileRequest,
    phone: str = Depends(get_current_phone),
    service: ProfileService = Depends(get_profile_service),
):
    view = service.save_profile(
        phone,
        role=body.role,
        name=body.name,
        avatar_base64=body.avatarBase64,
        cnic_front_base64=body.cnicFrontBase64,
        cnic_back_base64=body.cnicBackBase64,
        selfie_base64=body.selfieBase64,
    )
    return ProfileResponse(role=view.role, user=view.user, status=view.verification_status)


@router.get("/me", response_model=ProfileResponse, response_model_exclude_none=True)
def get_me(
    phone: str = Depends(get_current_phone),
    service: ProfileService = Depends(get_profile_service),
):
    view = service.get_profile(phone)
    return ProfileResponse(role=view.role, user=view.user, status=view.verification_status)

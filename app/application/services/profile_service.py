import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..ports.audit_logger import AuditLogger
from ..ports.user_repo import ProviderDocumentsDto, ProviderProfileDto, UserDto, UserRepository
from ...db.models import UserRole
from ...exceptions import NotFound, ValidationError
from ...media_utils import clean_base64_image

logger = logging.getLogger(__name__)

NAME_MAX_LENGTH = 120
ROLES = (UserRole.BUYER.value, UserRole.PROVIDER.value)


@dataclass
class ProfileView:
    role: str
    user: Dict[str, Any]

    @property
    def verification_status(self) -> Optional[str]:
        return self.user.get("verificationStatus")


def to_profile_dict(user: UserDto, provider: Optional[ProviderProfileDto] = None) -> Dict[str, Any]:
    data = {
        "id": user.id,
        "phone": user.phone,
        "role": user.role,
        "name": user.name,
        "avatarBase64": user.avatar_base64,
        "createdAt": user.created_at.isoformat() if user.created_at else None,
        "updatedAt": user.updated_at.isoformat() if user.updated_at else None,
    }
    if provider is not None:
        data["verificationStatus"] = provider.verification_status
    return data


@dataclass
class ProfileService:
    user_repo: UserRepository
    audit_logger: AuditLogger
    max_image_bytes: int = 6 * 1024 * 1024

    def save_profile(
        self,
        phone: str,
        role: Optional[str],
        name: Optional[str],
        avatar_base64: Optional[str] = None,
        cnic_front_base64: Optional[str] = None,
        cnic_back_base64: Optional[str] = None,
        selfie_base64: Optional[str] = None,
    ) -> ProfileView:
        role = str(role or "").strip().lower()
        name = str(name or "").strip()
        if role not in ROLES:
            raise ValidationError("Invalid role")
        if not name:
            raise ValidationError("Name required")
        if len(name) > NAME_MAX_LENGTH:
            raise ValidationError(f"Name must be at most {NAME_MAX_LENGTH} characters")

        # Validate every payload before touching storage
        avatar = clean_base64_image(avatar_base64, "avatarBase64", self.max_image_bytes)
        documents = None
        if role == UserRole.PROVIDER.value:
            front = clean_base64_image(cnic_front_base64, "cnicFrontBase64", self.max_image_bytes)
            back = clean_base64_image(cnic_back_base64, "cnicBackBase64", self.max_image_bytes)
            selfie = clean_base64_image(selfie_base64, "selfieBase64", self.max_image_bytes)
            if not (front and back and selfie):
                raise ValidationError("Provider verification required")
            documents = ProviderDocumentsDto(cnic_front_base64=front, cnic_back_base64=back, selfie_base64=selfie)

        user = self.user_repo.get_by_phone(phone)
        if user is None:
            raise NotFound("User not found")

        if documents is None:
            user = self.user_repo.save_buyer_profile(user.id, name, avatar)
            provider = None
        else:
            provider = self.user_repo.save_provider_profile(user.id, name, avatar, documents)
            user = self.user_repo.get_by_phone(phone)

        self.audit_logger.log(
            "profile_saved",
            phone,
            user_id=user.id,
            details={"role": role, "status": provider.verification_status if provider else None},
        )
        return ProfileView(role=role, user=to_profile_dict(user, provider))

    def get_profile(self, phone: str) -> ProfileView:
        user = self.user_repo.get_by_phone(phone)
        if user is None or not user.name:
            raise NotFound("Profile not found")

        if user.role == UserRole.PROVIDER.value:
            provider = self.user_repo.get_provider_profile(user.id)
            if provider is None or not provider.is_active:
                raise NotFound("Profile not found")
            return ProfileView(role=user.role, user=to_profile_dict(user, provider))
        return ProfileView(role=user.role, user=to_profile_dict(user))

from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from .....utils import utcnow
from .....db.models import User, UserRole, ProviderProfile, ProviderDocument, VerificationStatus
from .....application.ports.user_repo import (
    UserRepository,
    UserDto,
    ProviderProfileDto,
    ProviderDocumentsDto,
)


class SqlUserRepository(UserRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, user: User) -> UserDto:
        return UserDto(
            id=user.id,
            phone=user.phone,
            role=user.role,
            name=user.name,
            avatar_base64=user.avatar_base64,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )

    def _provider_to_dto(self, profile: ProviderProfile) -> ProviderProfileDto:
        return ProviderProfileDto(
            id=profile.id,
            user_id=profile.user_id,
            verification_status=profile.verification_status,
            is_active=profile.is_active,
            created_at=profile.created_at,
            updated_at=profile.updated_at,
        )

    def _get_user(self, user_id: int) -> User:
        user = self.session.exec(select(User).where(User.id == user_id)).first()
        if user is None:
            raise LookupError(f"user {user_id} does not exist")
        return user

    def get_by_phone(self, phone: str) -> Optional[UserDto]:
        user = self.session.exec(select(User).where(User.phone == phone)).first()
        return self._to_dto(user) if user else None

    def get_or_create(self, phone: str, default_role: str) -> UserDto:
        user = self.session.exec(select(User).where(User.phone == phone)).first()
        if user:
            return self._to_dto(user)
        user = User(phone=phone, role=default_role)
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError:
            # Another verification created the row first
            self.session.rollback()
            user = self.session.exec(select(User).where(User.phone == phone)).one()
            return self._to_dto(user)
        self.session.refresh(user)
        return self._to_dto(user)

    def get_provider_profile(self, user_id: int) -> Optional[ProviderProfileDto]:
        profile = self.session.exec(select(ProviderProfile).where(ProviderProfile.user_id == user_id)).first()
        return self._provider_to_dto(profile) if profile else None

    def _apply_common_fields(self, user: User, role: str, name: str, avatar_base64: Optional[str]) -> None:
        user.role = role
        user.name = name
        if avatar_base64 is not None:
            user.avatar_base64 = avatar_base64
        user.updated_at = utcnow()
        self.session.add(user)

    def save_buyer_profile(self, user_id: int, name: str, avatar_base64: Optional[str]) -> UserDto:
        try:
            user = self._get_user(user_id)
            self._apply_common_fields(user, UserRole.BUYER.value, name, avatar_base64)
            # Only one profile type may be active at a time
            self.session.execute(
                update(ProviderProfile)
                .where(ProviderProfile.user_id == user_id, ProviderProfile.is_active.is_(True))
                .values(is_active=False, updated_at=utcnow())
            )
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(user)
        return self._to_dto(user)

    def save_provider_profile(self, user_id: int, name: str, avatar_base64: Optional[str],
                              documents: ProviderDocumentsDto) -> ProviderProfileDto:
        try:
            user = self._get_user(user_id)
            self._apply_common_fields(user, UserRole.PROVIDER.value, name, avatar_base64)

            profile = self.session.exec(
                select(ProviderProfile).where(ProviderProfile.user_id == user_id).with_for_update()
            ).first()
            if profile is None:
                profile = ProviderProfile(user_id=user_id, verification_status=VerificationStatus.PENDING.value)
            else:
                # verification_status is left alone: pending stays pending, review decisions stand
                profile.is_active = True
                profile.updated_at = utcnow()
            self.session.add(profile)
            self.session.flush()

            self.session.add(ProviderDocument(
                provider_profile_id=profile.id,
                cnic_front_base64=documents.cnic_front_base64,
                cnic_back_base64=documents.cnic_back_base64,
                selfie_base64=documents.selfie_base64,
            ))
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(profile)
        return self._provider_to_dto(profile)

    def set_verification_status(self, user_id: int, status: str) -> Optional[ProviderProfileDto]:
        """Record a review decision; the review workflow itself lives outside this service."""
        profile = self.session.exec(select(ProviderProfile).where(ProviderProfile.user_id == user_id)).first()
        if profile is None:
            return None
        profile.verification_status = VerificationStatus(status).value
        profile.updated_at = utcnow()
        self.session.add(profile)
        self.session.commit()
        self.session.refresh(profile)
        return self._provider_to_dto(profile)

    def count_documents(self, user_id: int) -> int:
        profile = self.session.exec(select(ProviderProfile).where(ProviderProfile.user_id == user_id)).first()
        if profile is None:
            return 0
        return len(self.session.exec(
            select(ProviderDocument.id).where(ProviderDocument.provider_profile_id == profile.id)
        ).all())

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol


@dataclass
class UserDto:
    id: int
    phone: str
    role: str
    name: Optional[str]
    avatar_base64: Optional[str]
    created_at: datetime
    updated_at: datetime


@dataclass
class ProviderProfileDto:
    id: int
    user_id: int
    verification_status: str
    is_active: bool
    created_at: datetime
    updated_at: datetime


@dataclass
class ProviderDocumentsDto:
    cnic_front_base64: str
    cnic_back_base64: str
    selfie_base64: str


class UserRepository(Protocol):
    def get_by_phone(self, phone: str) -> Optional[UserDto]:
        ...

    def get_or_create(self, phone: str, default_role: str) -> UserDto:
        ...

    def get_provider_profile(self, user_id: int) -> Optional[ProviderProfileDto]:
        ...

    def save_buyer_profile(self, user_id: int, name: str, avatar_base64: Optional[str]) -> UserDto:
        """Store buyer fields and deactivate any provider profile, in one transaction."""
        ...

    def save_provider_profile(self, user_id: int, name: str, avatar_base64: Optional[str],
                              documents: ProviderDocumentsDto) -> ProviderProfileDto:
        """Upsert the provider profile and append a document submission, in one transaction.

        A new profile starts pending; an approved or rejected one keeps its status.
        """
        ...

# app/db/models/users/provider.py
from enum import Enum
from typing import Optional
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, Text
from datetime import datetime

from ....utils import utcnow


class VerificationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ProviderProfile(SQLModel, table=True):
    __tablename__ = "provider_profiles"
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", unique=True, index=True)
    verification_status: str = Field(default=VerificationStatus.PENDING.value, max_length=10)
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class ProviderDocument(SQLModel, table=True):
    __tablename__ = "provider_documents"
    id: Optional[int] = Field(default=None, primary_key=True)
    provider_profile_id: int = Field(foreign_key="provider_profiles.id", index=True)
    cnic_front_base64: str = Field(sa_column=Column(Text, nullable=False))
    cnic_back_base64: str = Field(sa_column=Column(Text, nullable=False))
    selfie_base64: str = Field(sa_column=Column(Text, nullable=False))
    submitted_at: datetime = Field(default_factory=utcnow)

# app/db/models/users/user.py
from enum import Enum
from typing import Optional
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, Text
from datetime import datetime

from ....utils import utcnow


class UserRole(str, Enum):
    BUYER = "buyer"
    PROVIDER = "provider"


class User(SQLModel, table=True):
    __tablename__ = "users"
    id: Optional[int] = Field(default=None, primary_key=True)
    phone: str = Field(max_length=20, unique=True, index=True)
    role: str = Field(default=UserRole.BUYER.value, max_length=10)
    name: Optional[str] = Field(default=None, max_length=120)
    avatar_base64: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

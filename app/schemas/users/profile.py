# app/schemas/users/profile.py
from pydantic import BaseModel, ConfigDict, Field, AliasChoices
from typing import Optional


class SaveProfileRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    role: Optional[str] = Field(None, description="buyer or provider")
    name: Optional[str] = Field(None, description="Display name")
    avatarBase64: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("avatarBase64", "profilePicBase64"),
        description="Profile picture, base64 or data URL",
    )
    cnicFrontBase64: Optional[str] = Field(None, description="Provider only: front of ID card")
    cnicBackBase64: Optional[str] = Field(None, description="Provider only: back of ID card")
    selfieBase64: Optional[str] = Field(None, description="Provider only: selfie")


class ProfileUser(BaseModel):
    id: int
    phone: str
    role: str
    name: Optional[str] = None
    avatarBase64: Optional[str] = None
    verificationStatus: Optional[str] = None
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


class ProfileResponse(BaseModel):
    ok: bool = True
    success: bool = True
    role: str
    user: ProfileUser
    status: Optional[str] = Field(None, description="Provider review state")

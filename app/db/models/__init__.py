# Models package (re-export feature modules for stable imports)
from .users.user import User, UserRole
from .users.provider import ProviderProfile, ProviderDocument, VerificationStatus
from .auth.otp import OTPCode

__all__ = [
    "User",
    "UserRole",
    "ProviderProfile",
    "ProviderDocument",
    "VerificationStatus",
    "OTPCode",
]

import hashlib
import hmac
import re
import secrets
from datetime import datetime, timezone
from typing import Optional

from .exceptions import ValidationError

PHONE_MAX_RAW_LENGTH = 20
PHONE_MIN_DIGITS = 10
PHONE_MAX_DIGITS = 15

_NON_DIGITS = re.compile(r"\D")


# =========================
# Phone numbers
# =========================
def normalize_phone(value) -> str:
    """Strip a phone number down to its digits.

    Raises ValidationError when the input is empty, longer than 20 characters
    or does not carry 10-15 digits.
    """
    raw = str(value or "").strip()
    if not raw:
        raise ValidationError("Phone required")
    if len(raw) > PHONE_MAX_RAW_LENGTH:
        raise ValidationError("Invalid phone")
    digits = _NON_DIGITS.sub("", raw)
    if not PHONE_MIN_DIGITS <= len(digits) <= PHONE_MAX_DIGITS:
        raise ValidationError("Invalid phone")
    return digits


def is_valid_phone(value) -> bool:
    try:
        normalize_phone(value)
    except ValidationError:
        return False
    return True


def hash_phone_number(phone: str) -> str:
    """Hash phone number for logs (one-way hash)"""
    return hashlib.sha256(phone.encode()).hexdigest()


# =========================
# OTP Generation
# =========================
def generate_otp(length: int = 6) -> str:
    """Generate a numeric OTP from the OS CSPRNG."""
    return "".join(secrets.choice("0123456789") for _ in range(length))


def hash_otp(phone: str, code: str, secret: str) -> str:
    """HMAC-SHA256 of phone|code keyed with the server OTP secret."""
    message = f"{phone}|{code}".encode()
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


def otp_matches(phone: str, code: str, secret: str, expected_hash: str) -> bool:
    return hmac.compare_digest(hash_otp(phone, code, secret), expected_hash)


# =========================
# Time
# =========================
def utcnow() -> datetime:
    """Timezone-aware current UTC time; every stored timestamp is written with it."""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive values even for columns written aware
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)

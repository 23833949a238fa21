import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from ..ports.audit_logger import AuditLogger
from ..ports.otp_repo import OtpRepository
from ..ports.otp_sender import OtpSender
from ..ports.rate_limiter import RateLimiter
from ..ports.token_service import TokenService
from ..ports.user_repo import UserRepository, UserDto
from ...db.models import UserRole
from ...exceptions import (
    OtpAlreadyUsed,
    OtpAttemptsExceeded,
    OtpError,
    OtpExpired,
    OtpInvalid,
    OtpNotRequested,
    RateLimited,
    ValidationError,
)
from ...utils import generate_otp, hash_otp, normalize_phone, otp_matches, utcnow

logger = logging.getLogger(__name__)


@dataclass
class OtpIssued:
    phone: str
    expires_in_sec: int
    # Only populated when the demo flag is on
    code: Optional[str] = None


@dataclass
class AuthResult:
    token: str
    user: UserDto


@dataclass
class AuthService:
    otp_repo: OtpRepository
    user_repo: UserRepository
    token_service: TokenService
    otp_sender: OtpSender
    rate_limiter: RateLimiter
    audit_logger: AuditLogger
    otp_secret: str
    otp_length: int = 6
    otp_ttl_seconds: int = 300
    max_attempts: int = 5
    resend_cooldown_seconds: int = 30
    max_requests_per_hour: int = 5
    expose_code: bool = False

    def request_otp(self, phone: str) -> OtpIssued:
        phone = normalize_phone(phone)

        cooldown_key = f"otp:cooldown:{phone}"
        hourly_key = f"otp:hourly:{phone}"
        if not self.rate_limiter.allow(cooldown_key, 1, self.resend_cooldown_seconds):
            raise RateLimited("Please wait before requesting another OTP")
        if not self.rate_limiter.allow(hourly_key, self.max_requests_per_hour, 3600):
            raise RateLimited("Too many OTP requests. Please try again later.")

        code = generate_otp(self.otp_length)
        code_hash = hash_otp(phone, code, self.otp_secret)
        expires_at = utcnow() + timedelta(seconds=self.otp_ttl_seconds)
        # Replaces any outstanding record, so older codes stop validating
        self.otp_repo.put(phone, code_hash, expires_at)
        try:
            self.otp_sender.send(phone, code)
        except Exception:
            # An undelivered code does not count against the caller's quota
            self.otp_repo.delete(phone, code_hash)
            self.rate_limiter.release(cooldown_key, self.resend_cooldown_seconds)
            self.rate_limiter.release(hourly_key, 3600)
            self.audit_logger.log("otp_send_failed", phone, success=False)
            raise

        self.audit_logger.log("otp_requested", phone, details={"ttl": self.otp_ttl_seconds})
        return OtpIssued(
            phone=phone,
            expires_in_sec=self.otp_ttl_seconds,
            code=code if self.expose_code else None,
        )

    def verify_otp(self, phone: str, code: str) -> AuthResult:
        phone = normalize_phone(phone)
        code = str(code or "").strip()
        if not code:
            raise ValidationError("OTP required")

        try:
            self._consume(phone, code)
        except OtpError as e:
            self.audit_logger.log("otp_verify_failed", phone, success=False, details={"reason": e.message})
            raise

        user = self.user_repo.get_or_create(phone, default_role=UserRole.BUYER.value)
        token = self.token_service.issue(phone, user.id, user.role)
        self.audit_logger.log("otp_verified", phone, user_id=user.id)
        return AuthResult(token=token, user=user)

    def _consume(self, phone: str, code: str) -> None:
        record = self.otp_repo.get(phone)
        if record is None:
            raise OtpNotRequested()
        if record.consumed_at is not None:
            raise OtpAlreadyUsed()

        now = utcnow()
        if now > record.expires_at:
            self.otp_repo.delete(phone, record.code_hash)
            raise OtpExpired()
        if record.attempts >= self.max_attempts:
            self.otp_repo.delete(phone, record.code_hash)
            raise OtpAttemptsExceeded()

        if not otp_matches(phone, code, self.otp_secret, record.code_hash):
            # The cap is enforced by the store; the attempts read above may be stale
            if not self.otp_repo.record_failed_attempt(phone, record.code_hash, self.max_attempts):
                self.otp_repo.delete(phone, record.code_hash)
                raise OtpAttemptsExceeded()
            logger.info(f"OTP mismatch for phone ending {phone[-4:]}")
            raise OtpInvalid()

        if not self.otp_repo.consume(phone, record.code_hash, now, self.max_attempts):
            # Lost a race with a concurrent verify, or the record was replaced meanwhile
            raise OtpAlreadyUsed()

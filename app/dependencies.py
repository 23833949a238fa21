import logging
from functools import lru_cache

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session

from .application.ports.audit_logger import AuditLogger
from .application.ports.otp_sender import OtpSender
from .application.ports.rate_limiter import RateLimiter
from .application.ports.token_service import TokenService
from .application.services.auth_service import AuthService
from .application.services.profile_service import ProfileService
from .config import settings
from .database import get_session
from .exceptions import Unauthorized
from .infrastructure.audit.std_logger import StdAuditLogger
from .infrastructure.otp.log_sender import LogOtpSender
from .infrastructure.persistence.sqlalchemy.repositories.otp_repository_sql import SqlOtpRepository
from .infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository
from .infrastructure.rate_limit.memory_rate_limiter import InMemoryRateLimiter
from .infrastructure.security.jwt_token_service import JwtTokenService

logger = logging.getLogger(__name__)

# Auth scheme; missing headers are reported by get_current_phone, not FastAPI
bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache()
def get_token_service() -> TokenService:
    return JwtTokenService(
        secret_key=settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
        expires_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
    )


@lru_cache()
def get_rate_limiter() -> RateLimiter:
    if settings.REDIS_URL:
        from .infrastructure.rate_limit.redis_rate_limiter import RedisRateLimiter
        return RedisRateLimiter(settings.REDIS_URL)
    return InMemoryRateLimiter()


@lru_cache()
def get_otp_sender() -> OtpSender:
    if settings.SMS_BACKEND.lower() == "twilio":
        from .infrastructure.otp.twilio_sender import TwilioOtpSender
        return TwilioOtpSender()
    return LogOtpSender()


@lru_cache()
def get_audit_logger() -> AuditLogger:
    return StdAuditLogger()


def get_auth_service(
    session: Session = Depends(get_session),
    token_service: TokenService = Depends(get_token_service),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
    otp_sender: OtpSender = Depends(get_otp_sender),
    audit_logger: AuditLogger = Depends(get_audit_logger),
) -> AuthService:
    return AuthService(
        otp_repo=SqlOtpRepository(session),
        user_repo=SqlUserRepository(session),
        token_service=token_service,
        otp_sender=otp_sender,
        rate_limiter=rate_limiter,
        audit_logger=audit_logger,
        otp_secret=settings.otp_secret,
        otp_length=settings.OTP_LENGTH,
        otp_ttl_seconds=settings.OTP_TTL_SECONDS,
        max_attempts=settings.OTP_MAX_ATTEMPTS,
        resend_cooldown_seconds=settings.OTP_RESEND_COOLDOWN_SECONDS,
        max_requests_per_hour=settings.OTP_MAX_REQUESTS_PER_HOUR,
        expose_code=settings.demo_otp_enabled,
    )


def get_profile_service(
    session: Session = Depends(get_session),
    audit_logger: AuditLogger = Depends(get_audit_logger),
) -> ProfileService:
    return ProfileService(
        user_repo=SqlUserRepository(session),
        audit_logger=audit_logger,
        max_image_bytes=settings.MAX_IMAGE_BYTES,
    )


def get_current_phone(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    token_service: TokenService = Depends(get_token_service),
) -> str:
    """Resolve the bearer token to the phone number it was issued for."""
    if credentials is None or not credentials.credentials:
        raise Unauthorized("Missing token")
    claims = token_service.resolve(credentials.credentials)
    if claims is None:
        logger.warning("Bearer token rejected")
        raise Unauthorized("Invalid or expired token")
    return claims.phone

import logging
from datetime import timedelta
from typing import Optional

import jwt

from ...application.ports.token_service import TokenService, TokenClaims
from ...utils import is_valid_phone, utcnow

logger = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"


class JwtTokenService(TokenService):
    def __init__(self, secret_key: str, algorithm: str = "HS256", expires_minutes: int = 60):
        if not secret_key:
            raise ValueError("SECRET_KEY not properly configured")
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expires_minutes = expires_minutes

    def issue(self, phone: str, user_id: int, role: str) -> str:
        """Create JWT access token carrying the phone as subject."""
        now = utcnow()
        payload = {
            "sub": phone,
            "uid": user_id,
            "role": role,
            "type": ACCESS_TOKEN_TYPE,
            "iat": now,
            "exp": now + timedelta(minutes=self.expires_minutes),
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def resolve(self, token: str) -> Optional[TokenClaims]:
        """Decode and verify JWT token"""
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            logger.info("Rejected expired token")
            return None
        except jwt.InvalidTokenError as e:
            logger.info(f"Rejected invalid token: {type(e).__name__}")
            return None

        if payload.get("type") != ACCESS_TOKEN_TYPE:
            return None
        phone = payload.get("sub")
        if not isinstance(phone, str) or not phone.isdigit() or not is_valid_phone(phone):
            return None
        return TokenClaims(phone=phone, user_id=payload.get("uid"), role=payload.get("role"))

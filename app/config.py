#config.py
import os
from pydantic_settings import BaseSettings
from pydantic import Field
from pydantic_settings import SettingsConfigDict
from typing import Optional, List
from functools import lru_cache

DEFAULT_SECRET_KEY = "change-me-in-prod"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore", populate_by_name=True)

    # Application Settings
    APP_NAME: str = "PremiumChat API"
    APP_VERSION: str = "1.0.0"
    ENV: str = "development"
    DEBUG: bool = False
    DOCS_ENABLED: bool = True  # Can disable in production

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = int(os.environ.get("PORT", 8080))

    # Database Settings
    DATABASE_URL: str = "sqlite:///./premiumchat.db"

    # Security Settings
    SECRET_KEY: str = Field(default=DEFAULT_SECRET_KEY, alias="JWT_SECRET_KEY")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30 * 24 * 60  # 30 days

    # OTP Settings
    OTP_SECRET: Optional[str] = None
    OTP_LENGTH: int = 6
    OTP_TTL_SECONDS: int = 300
    OTP_MAX_ATTEMPTS: int = 5
    OTP_RESEND_COOLDOWN_SECONDS: int = 30
    OTP_MAX_REQUESTS_PER_HOUR: int = 5
    # Surfaces the code in the request-otp response; ignored in production
    ALLOW_DEMO_OTP: bool = False

    # SMS delivery ("log" or "twilio")
    SMS_BACKEND: str = "log"
    TWILIO_ACCOUNT_SID: str = ""
    TWILIO_AUTH_TOKEN: str = ""
    TWILIO_FROM_NUMBER: str = ""
    SMS_DEFAULT_COUNTRY_CODE: str = "92"

    # Profile image limits
    MAX_IMAGE_BYTES: int = 6 * 1024 * 1024  # 6MB decoded, per image
    MAX_REQUEST_BYTES: int = 40 * 1024 * 1024  # four base64 images plus JSON overhead

    # CORS Settings (accept comma-separated strings to avoid JSON parsing in env)
    ALLOWED_ORIGINS: str = "*"
    ALLOWED_METHODS: str = "GET,POST,PUT,DELETE,OPTIONS"
    ALLOWED_HEADERS: str = "Content-Type,Authorization"
    CORS_ALLOW_CREDENTIALS: bool = False

    # Middleware settings
    GZIP_MIN_SIZE: int = 500  # bytes

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Rate limiting backend; in-process memory when unset
    REDIS_URL: Optional[str] = None

    # Accept comma-separated strings for list envs in addition to JSON arrays
    def _split_csv(self, value: str) -> List[str]:
        if value is None:
            return []
        value = value.strip()
        if value == "":
            return []
        return [item.strip() for item in value.split(",")]

    @property
    def allowed_origins_list(self) -> List[str]:
        return self._split_csv(self.ALLOWED_ORIGINS)

    @property
    def allowed_methods_list(self) -> List[str]:
        return self._split_csv(self.ALLOWED_METHODS)

    @property
    def allowed_headers_list(self) -> List[str]:
        return self._split_csv(self.ALLOWED_HEADERS)

    @property
    def is_production(self) -> bool:
        return self.ENV.lower() == "production"

    @property
    def demo_otp_enabled(self) -> bool:
        return self.ALLOW_DEMO_OTP and not self.is_production

    @property
    def otp_secret(self) -> str:
        # Development falls back to the JWT secret so a bare checkout still runs
        return self.OTP_SECRET or self.SECRET_KEY

    def check_production(self) -> None:
        """Refuse to boot a production process with development secrets."""
        if not self.is_production:
            return
        problems = []
        if not self.SECRET_KEY or self.SECRET_KEY == DEFAULT_SECRET_KEY:
            problems.append("JWT_SECRET_KEY must be set")
        if not self.OTP_SECRET:
            problems.append("OTP_SECRET must be set")
        if self.ALLOW_DEMO_OTP:
            problems.append("ALLOW_DEMO_OTP must be off")
        if problems:
            raise RuntimeError("Invalid production configuration: " + "; ".join(problems))


@lru_cache()
def get_settings() -> Settings:
    s = Settings()
    # Normalize ALLOWED_ORIGINS if provided as comma-separated string env var CORS_ORIGINS
    cors_env = os.environ.get("CORS_ORIGINS")
    if cors_env:
        s.ALLOWED_ORIGINS = cors_env
    return s


settings: Settings = get_settings()

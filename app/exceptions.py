import logging
from typing import Any, Dict

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class APIException(HTTPException):
    status_code = 400
    default_message = "Bad request"

    def __init__(self, message: str = None):
        super().__init__(status_code=self.status_code, detail=message or self.default_message)

    @property
    def message(self) -> str:
        return self.detail


class ValidationError(APIException):
    status_code = 400
    default_message = "Invalid request"


class Unauthorized(APIException):
    status_code = 401
    default_message = "Unauthorized"


class NotFound(APIException):
    status_code = 404
    default_message = "Not found"


class PayloadTooLarge(APIException):
    status_code = 413
    default_message = "Payload too large"


class RateLimited(APIException):
    status_code = 429
    default_message = "Too many requests. Please try again later."


class InternalError(APIException):
    status_code = 500
    default_message = "Internal server error"


class OtpError(APIException):
    """OTP state machine violations; all surface as 400."""
    status_code = 400
    default_message = "OTP verification failed"


class OtpNotRequested(OtpError):
    default_message = "OTP not requested"


class OtpExpired(OtpError):
    default_message = "OTP expired"


class OtpInvalid(OtpError):
    default_message = "Invalid OTP"


class OtpAlreadyUsed(OtpError):
    default_message = "OTP already used"


class OtpAttemptsExceeded(OtpError):
    default_message = "Too many attempts, request a new OTP"


def create_error_response(message: str) -> Dict[str, Any]:
    """Create a standardized error response"""
    return {
        "ok": False,
        "success": False,
        "message": message,
    }


def create_success_response(**data: Any) -> Dict[str, Any]:
    """Create a standardized success response"""
    body = {"ok": True, "success": True}
    body.update(data)
    return body


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Custom exception handler for HTTPException"""
    if exc.status_code == 404 and not isinstance(exc, APIException):
        message = f"Route not found: {request.method} {request.url.path}"
    else:
        message = str(exc.detail)
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(message),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies are reported as 400 with the first failing field."""
    errors = exc.errors()
    message = "Invalid request body"
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    return JSONResponse(status_code=400, content=create_error_response(message))

import time
import logging
import uuid
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from .config import settings
from .exceptions import PayloadTooLarge, create_error_response

logger = logging.getLogger(__name__)


class SecurityMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        # Add security headers
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Cache-Control"] = "no-store"
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:12]
        request.state.request_id = request_id

        # Bodies are never logged: they carry OTPs and identity documents
        client_host = request.client.host if request.client else "unknown"
        logger.info(f"[{request_id}] {request.method} {request.url.path} from {client_host}")

        response = await call_next(request)

        duration = time.time() - start_time
        logger.info(f"[{request_id}] {response.status_code} in {duration:.3f}s")
        response.headers["X-Request-ID"] = request_id
        return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        try:
            response = await call_next(request)
            return response
        except Exception as e:
            logger.error(f"Unhandled error on {request.method} {request.url.path}: {type(e).__name__}", exc_info=True)

            if settings.DEBUG:
                message = f"Internal server error: {type(e).__name__}"
            else:
                message = "Internal server error"
            return JSONResponse(status_code=500, content=create_error_response(message))


class RequestSizeLimitMiddleware:
    """Caps request bodies, whether or not the client sends Content-Length."""

    def __init__(self, app: ASGIApp, max_bytes: int = None):
        self.app = app
        self.max_bytes = max_bytes or settings.MAX_REQUEST_BYTES

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        content_length = Headers(scope=scope).get("content-length")
        if content_length is not None:
            try:
                size = int(content_length)
            except ValueError:
                response = JSONResponse(status_code=400, content=create_error_response("Invalid Content-Length"))
                await response(scope, receive, send)
                return
            if size > self.max_bytes:
                response = JSONResponse(status_code=413, content=create_error_response("Request entity too large"))
                await response(scope, receive, send)
                return

        # Chunked bodies are counted as they stream in
        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_bytes:
                    raise PayloadTooLarge("Request entity too large")
            return message

        await self.app(scope, limited_receive, send)

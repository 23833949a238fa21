import os
import logging
import subprocess
import sys
from contextlib import asynccontextmanager

from dotenv import load_dotenv

# Load environment variables as early as possible
load_dotenv()

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlmodel import Session
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.gzip import GZipMiddleware

from .config import settings
from .database import create_db_and_tables, engine
from .exceptions import create_success_response, http_exception_handler, validation_exception_handler
from .utils import utcnow
from .infrastructure.persistence.sqlalchemy.repositories.otp_repository_sql import SqlOtpRepository
from .middleware import SecurityMiddleware, LoggingMiddleware, ErrorHandlingMiddleware, RequestSizeLimitMiddleware
from .routers import auth_router, profile_router
from .schemas import HealthResponse

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format=settings.LOG_FORMAT
)
logger = logging.getLogger(__name__)


def _run_alembic_upgrade() -> None:
    logger.info("Running Alembic upgrade on startup...")
    subprocess.run([sys.executable, "-m", "alembic", "upgrade", "head"], check=True)
    logger.info("Alembic upgrade completed")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"Starting {settings.APP_NAME} ({settings.ENV})...")
    settings.check_production()
    app.state.db_init_ok = True
    app.state.db_init_error = None
    try:
        if os.getenv("RUN_ALEMBIC_ON_STARTUP", "false").lower() in ("1", "true", "yes"):
            _run_alembic_upgrade()
        elif settings.DATABASE_URL.startswith("sqlite"):
            create_db_and_tables()

        with Session(engine) as session:
            purged = SqlOtpRepository(session).purge_expired()
        if purged:
            logger.info(f"Purged {purged} expired OTP records")
        logger.info("Database initialized successfully")
    except Exception as e:
        # Do not crash the app; report via health endpoint
        app.state.db_init_ok = False
        app.state.db_init_error = type(e).__name__
        logger.exception("Database initialization failed")
    yield
    # Shutdown
    logger.info(f"Shutting down {settings.APP_NAME}...")


# Initialize FastAPI
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
    docs_url=("/docs" if settings.DOCS_ENABLED else None),
    redoc_url=("/redoc" if settings.DOCS_ENABLED else None),
    openapi_url=("/openapi.json" if settings.DOCS_ENABLED else None)
)

# Add custom exception handlers
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)

# Add middleware
app.add_middleware(ErrorHandlingMiddleware)
app.add_middleware(LoggingMiddleware)
app.add_middleware(SecurityMiddleware)
app.add_middleware(RequestSizeLimitMiddleware)

# GZip compression
app.add_middleware(GZipMiddleware, minimum_size=settings.GZIP_MIN_SIZE)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=settings.allowed_methods_list,
    allow_headers=settings.allowed_headers_list,
)

app.include_router(auth_router.router)
app.include_router(profile_router.router)


@app.get("/")
def root():
    return create_success_response(
        message=f"{settings.APP_NAME} running",
        time=utcnow().isoformat(),
    )


# Health check endpoint
@app.get("/health", response_model=HealthResponse)
def health_check():
    database = "ok"
    try:
        with Session(engine) as session:
            session.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning(f"Health check database ping failed: {type(e).__name__}")
        database = "unavailable"
    healthy = database == "ok" and getattr(app.state, "db_init_ok", True)
    return HealthResponse(
        status="healthy" if healthy else "degraded",
        service=settings.APP_NAME,
        version=settings.APP_VERSION,
        timestamp=utcnow().isoformat(),
        database=database,
        error=getattr(app.state, "db_init_error", None),
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT)

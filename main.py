import time
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager

# Import all models for SQLAlchemy relationship resolution
import models  # noqa: F401
from core.database import Base, SessionLocal, engine
from routers import auth

# Rate limiter imports
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

# Logging imports
from core.logging_config import setup_logging
from core.config import settings
from middleware import RequestIDMiddleware, get_request_id, limiter, rate_limit_exceeded_handler
from services.credential_store import CredentialStore
from services.session_store import SessionStore
from utils.exceptions import AppError, ValidationAppError
from utils.logger import get_logger, sanitize_log_data

setup_logging(
    log_level=settings.LOG_LEVEL,
    log_dir=settings.LOG_DIR
)

logger = get_logger(__name__)


def init_database():
    """Create tables, seed default roles and drop expired sessions."""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        CredentialStore(db).ensure_roles(settings.DEFAULT_ROLES)
        purged = SessionStore(db).purge_expired()
    finally:
        db.close()
    logger.info("Database initialised", extra={"expired_sessions_purged": purged})


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_database()
    logger.info("Application startup complete", extra={"event": "startup"})
    yield
    logger.info("Application shutting down", extra={"event": "shutdown"})


app = FastAPI(
    title="Dental Lab API",
    description="Authentication and session backend for the dental lab management platform",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Log every HTTP request with method, path, status code and duration.
    """
    start_time = time.time()

    response = await call_next(request)

    duration = (time.time() - start_time) * 1000
    client_ip = request.client.host if request.client else "unknown"

    logger.info(
        f'{client_ip} - "{request.method} {request.url.path} HTTP/1.1" {response.status_code}',
        extra={
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round(duration, 2),
            "client_ip": client_ip
        }
    )

    return response


app.add_middleware(SlowAPIMiddleware)
app.add_middleware(RequestIDMiddleware)


@app.get("/health")
@limiter.exempt
def health_check():
    logger.debug("Health check requested")
    return {"status": "Healthy"}


def error_response(status_code: int, message: str, code: str, details=None, headers=None) -> JSONResponse:
    content = {"success": False, "message": message, "code": code}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content), headers=headers)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    logger.info(
        exc.message,
        extra={"code": exc.code, "status_code": exc.status_code, "path": request.url.path}
    )
    details = exc.details if settings.is_development else None
    return error_response(exc.status_code, exc.message, exc.code, details, exc.headers)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    code = {
        status.HTTP_401_UNAUTHORIZED: "UNAUTHORIZED",
        status.HTTP_403_FORBIDDEN: "FORBIDDEN",
        status.HTTP_404_NOT_FOUND: "NOT_FOUND",
        status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
    }.get(exc.status_code, "HTTP_ERROR")
    return error_response(exc.status_code, str(exc.detail), code, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg"),
        }
        for error in exc.errors()
    ]
    logger.warning(
        "Request validation failed",
        extra={"path": request.url.path, "errors": [sanitize_log_data(error) for error in errors]}
    )
    return error_response(ValidationAppError.status_code, ValidationAppError.message, ValidationAppError.code, errors)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Log any unhandled exception with its stack trace and return a generic 500.
    Message and trace are only exposed in development.
    """
    logger.error(
        f"Unhandled exception: {str(exc)}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_type": type(exc).__name__,
            "client_request_id": get_request_id(request)
        },
        exc_info=True
    )

    if settings.is_development:
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc), "INTERNAL_SERVER_ERROR",
                              type(exc).__name__)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", "INTERNAL_SERVER_ERROR")


app.include_router(auth.router)


app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

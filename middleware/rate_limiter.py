from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from fastapi import Request, status
from fastapi.responses import JSONResponse
from core.config import settings
from middleware.auth import extract_bearer_token
from services.token_service import TokenService
from utils.exceptions import AppError
from utils.logger import get_logger

logger = get_logger(__name__)


def get_user_id(request: Request):
    """Rate-limit key: the authenticated user id, or the client address."""
    token = extract_bearer_token(request.headers.get("Authorization"))
    if token:
        try:
            return TokenService(settings).verify_access_token(token)["sub"]
        except AppError:
            pass

    return get_remote_address(request)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    logger.warning(
        "Rate limit exceeded",
        extra={"path": request.url.path, "limit": str(exc.detail)}
    )
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={
            "success": False,
            "message": "Too many requests, please try again later",
            "code": "RATE_LIMIT_EXCEEDED"
        }
    )


limiter = Limiter(
    key_func=get_user_id,
    default_limits=[settings.DEFAULT_RATE_LIMIT],
    enabled=settings.RATE_LIMIT_ENABLED
)

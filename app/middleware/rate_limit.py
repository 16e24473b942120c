"""
Rate limiting for FastAPI
Uses slowapi with a Redis backend when REDIS_URL is configured
"""
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request, status
from fastapi.responses import JSONResponse
import logging

from app.config import settings

logger = logging.getLogger(__name__)

# Stricter limits for abuse-prone endpoints
REGISTER_LIMIT = "5/hour"
LOGIN_LIMIT = "10/minute"
BOOKING_CREATE_LIMIT = "20/hour"
SUPPORT_LIMIT = "10/hour"


def get_rate_limit_key(request: Request) -> str:
    """
    Get rate limit key based on user authentication or IP address
    """
    # Set by the auth dependency
    user_id = getattr(request.state, "user_id", None)
    if user_id:
        return f"rate_limit:user:{user_id}"

    return f"rate_limit:ip:{get_remote_address(request)}"


# In-memory storage only works for single-instance deployments
storage_uri = settings.REDIS_URL or "memory://"

limiter = Limiter(
    key_func=get_rate_limit_key,
    storage_uri=storage_uri,
    default_limits=[f"{settings.RATE_LIMIT_PER_MINUTE}/minute", f"{settings.RATE_LIMIT_PER_HOUR}/hour"],
    enabled=settings.RATE_LIMIT_ENABLED,
)

if not settings.REDIS_URL:
    logger.info("Rate limiting uses in-memory storage")


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """
    Custom handler for rate limit exceeded errors
    """
    logger.warning(f"Rate limit exceeded for {get_rate_limit_key(request)}: {exc.detail}")
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={
            "success": False,
            "message": f"Too many requests. Limit: {exc.detail}",
        }
    )

"""Rate limiting for Gemini-backed routes using slowapi."""

from fastapi import Request
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address

from app.config import settings


def get_client_key(request) -> str:
    """
    Key requests by client address, honouring the first X-Forwarded-For hop
    (Cloud Run puts the real client there).
    """
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return get_remote_address(request)


# Initialize limiter
limiter = Limiter(
    key_func=get_client_key,
    default_limits=[f"{settings.rate_limit_per_hour}/hour"],
    storage_uri="memory://",  # In-memory storage
)


def get_rate_limit_exceeded_handler():
    """Get rate limit exceeded handler."""
    return _rate_limit_exceeded_handler


def rate_limit_dependency(request: Request) -> None:
    """
    Rate limit dependency for FastAPI.

    Raises:
        RateLimitExceeded: If rate limit is exceeded
    """
    # slowapi's public API has no "test" helper; `_check_request_limit`
    # raises `RateLimitExceeded` when the limit is hit.
    limiter._check_request_limit(request, endpoint_func=None)

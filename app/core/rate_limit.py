"""
Rate limiting configuration and utilities.
"""
import logging

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import REDIS_URL, RATE_LIMIT_DEFAULT

logger = logging.getLogger(__name__)


def get_rate_limit_key(request: Request) -> str:
    """
    Custom key function for rate limiting.

    Priority:
    1. User ID from the bearer token (if already authenticated)
    2. IP address (fallback)

    Returns:
        str: Unique identifier for rate limiting
    """
    user = getattr(request.state, "user", None)
    if user is not None:
        return f"user:{user.id}"

    return f"ip:{get_remote_address(request)}"


# If Redis URL is not configured, use in-memory storage (for local dev)
if REDIS_URL == "memory://":
    logger.warning("[RATE LIMIT] REDIS_URL not configured, using in-memory storage")

limiter = Limiter(
    key_func=get_rate_limit_key,
    default_limits=[RATE_LIMIT_DEFAULT],
    storage_uri=REDIS_URL,
    strategy="fixed-window",
    headers_enabled=True,
)

# Limits for unauthenticated credential endpoints
AUTH_RATE_LIMIT = "10/minute"


def get_default_rate_limit() -> str:
    """
    Limit for authenticated endpoints.

    Called by SlowAPI WITHOUT arguments on every request, after the endpoint's
    dependencies ran, so the key function already sees the resolved user.
    """
    return RATE_LIMIT_DEFAULT

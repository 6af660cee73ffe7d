"""
FastAPI dependencies for authentication and authorization.

Callers authenticate with a bearer JWT issued by /auth/login. Roles form a
closed enumeration (MEMBER, ADMIN); privilege checks go through the
User.is_admin predicate rather than comparing role strings at call sites.
"""
import logging

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.core.database import get_db
from app.core.errors import AuthenticationError, AuthorizationError, NotFoundError
from app.core.security import decode_access_token
from app.models.user import User

logger = logging.getLogger(__name__)

# Security scheme for FastAPI (no automatic 403; we raise our own 401)
security = HTTPBearer(auto_error=False)


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Resolve the authenticated caller from the Authorization header.

    Flow:
    1. Extract the bearer token
    2. Verify signature and expiry
    3. Load the user referenced by the token

    Raises:
        AuthenticationError 401: If the token is missing or invalid, or the account is inactive
        NotFoundError 404: If the token references a user that no longer exists
    """
    if not credentials:
        raise AuthenticationError("Token not provided", code="TOKEN_MISSING")

    payload = decode_access_token(credentials.credentials)
    user_id = payload["user"]["id"]

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user:
        raise NotFoundError("USER_NOT_FOUND", "User not found", extra={"user_id": user_id})

    if not user.is_active:
        raise AuthenticationError("User account is inactive", code="USER_INACTIVE")

    # Expose the caller to the rate limiter key function
    request.state.user = user
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    """
    Authorization dependency that requires admin privileges.

    Usage in admin-only endpoints:
        @router.post("/")
        async def create(user: User = Depends(require_admin)):
            ...

    Raises:
        AuthorizationError 403: If the caller is not an admin
    """
    if not user.is_admin:
        logger.info(f"[AUTH] Admin privileges required, user {user.id} is {user.role.value}")
        raise AuthorizationError("This endpoint requires admin privileges")
    return user

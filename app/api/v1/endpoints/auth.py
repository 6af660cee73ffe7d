"""
Endpoints for account registration and bearer-token authentication.

Tokens are stateless JWTs: logout only tells the client to discard its
token, and refresh issues a fresh token for the current caller.
"""
import logging

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select

from app.core.config import JWT_EXPIRY
from app.core.database import get_db
from app.core.dependencies import get_current_user
from app.core.errors import AuthenticationError, ConflictError
from app.core.rate_limit import limiter, AUTH_RATE_LIMIT, get_default_rate_limit
from app.core.security import hash_password, verify_password, create_access_token
from app.models.user import User, UserRole
from app.schemas.common import MessageResponse
from app.schemas.user import UserRegister, UserLogin, UserResponse, TokenResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def build_token_response(user: User) -> TokenResponse:
    return TokenResponse(
        token=create_access_token(user),
        expires_in=JWT_EXPIRY,
        user=UserResponse.model_validate(user),
    )


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(AUTH_RATE_LIMIT)
async def register(
    request: Request,
    response: Response,
    data: UserRegister,
    db: AsyncSession = Depends(get_db)
):
    """
    Create a member account and return a bearer token for it.

    New accounts start without a subscription.

    Raises:
        ConflictError 409: If the email is already registered (EMAIL_TAKEN)
    """
    email = data.email.lower()

    result = await db.execute(select(User.id).where(User.email == email))
    if result.scalar_one_or_none() is not None:
        raise ConflictError("EMAIL_TAKEN", "The email has already been taken.")

    user = User(
        name=data.name.strip(),
        email=email,
        password_hash=hash_password(data.password),
        role=UserRole.MEMBER,
        is_active=True,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("EMAIL_TAKEN", "The email has already been taken.")
    await db.refresh(user)

    logger.info(f"[AUTH] Registered user {user.id}")
    return build_token_response(user)


@router.post("/login", response_model=TokenResponse)
@limiter.limit(AUTH_RATE_LIMIT)
async def login(
    request: Request,
    response: Response,
    data: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """
    Exchange email and password for a bearer token.

    Raises:
        AuthenticationError 401: INVALID_CREDENTIALS or USER_INACTIVE
    """
    result = await db.execute(select(User).where(User.email == data.email.lower()))
    user = result.scalar_one_or_none()

    if not user or not verify_password(data.password, user.password_hash):
        logger.info("[AUTH] Failed login attempt")
        raise AuthenticationError("Invalid credentials", code="INVALID_CREDENTIALS")

    if not user.is_active:
        raise AuthenticationError("User account is inactive", code="USER_INACTIVE")

    logger.info(f"[AUTH] User {user.id} logged in")
    return build_token_response(user)


@router.post("/refresh", response_model=TokenResponse)
@limiter.limit(get_default_rate_limit)
async def refresh(
    request: Request,
    response: Response,
    user: User = Depends(get_current_user)
):
    """Issue a new token for the authenticated caller."""
    return build_token_response(user)


@router.post("/logout", response_model=MessageResponse)
@limiter.limit(get_default_rate_limit)
async def logout(
    request: Request,
    response: Response,
    user: User = Depends(get_current_user)
):
    logger.info(f"[AUTH] User {user.id} logged out")
    return MessageResponse(message="Successfully logged out")


@router.get("/me", response_model=UserResponse)
@limiter.limit(get_default_rate_limit)
async def me(
    request: Request,
    response: Response,
    user: User = Depends(get_current_user)
):
    """
    Get the authenticated user's profile.
    """
    return user

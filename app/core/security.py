"""
Security utilities: password hashing and JWT access tokens.
"""
import time

from jose import jwt, JWTError
from passlib.context import CryptContext

from app.core.config import JWT_SECRET, JWT_ALGORITHM, JWT_EXPIRY
from app.core.errors import AuthenticationError


# Argon2 hashing context for secure password hashing (more modern than bcrypt)
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(password: str) -> str:
    """
    Hash a password using Argon2.

    Args:
        password (str): Plain-text password to hash

    Returns:
        str: Argon2 hash of the password
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against its Argon2 hash.

    Args:
        plain_password (str): Plain-text password as provided by the user
        hashed_password (str): Argon2 hash stored in the database

    Returns:
        bool: True if the password is correct and matches the hash, False otherwise
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        # Malformed or unknown hash format
        return False


def create_access_token(user, expires_in: int = JWT_EXPIRY) -> str:
    """
    Issue a signed access token for a user.

    The payload carries the user's id, email and role under a "user" claim
    alongside the standard iat/exp claims.

    Args:
        user: User model instance
        expires_in (int): Lifetime in seconds

    Returns:
        str: Encoded JWT
    """
    issued_at = int(time.time())
    payload = {
        "sub": str(user.id),
        "iat": issued_at,
        "exp": issued_at + expires_in,
        "user": {
            "id": user.id,
            "email": user.email,
            "role": user.role.value,
        },
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    Decode and validate an access token.

    Args:
        token (str): Encoded JWT from the Authorization header

    Returns:
        dict: Token payload

    Raises:
        AuthenticationError: If the token is invalid, expired or malformed
    """
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except JWTError as e:
        raise AuthenticationError(f"Invalid authentication token: {e}", code="INVALID_TOKEN")

    user_claim = payload.get("user")
    if not isinstance(user_claim, dict) or "id" not in user_claim:
        raise AuthenticationError("Invalid token payload: missing user", code="INVALID_TOKEN")

    return payload

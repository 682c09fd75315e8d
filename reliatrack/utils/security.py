"""
Security utilities for authentication and invitation tokens.

Provides password hashing, JWT handling and random token generation.
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from reliatrack.config.settings import settings

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against its hash.

    Args:
        plain_password: Plain text password
        hashed_password: Hashed password to compare against

    Returns:
        True if password matches
    """
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt."""
    return pwd_context.hash(password)


def create_access_token(
    user_id: str,
    email: str,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a signed JWT access token for a user.

    Args:
        user_id: Subject of the token
        email: User email, carried for logging convenience
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta
        or timedelta(minutes=settings.auth.access_token_expire_minutes)
    )
    to_encode: dict[str, Any] = {
        "sub": user_id,
        "email": email,
        "exp": expire,
        "type": "access",
    }
    return jwt.encode(
        to_encode,
        settings.auth.secret.get_secret_value(),
        algorithm=settings.auth.algorithm,
    )


def decode_token(token: str) -> dict[str, Any] | None:
    """
    Decode and validate a JWT token.

    Returns:
        Decoded payload or None if invalid or expired
    """
    try:
        payload = jwt.decode(
            token,
            settings.auth.secret.get_secret_value(),
            algorithms=[settings.auth.algorithm],
        )
    except JWTError:
        return None
    if payload.get("type") != "access":
        return None
    return payload


def generate_invitation_token() -> str:
    """64 hex characters from 32 random bytes."""
    return secrets.token_hex(32)


def mask_email(email: str) -> str:
    """Mask the local part of an email for log output."""
    local, _, domain = email.partition("@")
    if not domain:
        return "*" * len(email)
    return f"{local[:2]}{'*' * max(len(local) - 2, 1)}@{domain}"

"""
Authentication service.

Handles signup, login and token-to-user resolution.
"""

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from reliatrack.config.settings import settings
from reliatrack.models.user import SubscriptionTier, User
from reliatrack.services.exceptions import ValidationFailed
from reliatrack.utils.logging import ServiceLogger, audit_logger
from reliatrack.utils.security import (
    create_access_token,
    decode_token,
    get_password_hash,
    mask_email,
    verify_password,
)


class AuthService:
    """Service for account creation and authentication."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.logger = ServiceLogger("auth")

    async def get_user_by_email(self, email: str) -> User | None:
        result = await self.session.execute(
            select(User).where(func.lower(User.email) == email.lower())
        )
        return result.scalar_one_or_none()

    async def signup(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        company: str | None = None,
        phone: str | None = None,
    ) -> dict[str, Any]:
        """
        Create an account on the basic tier and return a token for it.

        Raises:
            ValidationFailed: If the email is already registered
        """
        self.logger.log_operation_start("signup", email=mask_email(email))

        if await self.get_user_by_email(email):
            raise ValidationFailed.for_field("email", "Email is already registered")

        user = User(
            email=email.lower(),
            password_hash=get_password_hash(password),
            first_name=first_name,
            last_name=last_name,
            company=company,
            phone=phone,
            subscription_tier=SubscriptionTier.BASIC,
            ai_credits=settings.default_ai_credits,
        )
        self.session.add(user)
        await self.session.flush()

        audit_logger.log_action(
            action="signup",
            user_id=user.id,
            organization_id=None,
            resource_type="user",
            resource_id=user.id,
        )
        self.logger.log_operation_complete("signup", user_id=user.id)

        return {"token": create_access_token(user.id, user.email), "user": user}

    async def authenticate(self, email: str, password: str) -> dict[str, Any] | None:
        """
        Check credentials.

        Returns:
            Dict with token and user, or None if credentials are wrong
        """
        user = await self.get_user_by_email(email)

        if not user or not verify_password(password, user.password_hash):
            audit_logger.log_login(email, success=False, reason="invalid_credentials")
            return None

        if not user.is_active:
            audit_logger.log_login(email, success=False, user_id=user.id, reason="inactive")
            return None

        audit_logger.log_login(email, success=True, user_id=user.id)
        return {"token": create_access_token(user.id, user.email), "user": user}

    async def resolve_token(self, token: str) -> User | None:
        """Map a bearer token to an active user."""
        payload = decode_token(token)
        if not payload or not payload.get("sub"):
            return None
        user = await self.session.get(User, payload["sub"])
        if user is None or not user.is_active:
            return None
        return user

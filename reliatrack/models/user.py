"""
User model with subscription and organization membership.
"""

from enum import Enum

from sqlalchemy import Boolean, Enum as SQLEnum, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from reliatrack.database.base import Base


class SubscriptionTier(str, Enum):
    """Paid plans. Basic is capped on asset count."""
    BASIC = "basic"
    PROFESSIONAL = "professional"
    AI_POWERED = "ai-powered"


class MemberRole(str, Enum):
    """Role of a user inside an organization."""
    OWNER = "owner"
    TECHNICIAN = "technician"


class User(Base):
    """An account. Optionally a member of one organization."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    company: Mapped[str | None] = mapped_column(String(255))
    phone: Mapped[str | None] = mapped_column(String(50))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # Organization membership
    organization_id: Mapped[str | None] = mapped_column(
        Uuid(as_uuid=False, native_uuid=False),
        ForeignKey("organizations.id", ondelete="SET NULL"),
        index=True,
    )
    role: Mapped[MemberRole | None] = mapped_column(SQLEnum(MemberRole))

    # Billing
    subscription_tier: Mapped[SubscriptionTier] = mapped_column(
        SQLEnum(SubscriptionTier),
        default=SubscriptionTier.BASIC,
        nullable=False,
    )
    stripe_customer_id: Mapped[str | None] = mapped_column(String(255), index=True)
    stripe_subscription_id: Mapped[str | None] = mapped_column(String(255))
    trial_ending: Mapped[bool] = mapped_column(Boolean, default=False)
    ai_credits: Mapped[int] = mapped_column(Integer, default=0)

    # Notification preferences
    notify_email: Mapped[bool] = mapped_column(Boolean, default=True)
    notify_sms: Mapped[bool] = mapped_column(Boolean, default=False)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_owner(self) -> bool:
        return self.organization_id is not None and self.role == MemberRole.OWNER

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"

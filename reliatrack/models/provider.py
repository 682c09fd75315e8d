"""
Service provider directory model.
"""

from enum import Enum

from sqlalchemy import Boolean, Enum as SQLEnum, Float, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from reliatrack.database.base import Base


class ServiceCategory(str, Enum):
    MECHANICS = "mechanics"
    WELDERS = "welders"
    ENGINEERS = "engineers"
    ELECTRICAL = "electrical"
    HYDRAULICS = "hydraulics"
    OTHER = "other"


class ProviderTier(str, Enum):
    """Paid directory listing levels."""
    NONE = "none"
    VERIFIED = "verified"
    CONTACT = "contact"
    PROMOTED = "promoted"


class Provider(Base):
    """A maintenance contractor with a service area."""

    __tablename__ = "providers"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    service_type: Mapped[ServiceCategory] = mapped_column(
        SQLEnum(ServiceCategory),
        default=ServiceCategory.OTHER,
        nullable=False,
        index=True,
    )
    description: Mapped[str | None] = mapped_column(Text)
    phone: Mapped[str | None] = mapped_column(String(50))
    email: Mapped[str | None] = mapped_column(String(255))
    website: Mapped[str | None] = mapped_column(String(500))
    address: Mapped[str | None] = mapped_column(String(500))
    city: Mapped[str | None] = mapped_column(String(100))
    state: Mapped[str | None] = mapped_column(String(100))

    # Location and service area (miles)
    lat: Mapped[float] = mapped_column(Float, nullable=False)
    lng: Mapped[float] = mapped_column(Float, nullable=False)
    radius: Mapped[float] = mapped_column(Float, default=50.0, nullable=False)

    # Listing
    place_id: Mapped[str | None] = mapped_column(String(255), unique=True)
    verified: Mapped[bool] = mapped_column(Boolean, default=False)
    business_license: Mapped[str | None] = mapped_column(String(255))
    rating: Mapped[float | None] = mapped_column(Float)
    owner_id: Mapped[str | None] = mapped_column(
        Uuid(as_uuid=False, native_uuid=False),
        ForeignKey("users.id", ondelete="SET NULL"),
    )

    # Billing
    subscription_tier: Mapped[ProviderTier] = mapped_column(
        SQLEnum(ProviderTier),
        default=ProviderTier.NONE,
        nullable=False,
    )
    stripe_customer_id: Mapped[str | None] = mapped_column(String(255))
    stripe_subscription_id: Mapped[str | None] = mapped_column(String(255))

"""
Asset model - represents a piece of equipment under maintenance.
"""

from datetime import date
from enum import Enum

from sqlalchemy import Date, Enum as SQLEnum, Float, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from reliatrack.database.base import Base


class AssetStatus(str, Enum):
    OPERATIONAL = "operational"
    MAINTENANCE = "maintenance"
    DOWN = "down"
    RETIRED = "retired"


class AssetCondition(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class Asset(Base):
    """
    Physical asset owned by a user, optionally shared with an organization.

    FMEA, RCA, RCM entries and maintenance tasks live in their own tables and
    reference the asset by ``asset_id``.
    """

    __tablename__ = "assets"

    user_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False, native_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    organization_id: Mapped[str | None] = mapped_column(
        Uuid(as_uuid=False, native_uuid=False),
        ForeignKey("organizations.id", ondelete="SET NULL"),
        index=True,
    )

    # Identification
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    manufacturer: Mapped[str] = mapped_column(String(255), nullable=False)
    model: Mapped[str] = mapped_column(String(255), nullable=False)
    serial_number: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    year_manufactured: Mapped[int | None] = mapped_column(Integer)

    # State
    status: Mapped[AssetStatus] = mapped_column(
        SQLEnum(AssetStatus),
        default=AssetStatus.OPERATIONAL,
        nullable=False,
    )
    condition: Mapped[AssetCondition] = mapped_column(
        SQLEnum(AssetCondition),
        default=AssetCondition.GOOD,
        nullable=False,
    )

    # Financials
    purchase_date: Mapped[date | None] = mapped_column(Date)
    purchase_price: Mapped[float | None] = mapped_column(Float)
    warranty_expiry: Mapped[date | None] = mapped_column(Date)

    # Service schedule
    last_service_date: Mapped[date | None] = mapped_column(Date)
    next_service_date: Mapped[date | None] = mapped_column(Date)
    next_due_date: Mapped[date | None] = mapped_column(Date)
    maintenance_interval_days: Mapped[int | None] = mapped_column(Integer)
    operating_hours: Mapped[float | None] = mapped_column(Float)

    notes: Mapped[str | None] = mapped_column(Text)

    def age(self, today: date | None = None) -> int | None:
        """Whole years since manufacture."""
        if self.year_manufactured is None:
            return None
        return (today or date.today()).year - self.year_manufactured

    def days_until_service(self, today: date | None = None) -> int | None:
        """Days until the next service, negative when late."""
        target = self.next_service_date or self.next_due_date
        if target is None:
            return None
        return (target - (today or date.today())).days

    def __repr__(self) -> str:
        return f"<Asset(id={self.id}, name={self.name}, serial={self.serial_number})>"

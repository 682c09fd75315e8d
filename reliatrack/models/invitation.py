"""
Team invitation model.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import Enum as SQLEnum, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from reliatrack.database.base import Base, utcnow
from reliatrack.models.user import MemberRole


class InvitationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class TeamInvitation(Base):
    """Single-use, expiring invitation to join an organization."""

    __tablename__ = "team_invitations"

    organization_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False, native_uuid=False),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    email: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    role: Mapped[MemberRole] = mapped_column(
        SQLEnum(MemberRole),
        default=MemberRole.TECHNICIAN,
        nullable=False,
    )
    token: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    invited_by: Mapped[str | None] = mapped_column(
        Uuid(as_uuid=False, native_uuid=False),
        ForeignKey("users.id", ondelete="SET NULL"),
    )
    status: Mapped[InvitationStatus] = mapped_column(
        SQLEnum(InvitationStatus),
        default=InvitationStatus.PENDING,
        nullable=False,
    )
    expires_at: Mapped[datetime] = mapped_column(nullable=False)
    accepted_at: Mapped[datetime | None] = mapped_column()
    accepted_by: Mapped[str | None] = mapped_column(Uuid(as_uuid=False, native_uuid=False))

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or utcnow()) >= self.expires_at

    def is_usable(self, now: datetime | None = None) -> bool:
        return self.status == InvitationStatus.PENDING and not self.is_expired(now)

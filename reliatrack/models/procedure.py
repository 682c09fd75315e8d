"""
Maintenance procedure model (step-by-step work instructions).
"""

from enum import Enum

from sqlalchemy import Boolean, Enum as SQLEnum, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from reliatrack.database.base import Base, JSONType


class ProcedureType(str, Enum):
    STANDARD = "standard"
    INSPECTION = "inspection"
    REPAIR = "repair"
    CUSTOM = "custom"


class ProcedurePriority(str, Enum):
    URGENT = "urgent"
    IMPORTANT = "important"


class Procedure(Base):
    """
    Written procedure for an asset.

    Visible to the author, and to the whole organization when
    ``organization_id`` is set.
    """

    __tablename__ = "procedures"

    asset_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False, native_uuid=False),
        ForeignKey("assets.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    organization_id: Mapped[str | None] = mapped_column(
        Uuid(as_uuid=False, native_uuid=False),
        ForeignKey("organizations.id", ondelete="SET NULL"),
        index=True,
    )
    created_by: Mapped[str] = mapped_column(
        Uuid(as_uuid=False, native_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[ProcedureType] = mapped_column(
        SQLEnum(ProcedureType),
        default=ProcedureType.STANDARD,
        nullable=False,
    )
    priority: Mapped[ProcedurePriority] = mapped_column(
        SQLEnum(ProcedurePriority),
        default=ProcedurePriority.IMPORTANT,
        nullable=False,
    )
    estimated_time: Mapped[str | None] = mapped_column(String(100))
    interval: Mapped[str | None] = mapped_column(String(100))
    component: Mapped[str | None] = mapped_column(String(255))

    rpn_triggered: Mapped[bool] = mapped_column(Boolean, default=False)
    rpn_score: Mapped[int | None] = mapped_column(Integer)

    tools: Mapped[list] = mapped_column(JSONType, default=list)
    materials: Mapped[list] = mapped_column(JSONType, default=list)
    people: Mapped[list] = mapped_column(JSONType, default=list)
    safety: Mapped[list] = mapped_column(JSONType, default=list)
    # Ordered list of {"step", "title", "instruction", "expanded_details"}
    steps: Mapped[list] = mapped_column(JSONType, default=list)

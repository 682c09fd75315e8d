"""
Reliability analysis records attached to assets: FMEA, RCA and RCM.
"""

from datetime import date
from enum import Enum

from sqlalchemy import Date, Enum as SQLEnum, Float, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from reliatrack.database.base import Base, JSONType


class AnalysisStatus(str, Enum):
    """Workflow state shared by FMEA and RCA entries."""
    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    CLOSED = "Closed"


class Criticality(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


def _asset_fk() -> Mapped[str]:
    return mapped_column(
        Uuid(as_uuid=False, native_uuid=False),
        ForeignKey("assets.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )


def _author_fk() -> Mapped[str | None]:
    return mapped_column(
        Uuid(as_uuid=False, native_uuid=False),
        ForeignKey("users.id", ondelete="SET NULL"),
    )


class FMEAEntry(Base):
    """
    Failure Mode and Effects Analysis line item.

    ``rpn`` is always severity * occurrence * detection; it is stored so lists
    can be sorted by risk in SQL.
    """

    __tablename__ = "fmea_entries"

    asset_id: Mapped[str] = _asset_fk()
    created_by: Mapped[str | None] = _author_fk()

    component: Mapped[str] = mapped_column(String(255), nullable=False)
    failure_mode: Mapped[str] = mapped_column(String(500), nullable=False)
    effects: Mapped[str] = mapped_column(Text, nullable=False)
    causes: Mapped[str | None] = mapped_column(Text)
    controls: Mapped[str | None] = mapped_column(Text)

    severity: Mapped[int] = mapped_column(Integer, nullable=False)
    occurrence: Mapped[int] = mapped_column(Integer, nullable=False)
    detection: Mapped[int] = mapped_column(Integer, nullable=False)
    rpn: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    actions: Mapped[str | None] = mapped_column(Text)
    responsible: Mapped[str | None] = mapped_column(String(255))
    due_date: Mapped[date | None] = mapped_column(Date)
    status: Mapped[AnalysisStatus] = mapped_column(
        SQLEnum(AnalysisStatus),
        default=AnalysisStatus.OPEN,
        nullable=False,
    )


class RCAEntry(Base):
    """Root Cause Analysis of a failure event."""

    __tablename__ = "rca_entries"

    asset_id: Mapped[str] = _asset_fk()
    created_by: Mapped[str | None] = _author_fk()

    failure_date: Mapped[date | None] = mapped_column(Date)
    problem_description: Mapped[str] = mapped_column(Text, nullable=False)
    immediate_actions: Mapped[str | None] = mapped_column(Text)
    root_causes: Mapped[str | None] = mapped_column(Text)
    corrective_actions: Mapped[str | None] = mapped_column(Text)
    preventive_actions: Mapped[str | None] = mapped_column(Text)
    responsible: Mapped[str | None] = mapped_column(String(255))
    cost: Mapped[float] = mapped_column(Float, default=0.0)
    status: Mapped[AnalysisStatus] = mapped_column(
        SQLEnum(AnalysisStatus),
        default=AnalysisStatus.OPEN,
        nullable=False,
    )

    # Ordered list of {"why": ..., "answer": ...}
    five_whys: Mapped[list] = mapped_column(JSONType, default=list)
    # Category name -> list of causes
    fishbone_diagram: Mapped[dict] = mapped_column(JSONType, default=dict)


class RCMEntry(Base):
    """Reliability Centered Maintenance task recommendation."""

    __tablename__ = "rcm_entries"

    asset_id: Mapped[str] = _asset_fk()
    created_by: Mapped[str | None] = _author_fk()

    task: Mapped[str] = mapped_column(String(500), nullable=False)
    interval_days: Mapped[int] = mapped_column(Integer, nullable=False)
    criticality: Mapped[Criticality] = mapped_column(SQLEnum(Criticality), nullable=False)

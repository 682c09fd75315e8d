"""
Maintenance task model.
"""

from datetime import date, datetime
from enum import Enum

from sqlalchemy import Date, Enum as SQLEnum, Float, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from reliatrack.database.base import Base


class TaskType(str, Enum):
    PREVENTIVE = "preventive"
    PREDICTIVE = "predictive"
    CONDITION_BASED = "condition-based"
    CORRECTIVE = "corrective"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class TaskStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


# Statuses that turn into "overdue" once next_due has passed
OPEN_STATUSES = (TaskStatus.SCHEDULED, TaskStatus.IN_PROGRESS)


class MaintenanceTask(Base):
    """Scheduled or completed maintenance work on an asset."""

    __tablename__ = "maintenance_tasks"

    asset_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False, native_uuid=False),
        ForeignKey("assets.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    created_by: Mapped[str | None] = mapped_column(
        Uuid(as_uuid=False, native_uuid=False),
        ForeignKey("users.id", ondelete="SET NULL"),
    )

    task_type: Mapped[TaskType] = mapped_column(
        SQLEnum(TaskType),
        default=TaskType.PREVENTIVE,
        nullable=False,
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    frequency: Mapped[str | None] = mapped_column(String(100))
    hours_interval: Mapped[int | None] = mapped_column(Integer)
    last_completed: Mapped[date | None] = mapped_column(Date)
    next_due: Mapped[date | None] = mapped_column(Date, index=True)
    estimated_duration: Mapped[float | None] = mapped_column(Float)

    responsible: Mapped[str | None] = mapped_column(String(255))
    responsible_email: Mapped[str | None] = mapped_column(String(255))
    responsible_phone: Mapped[str | None] = mapped_column(String(50))

    priority: Mapped[TaskPriority] = mapped_column(
        SQLEnum(TaskPriority),
        default=TaskPriority.MEDIUM,
        nullable=False,
    )
    status: Mapped[TaskStatus] = mapped_column(
        SQLEnum(TaskStatus),
        default=TaskStatus.SCHEDULED,
        nullable=False,
    )

    # Completion
    completed_by: Mapped[str | None] = mapped_column(String(255))
    completion_notes: Mapped[str | None] = mapped_column(Text)
    completed_at: Mapped[datetime | None] = mapped_column()

    def effective_status(self, today: date | None = None) -> TaskStatus:
        """
        Status as reported to clients.

        Open tasks past their due date read as overdue; the stored value is
        left untouched.
        """
        today = today or date.today()
        if self.status in OPEN_STATUSES and self.next_due is not None and self.next_due < today:
            return TaskStatus.OVERDUE
        return self.status

    def overdue_on(self, today: date | None = None) -> bool:
        return self.effective_status(today) == TaskStatus.OVERDUE

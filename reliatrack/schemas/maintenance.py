"""
Maintenance task schemas.
"""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from reliatrack.models.maintenance import MaintenanceTask, TaskPriority, TaskStatus, TaskType
from reliatrack.schemas import reject_null


class TaskFields(BaseModel):
    task_type: TaskType = TaskType.PREVENTIVE
    description: str = Field(..., min_length=1)
    frequency: str | None = None
    hours_interval: int | None = Field(None, ge=1)
    last_completed: date | None = None
    next_due: date | None = None
    estimated_duration: float | None = Field(None, ge=0, description="Hours")
    responsible: str | None = None
    responsible_email: EmailStr | None = None
    responsible_phone: str | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.SCHEDULED


class TaskCreate(TaskFields):
    """Task attached to an asset given in the URL."""
    pass


class StandaloneTaskCreate(TaskFields):
    asset_id: str


class TaskUpdate(BaseModel):
    task_type: TaskType | None = None
    description: str | None = Field(None, min_length=1)
    frequency: str | None = None
    hours_interval: int | None = Field(None, ge=1)
    last_completed: date | None = None
    next_due: date | None = None
    estimated_duration: float | None = Field(None, ge=0)
    responsible: str | None = None
    responsible_email: EmailStr | None = None
    responsible_phone: str | None = None
    priority: TaskPriority | None = None
    status: TaskStatus | None = None

    @field_validator("task_type", "description", "priority", "status", mode="before")
    @classmethod
    def required_not_null(cls, value: Any) -> Any:
        return reject_null(value)


class TaskComplete(BaseModel):
    completed_by: str | None = None
    completion_notes: str | None = None


class TaskResponse(TaskFields):
    model_config = ConfigDict(from_attributes=True)

    id: str
    asset_id: str
    asset_name: str | None = None
    responsible_email: str | None = None
    completed_by: str | None = None
    completion_notes: str | None = None
    completed_at: datetime | None = None
    is_overdue: bool = False
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_task(
        cls,
        task: MaintenanceTask,
        asset_name: str | None = None,
        today: date | None = None,
    ) -> "TaskResponse":
        response = cls.model_validate(task)
        # Report the read-time status, never the stored one
        response.status = task.effective_status(today)
        response.is_overdue = response.status == TaskStatus.OVERDUE
        response.asset_name = asset_name
        return response

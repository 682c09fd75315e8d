"""
Maintenance scheduling routes.
"""

from fastapi import APIRouter, Query, status

from reliatrack.api.dependencies import CurrentUserDep, DatabaseDep
from reliatrack.models.maintenance import TaskPriority, TaskStatus, TaskType
from reliatrack.schemas.maintenance import (
    StandaloneTaskCreate,
    TaskComplete,
    TaskResponse,
    TaskUpdate,
)
from reliatrack.services.maintenance_service import MaintenanceService

router = APIRouter()


@router.get("/tasks", response_model=list[TaskResponse])
async def list_tasks(
    current_user: CurrentUserDep,
    db: DatabaseDep,
    asset_id: str | None = Query(None),
    task_status: TaskStatus | None = Query(None, alias="status"),
    priority: TaskPriority | None = Query(None),
    task_type: TaskType | None = Query(None),
):
    """
    List tasks in scope ordered by due date.

    ``status=overdue`` matches open tasks whose due date has passed.
    """
    rows = await MaintenanceService(db).list_tasks(
        current_user.id,
        asset_id=asset_id,
        status=task_status,
        priority=priority,
        task_type=task_type,
    )
    return [TaskResponse.from_task(task, asset_name) for task, asset_name in rows]


@router.get("/tasks/due-soon", response_model=list[TaskResponse])
async def due_soon(
    current_user: CurrentUserDep,
    db: DatabaseDep,
    days: int = Query(7, ge=1, le=90),
):
    rows = await MaintenanceService(db).due_soon(current_user.id, days=days)
    return [TaskResponse.from_task(task, asset_name) for task, asset_name in rows]


@router.get("/dashboard")
async def maintenance_dashboard(current_user: CurrentUserDep, db: DatabaseDep):
    return await MaintenanceService(db).dashboard(current_user.id)


@router.get("/tasks/{task_id}", response_model=TaskResponse)
async def get_task(task_id: str, current_user: CurrentUserDep, db: DatabaseDep):
    task, asset_name = await MaintenanceService(db).get_task(current_user.id, task_id)
    return TaskResponse.from_task(task, asset_name)


@router.post("/tasks", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(body: StandaloneTaskCreate, current_user: CurrentUserDep, db: DatabaseDep):
    task = await MaintenanceService(db).create_task(current_user.id, body.asset_id, body)
    return TaskResponse.from_task(task)


@router.put("/tasks/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: str,
    body: TaskUpdate,
    current_user: CurrentUserDep,
    db: DatabaseDep,
):
    task = await MaintenanceService(db).update_task(current_user.id, task_id, body)
    return TaskResponse.from_task(task)


@router.put("/tasks/{task_id}/complete", response_model=TaskResponse)
async def complete_task(
    task_id: str,
    body: TaskComplete,
    current_user: CurrentUserDep,
    db: DatabaseDep,
):
    task = await MaintenanceService(db).complete_task(current_user.id, task_id, body)
    return TaskResponse.from_task(task)


@router.delete("/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(task_id: str, current_user: CurrentUserDep, db: DatabaseDep):
    await MaintenanceService(db).delete_task(current_user.id, task_id)

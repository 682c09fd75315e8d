"""
Maintenance tasks nested under assets.
"""

from fastapi import APIRouter, status

from reliatrack.api.dependencies import CurrentUserDep, DatabaseDep
from reliatrack.schemas.maintenance import TaskCreate, TaskResponse, TaskUpdate
from reliatrack.services.maintenance_service import MaintenanceService

router = APIRouter()


# Declared before /{asset_id}/tasks so "all" is not taken for an id
@router.get("/all/tasks", response_model=list[TaskResponse])
async def list_all_tasks(current_user: CurrentUserDep, db: DatabaseDep):
    """Every task in scope, overdue first, then by due date."""
    rows = await MaintenanceService(db).all_tasks(current_user.id)
    return [TaskResponse.from_task(task, asset_name) for task, asset_name in rows]


@router.get("/{asset_id}/tasks", response_model=list[TaskResponse])
async def list_asset_tasks(asset_id: str, current_user: CurrentUserDep, db: DatabaseDep):
    tasks = await MaintenanceService(db).asset_tasks(current_user.id, asset_id)
    return [TaskResponse.from_task(task) for task in tasks]


@router.post(
    "/{asset_id}/tasks",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_asset_task(
    asset_id: str,
    body: TaskCreate,
    current_user: CurrentUserDep,
    db: DatabaseDep,
):
    task = await MaintenanceService(db).create_task(current_user.id, asset_id, body)
    return TaskResponse.from_task(task)


@router.put("/{asset_id}/tasks/{task_id}", response_model=TaskResponse)
async def update_asset_task(
    asset_id: str,
    task_id: str,
    body: TaskUpdate,
    current_user: CurrentUserDep,
    db: DatabaseDep,
):
    task = await MaintenanceService(db).update_asset_task(current_user.id, asset_id, task_id, body)
    return TaskResponse.from_task(task)


@router.delete("/{asset_id}/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_asset_task(
    asset_id: str,
    task_id: str,
    current_user: CurrentUserDep,
    db: DatabaseDep,
):
    await MaintenanceService(db).delete_asset_task(current_user.id, asset_id, task_id)

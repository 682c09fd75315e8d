"""
Maintenance task service.

Task status is stored as entered; "overdue" is derived at read time from
``next_due`` (see ``MaintenanceTask.effective_status``).
"""

from collections import Counter
from datetime import date, datetime, timedelta

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from reliatrack.database.base import utcnow
from reliatrack.models.asset import Asset
from reliatrack.models.maintenance import (
    OPEN_STATUSES,
    MaintenanceTask,
    TaskPriority,
    TaskStatus,
    TaskType,
)
from reliatrack.schemas.maintenance import TaskComplete, TaskFields, TaskUpdate
from reliatrack.services.exceptions import NotFoundError
from reliatrack.services.permissions import get_scoped_asset, scoped_asset_ids
from reliatrack.utils.logging import ServiceLogger

DUE_SOON_DAYS = 7
RECENT_COMPLETION_DAYS = 30


def sort_overdue_first(
    rows: list[tuple[MaintenanceTask, str]],
    today: date,
) -> list[tuple[MaintenanceTask, str]]:
    """Overdue first, then earliest due date, then newest created."""
    def key(row):
        task = row[0]
        return (
            not task.overdue_on(today),
            task.next_due or date.max,
            -task.created_at.timestamp(),
        )
    return sorted(rows, key=key)


class MaintenanceService:
    """Service for maintenance scheduling."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.logger = ServiceLogger("maintenance")

    async def _scoped_query(self, user_id: str) -> Select:
        asset_ids = await scoped_asset_ids(self.session, user_id)
        return (
            select(MaintenanceTask, Asset.name)
            .join(Asset, Asset.id == MaintenanceTask.asset_id)
            .where(MaintenanceTask.asset_id.in_(asset_ids))
        )

    async def list_tasks(
        self,
        user_id: str,
        asset_id: str | None = None,
        status: TaskStatus | None = None,
        priority: TaskPriority | None = None,
        task_type: TaskType | None = None,
        today: date | None = None,
    ) -> list[tuple[MaintenanceTask, str]]:
        """
        Tasks in scope, ordered by due date.

        The status filter applies to the effective status, so asking for
        ``overdue`` returns open tasks whose due date has passed.
        """
        today = today or date.today()
        query = await self._scoped_query(user_id)
        if asset_id:
            query = query.where(MaintenanceTask.asset_id == asset_id)
        if priority:
            query = query.where(MaintenanceTask.priority == priority)
        if task_type:
            query = query.where(MaintenanceTask.task_type == task_type)

        rows = (await self.session.execute(query)).all()
        if status:
            rows = [row for row in rows if row[0].effective_status(today) == status]
        return sorted(rows, key=lambda row: (row[0].next_due or date.max, row[0].created_at))

    async def get_task(self, user_id: str, task_id: str) -> tuple[MaintenanceTask, str]:
        query = await self._scoped_query(user_id)
        row = (await self.session.execute(query.where(MaintenanceTask.id == task_id))).first()
        if row is None:
            raise NotFoundError("Maintenance task not found")
        return row[0], row[1]

    async def create_task(self, user_id: str, asset_id: str, data: TaskFields) -> MaintenanceTask:
        asset = await get_scoped_asset(self.session, user_id, asset_id)
        values = data.model_dump(exclude={"asset_id"})
        task = MaintenanceTask(asset_id=asset.id, created_by=user_id, **values)
        self.session.add(task)
        await self.session.flush()

        self.logger.log_operation_complete(
            "create_task", user_id=user_id, asset_id=asset.id, task_id=task.id
        )
        return task

    async def update_task(self, user_id: str, task_id: str, data: TaskUpdate) -> MaintenanceTask:
        task, _ = await self.get_task(user_id, task_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(task, field, value)
        await self.session.flush()
        return task

    async def complete_task(self, user_id: str, task_id: str, data: TaskComplete) -> MaintenanceTask:
        task, _ = await self.get_task(user_id, task_id)
        now = utcnow()
        task.status = TaskStatus.COMPLETED
        task.completed_at = now
        task.last_completed = now.date()
        task.completed_by = data.completed_by
        task.completion_notes = data.completion_notes
        await self.session.flush()

        self.logger.log_operation_complete("complete_task", user_id=user_id, task_id=task.id)
        return task

    async def delete_task(self, user_id: str, task_id: str) -> None:
        task, _ = await self.get_task(user_id, task_id)
        await self.session.delete(task)
        await self.session.flush()

    async def asset_tasks(self, user_id: str, asset_id: str) -> list[MaintenanceTask]:
        asset = await get_scoped_asset(self.session, user_id, asset_id)
        result = await self.session.execute(
            select(MaintenanceTask)
            .where(MaintenanceTask.asset_id == asset.id)
            .order_by(MaintenanceTask.created_at.desc())
        )
        return list(result.scalars().all())

    async def update_asset_task(
        self, user_id: str, asset_id: str, task_id: str, data: TaskUpdate
    ) -> MaintenanceTask:
        task, _ = await self.get_task(user_id, task_id)
        if task.asset_id != asset_id:
            raise NotFoundError("Maintenance task not found")
        return await self.update_task(user_id, task_id, data)

    async def delete_asset_task(self, user_id: str, asset_id: str, task_id: str) -> None:
        task, _ = await self.get_task(user_id, task_id)
        if task.asset_id != asset_id:
            raise NotFoundError("Maintenance task not found")
        await self.session.delete(task)
        await self.session.flush()

    async def all_tasks(self, user_id: str, today: date | None = None) -> list[tuple[MaintenanceTask, str]]:
        today = today or date.today()
        rows = (await self.session.execute(await self._scoped_query(user_id))).all()
        return sort_overdue_first(list(rows), today)

    async def due_soon(
        self,
        user_id: str,
        days: int = DUE_SOON_DAYS,
        today: date | None = None,
    ) -> list[tuple[MaintenanceTask, str]]:
        """Open tasks due between today and ``days`` from now."""
        today = today or date.today()
        horizon = today + timedelta(days=days)
        query = (await self._scoped_query(user_id)).where(
            MaintenanceTask.status.in_(OPEN_STATUSES),
            MaintenanceTask.next_due.is_not(None),
            MaintenanceTask.next_due >= today,
            MaintenanceTask.next_due <= horizon,
        )
        rows = (await self.session.execute(query.order_by(MaintenanceTask.next_due))).all()
        return list(rows)

    async def dashboard(self, user_id: str, today: date | None = None) -> dict:
        today = today or date.today()
        rows = (await self.session.execute(await self._scoped_query(user_id))).all()
        tasks = [task for task, _ in rows]

        by_status = Counter(task.effective_status(today).value for task in tasks)
        week_end = today + timedelta(days=DUE_SOON_DAYS)
        recent_cutoff = datetime.combine(
            today - timedelta(days=RECENT_COMPLETION_DAYS), datetime.min.time()
        )

        return {
            "total_tasks": len(tasks),
            "by_status": {status.value: by_status.get(status.value, 0) for status in TaskStatus},
            "overdue": by_status.get(TaskStatus.OVERDUE.value, 0),
            "due_this_week": sum(
                1
                for task in tasks
                if task.status in OPEN_STATUSES
                and task.next_due is not None
                and today <= task.next_due <= week_end
            ),
            "completed_last_30_days": sum(
                1
                for task in tasks
                if task.completed_at is not None and task.completed_at >= recent_cutoff
            ),
            "by_priority": dict(Counter(task.priority.value for task in tasks)),
        }

"""
Dashboard aggregation over the caller's asset scope.
"""

from collections import Counter
from datetime import date, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from reliatrack.models.analysis import FMEAEntry, RCAEntry
from reliatrack.models.asset import Asset, AssetCondition, AssetStatus
from reliatrack.models.maintenance import OPEN_STATUSES, MaintenanceTask, TaskStatus
from reliatrack.services.permissions import build_asset_query
from reliatrack.services.risk import is_high_risk

UPCOMING_DAYS = 7


class DashboardService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _load(self, user_id: str):
        assets = list(
            (await self.session.execute(await build_asset_query(self.session, user_id)))
            .scalars()
            .all()
        )
        ids = [asset.id for asset in assets]
        if not ids:
            return assets, [], [], []

        tasks = list(
            (await self.session.execute(
                select(MaintenanceTask).where(MaintenanceTask.asset_id.in_(ids))
            )).scalars().all()
        )
        fmea = list(
            (await self.session.execute(
                select(FMEAEntry).where(FMEAEntry.asset_id.in_(ids))
            )).scalars().all()
        )
        rca = list(
            (await self.session.execute(
                select(RCAEntry).where(RCAEntry.asset_id.in_(ids))
            )).scalars().all()
        )
        return assets, tasks, fmea, rca

    async def overview(self, user_id: str, today: date | None = None) -> dict:
        """Overdue and upcoming work plus condition/status distributions."""
        today = today or date.today()
        horizon = today + timedelta(days=UPCOMING_DAYS)
        assets, tasks, _, _ = await self._load(user_id)
        names = {asset.id: asset.name for asset in assets}

        upcoming = sorted(
            (
                task for task in tasks
                if task.status in OPEN_STATUSES
                and task.next_due is not None
                and today <= task.next_due <= horizon
            ),
            key=lambda task: task.next_due,
        )
        conditions = Counter(asset.condition.value for asset in assets)
        statuses = Counter(asset.status.value for asset in assets)

        return {
            "total_assets": len(assets),
            "overdue_tasks": sum(1 for task in tasks if task.overdue_on(today)),
            "upcoming_maintenance": [
                {
                    "task_id": task.id,
                    "asset_id": task.asset_id,
                    "asset_name": names.get(task.asset_id),
                    "description": task.description,
                    "next_due": task.next_due.isoformat(),
                    "priority": task.priority.value,
                }
                for task in upcoming
            ],
            "condition_distribution": {c.value: conditions.get(c.value, 0) for c in AssetCondition},
            "status_distribution": {s.value: statuses.get(s.value, 0) for s in AssetStatus},
        }

    async def stats(self, user_id: str, today: date | None = None) -> dict:
        today = today or date.today()
        assets, tasks, fmea, rca = await self._load(user_id)

        ages = [age for age in (asset.age(today) for asset in assets) if age is not None]
        effective = Counter(task.effective_status(today) for task in tasks)

        return {
            "total_assets": len(assets),
            "by_type": dict(Counter(asset.type for asset in assets)),
            "by_manufacturer": dict(Counter(asset.manufacturer for asset in assets)),
            "by_location": dict(Counter(asset.location for asset in assets)),
            "by_condition": dict(Counter(asset.condition.value for asset in assets)),
            "by_status": dict(Counter(asset.status.value for asset in assets)),
            "average_age": round(sum(ages) / len(ages), 1) if ages else None,
            "total_value": round(sum(asset.purchase_price or 0 for asset in assets), 2),
            "maintenance": {
                "total_tasks": len(tasks),
                "overdue": effective.get(TaskStatus.OVERDUE, 0),
                "completed": effective.get(TaskStatus.COMPLETED, 0),
                "scheduled": effective.get(TaskStatus.SCHEDULED, 0),
            },
            "analysis": {
                "total_fmea": len(fmea),
                "high_risk_fmea": sum(1 for entry in fmea if is_high_risk(entry.rpn)),
                "average_rpn": round(sum(e.rpn for e in fmea) / len(fmea), 1) if fmea else None,
                "total_rca": len(rca),
                "total_rca_cost": round(sum(entry.cost or 0 for entry in rca), 2),
            },
        }

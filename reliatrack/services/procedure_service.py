"""
Maintenance procedure service.
"""

from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from reliatrack.models.procedure import Procedure, ProcedurePriority, ProcedureType
from reliatrack.models.user import User
from reliatrack.services.analysis_service import AnalysisService
from reliatrack.services.exceptions import NotFoundError
from reliatrack.services.permissions import get_scoped_asset, get_user_or_404
from reliatrack.services.risk import HIGH_RISK_RPN

TITLE_LENGTH = Procedure.__table__.c.title.type.length


def _procedure_scope(user: User):
    if user.organization_id is None:
        return Procedure.created_by == user.id
    return or_(
        Procedure.organization_id == user.organization_id,
        Procedure.created_by == user.id,
    )


class ProcedureService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_for_asset(self, user_id: str, asset_id: str) -> list[Procedure]:
        user = await get_user_or_404(self.session, user_id)
        await get_scoped_asset(self.session, user_id, asset_id)
        result = await self.session.execute(
            select(Procedure)
            .where(Procedure.asset_id == asset_id, _procedure_scope(user))
            .order_by(Procedure.created_at.desc())
        )
        return list(result.scalars().all())

    async def create(self, user_id: str, asset_id: str, values: dict[str, Any]) -> Procedure:
        user = await get_user_or_404(self.session, user_id)
        asset = await get_scoped_asset(self.session, user_id, asset_id)
        procedure = Procedure(
            asset_id=asset.id,
            organization_id=user.organization_id,
            created_by=user.id,
            **values,
        )
        self.session.add(procedure)
        await self.session.flush()
        return procedure

    async def _get(self, user_id: str, procedure_id: str) -> Procedure:
        user = await get_user_or_404(self.session, user_id)
        result = await self.session.execute(
            select(Procedure).where(Procedure.id == procedure_id, _procedure_scope(user))
        )
        procedure = result.scalar_one_or_none()
        if procedure is None:
            raise NotFoundError("Procedure not found")
        return procedure

    async def update(self, user_id: str, procedure_id: str, values: dict[str, Any]) -> Procedure:
        procedure = await self._get(user_id, procedure_id)
        for field, value in values.items():
            setattr(procedure, field, value)
        await self.session.flush()
        return procedure

    async def delete(self, user_id: str, procedure_id: str) -> None:
        procedure = await self._get(user_id, procedure_id)
        await self.session.delete(procedure)
        await self.session.flush()

    async def generate_from_fmea(self, user_id: str, asset_id: str) -> list[Procedure]:
        """
        Draft one repair procedure per high-RPN FMEA entry.

        Entries that already have an RPN-triggered procedure for the same
        component are skipped.
        """
        entries = await AnalysisService(self.session).high_risk_fmea(user_id, asset_id)
        existing = {
            procedure.component
            for procedure in await self.list_for_asset(user_id, asset_id)
            if procedure.rpn_triggered
        }

        created = []
        for entry in entries:
            if entry.component in existing:
                continue
            steps = [
                {
                    "step": 1,
                    "title": "Isolate and make safe",
                    "instruction": f"Lock out {entry.component} before inspection.",
                    "expanded_details": None,
                },
                {
                    "step": 2,
                    "title": "Inspect for failure mode",
                    "instruction": f"Check for: {entry.failure_mode}.",
                    "expanded_details": entry.causes,
                },
                {
                    "step": 3,
                    "title": "Apply corrective action",
                    "instruction": entry.actions or "Repair or replace the affected part.",
                    "expanded_details": entry.controls,
                },
            ]
            procedure = await self.create(
                user_id,
                asset_id,
                {
                    "title": f"{entry.component}: {entry.failure_mode}"[:TITLE_LENGTH],
                    "type": ProcedureType.REPAIR,
                    "priority": (
                        ProcedurePriority.URGENT
                        if entry.rpn >= HIGH_RISK_RPN * 2
                        else ProcedurePriority.IMPORTANT
                    ),
                    "component": entry.component,
                    "rpn_triggered": True,
                    "rpn_score": entry.rpn,
                    "safety": ["Lockout/tagout"],
                    "steps": steps,
                },
            )
            existing.add(entry.component)
            created.append(procedure)
        return created

"""
Reliability analysis service: FMEA, RCA and RCM records on scoped assets.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from reliatrack.models.analysis import AnalysisStatus, FMEAEntry, RCAEntry, RCMEntry
from reliatrack.models.asset import Asset
from reliatrack.schemas.analysis import (
    FMEACreate,
    FMEAUpdate,
    QuickRCACreate,
    RCACreate,
    RCAFields,
    RCMCreate,
)
from reliatrack.services.exceptions import NotFoundError, ValidationFailed
from reliatrack.services.permissions import get_scoped_asset, scoped_asset_ids
from reliatrack.services.risk import RPNMismatchError, is_high_risk, verify_rpn
from reliatrack.utils.logging import ServiceLogger

OPEN_STATUSES = (AnalysisStatus.OPEN, AnalysisStatus.IN_PROGRESS)


class AnalysisService:
    """FMEA / RCA / RCM persistence with organization scoping."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.logger = ServiceLogger("analysis")

    # FMEA

    async def add_fmea(self, user_id: str, data: FMEACreate) -> FMEAEntry:
        asset = await get_scoped_asset(self.session, user_id, data.asset_id)
        values = data.model_dump(exclude={"asset_id"})
        # Schema validation already fills and checks the RPN
        values["rpn"] = self._checked_rpn(
            values["severity"], values["occurrence"], values["detection"], values["rpn"]
        )
        entry = FMEAEntry(asset_id=asset.id, created_by=user_id, **values)
        self.session.add(entry)
        await self.session.flush()

        self.logger.log_operation_complete(
            "add_fmea", user_id=user_id, asset_id=asset.id, rpn=entry.rpn
        )
        return entry

    async def _get_scoped(self, model, user_id: str, entry_id: str):
        asset_ids = await scoped_asset_ids(self.session, user_id)
        result = await self.session.execute(
            select(model).where(model.id == entry_id, model.asset_id.in_(asset_ids))
        )
        entry = result.scalar_one_or_none()
        if entry is None:
            raise NotFoundError(f"{model.__name__.replace('Entry', '')} entry not found")
        return entry

    async def update_fmea(self, user_id: str, entry_id: str, data: FMEAUpdate) -> FMEAEntry:
        entry = await self._get_scoped(FMEAEntry, user_id, entry_id)
        update_data = data.model_dump(exclude_unset=True)
        supplied_rpn = update_data.pop("rpn", None)

        severity = update_data.get("severity", entry.severity)
        occurrence = update_data.get("occurrence", entry.occurrence)
        detection = update_data.get("detection", entry.detection)
        rpn = self._checked_rpn(severity, occurrence, detection, supplied_rpn)

        for field, value in update_data.items():
            setattr(entry, field, value)
        entry.rpn = rpn
        await self.session.flush()
        return entry

    async def delete_fmea(self, user_id: str, entry_id: str) -> None:
        entry = await self._get_scoped(FMEAEntry, user_id, entry_id)
        await self.session.delete(entry)
        await self.session.flush()

    async def list_fmea(self, user_id: str, asset_id: str) -> list[FMEAEntry]:
        asset = await get_scoped_asset(self.session, user_id, asset_id)
        result = await self.session.execute(
            select(FMEAEntry)
            .where(FMEAEntry.asset_id == asset.id)
            .order_by(FMEAEntry.created_at.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    def _checked_rpn(severity: int, occurrence: int, detection: int, supplied: int | None) -> int:
        try:
            return verify_rpn(severity, occurrence, detection, supplied)
        except RPNMismatchError as exc:
            raise ValidationFailed.for_field("rpn", str(exc)) from exc
        except ValueError as exc:
            raise ValidationFailed.for_field("rating", str(exc)) from exc

    # RCA

    async def add_rca(self, user_id: str, data: RCACreate) -> RCAEntry:
        asset = await get_scoped_asset(self.session, user_id, data.asset_id)
        entry = RCAEntry(
            asset_id=asset.id,
            created_by=user_id,
            **data.model_dump(exclude={"asset_id"}),
        )
        self.session.add(entry)
        await self.session.flush()
        return entry

    async def add_quick_rca(self, user_id: str, data: QuickRCACreate) -> RCAEntry:
        """Five-whys entry; the last answer becomes the root cause."""
        asset = await get_scoped_asset(self.session, user_id, data.asset_id)
        entry = RCAEntry(
            asset_id=asset.id,
            created_by=user_id,
            problem_description=data.problem,
            root_causes=data.whys[-1],
            five_whys=[
                {"why": f"Why {index}?", "answer": answer}
                for index, answer in enumerate(data.whys, start=1)
            ],
            fishbone_diagram=data.fishbone,
        )
        self.session.add(entry)
        await self.session.flush()
        return entry

    async def replace_rca(self, user_id: str, entry_id: str, data: RCAFields) -> RCAEntry:
        """Full replacement; id, asset, author and created_at are kept."""
        entry = await self._get_scoped(RCAEntry, user_id, entry_id)
        for field, value in data.model_dump().items():
            setattr(entry, field, value)
        await self.session.flush()
        return entry

    async def list_rca(self, user_id: str, asset_id: str) -> list[RCAEntry]:
        asset = await get_scoped_asset(self.session, user_id, asset_id)
        result = await self.session.execute(
            select(RCAEntry)
            .where(RCAEntry.asset_id == asset.id)
            .order_by(RCAEntry.created_at.desc())
        )
        return list(result.scalars().all())

    # RCM

    async def add_rcm(self, user_id: str, data: RCMCreate) -> RCMEntry:
        asset = await get_scoped_asset(self.session, user_id, data.asset_id)
        entry = RCMEntry(
            asset_id=asset.id,
            created_by=user_id,
            task=data.task,
            interval_days=data.interval,
            criticality=data.criticality,
        )
        self.session.add(entry)
        await self.session.flush()
        return entry

    async def list_rcm(self, user_id: str, asset_id: str) -> list[RCMEntry]:
        asset = await get_scoped_asset(self.session, user_id, asset_id)
        result = await self.session.execute(
            select(RCMEntry)
            .where(RCMEntry.asset_id == asset.id)
            .order_by(RCMEntry.created_at.desc())
        )
        return list(result.scalars().all())

    # Cross-asset view

    async def all_analysis(self, user_id: str) -> dict:
        """
        Every FMEA and RCA entry in scope with a summary.

        FMEA is ordered by RPN descending, RCA newest first.
        """
        asset_ids = await scoped_asset_ids(self.session, user_id)

        fmea_rows = (
            await self.session.execute(
                select(FMEAEntry, Asset.name)
                .join(Asset, Asset.id == FMEAEntry.asset_id)
                .where(FMEAEntry.asset_id.in_(asset_ids))
                .order_by(FMEAEntry.rpn.desc(), FMEAEntry.created_at.desc())
            )
        ).all()
        rca_rows = (
            await self.session.execute(
                select(RCAEntry, Asset.name)
                .join(Asset, Asset.id == RCAEntry.asset_id)
                .where(RCAEntry.asset_id.in_(asset_ids))
                .order_by(RCAEntry.created_at.desc())
            )
        ).all()

        fmea = [entry for entry, _ in fmea_rows]
        rca = [entry for entry, _ in rca_rows]
        return {
            "fmea": fmea_rows,
            "rca": rca_rows,
            "summary": {
                "total_fmea": len(fmea),
                "total_rca": len(rca),
                "open_fmea": sum(1 for e in fmea if e.status in OPEN_STATUSES),
                "open_rca": sum(1 for e in rca if e.status in OPEN_STATUSES),
                "high_risk_fmea": sum(1 for e in fmea if is_high_risk(e.rpn)),
            },
        }

    async def high_risk_fmea(self, user_id: str, asset_id: str) -> list[FMEAEntry]:
        entries = await self.list_fmea(user_id, asset_id)
        return sorted(
            (e for e in entries if is_high_risk(e.rpn)),
            key=lambda e: e.rpn,
            reverse=True,
        )

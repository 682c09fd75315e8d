"""
Bulk asset import with per-row isolation.

Each row is validated and inserted inside its own SAVEPOINT, so one bad row
does not roll back the rest. Missing or clashing serial numbers are replaced
with generated ones and reported as warnings rather than failures.
"""

import time
from datetime import date, timedelta
from typing import Any

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from reliatrack.models.asset import Asset
from reliatrack.schemas.asset import AssetCreate
from reliatrack.services.asset_service import DEFAULT_SERVICE_INTERVAL_DAYS, AssetService
from reliatrack.services.permissions import get_user_or_404
from reliatrack.utils.logging import ServiceLogger

TEMPLATE_COLUMNS = [
    "name",
    "type",
    "manufacturer",
    "model",
    "serial_number",
    "location",
    "year_manufactured",
    "status",
    "condition",
    "purchase_date",
    "purchase_price",
    "warranty_expiry",
    "last_service_date",
    "next_service_date",
    "maintenance_interval_days",
    "notes",
]

SAMPLE_ROW = {
    "name": "Hydraulic Press #2",
    "type": "Press",
    "manufacturer": "Schuler",
    "model": "HP-400",
    "serial_number": "SCH-HP400-0192",
    "location": "Building A - Line 3",
    "year_manufactured": 2016,
    "status": "operational",
    "condition": "good",
    "purchase_price": 185000,
    "maintenance_interval_days": 90,
}


def _format_errors(exc: ValidationError) -> list[dict[str, str]]:
    return [
        {
            "field": ".".join(str(part) for part in error["loc"]) or "row",
            "message": error["msg"],
        }
        for error in exc.errors()
    ]


class ImportService:
    """Best-effort bulk insert of assets."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.assets = AssetService(session)
        self.logger = ServiceLogger("import")

    async def import_assets(self, user_id: str, rows: list[dict[str, Any]]) -> dict[str, Any]:
        """
        Import rows for ``user_id``.

        Raises:
            NotFoundError: Unknown user
            ForbiddenError: Basic-tier cap would be exceeded by the batch

        Returns:
            Dict with ``inserted`` assets, ``failed`` rows and ``warnings``
        """
        user = await get_user_or_404(self.session, user_id)
        await self.assets.check_asset_limit(user, adding=len(rows))

        started = time.monotonic()
        stamp = int(time.time() * 1000)
        self.logger.log_operation_start("import_assets", user_id=user_id, rows=len(rows))

        existing = set(
            (await self.session.execute(select(Asset.serial_number))).scalars().all()
        )

        inserted: list[Asset] = []
        failed: list[dict[str, Any]] = []
        warnings: list[dict[str, Any]] = []

        for index, raw in enumerate(rows, start=1):
            row = dict(raw)

            serial = str(row.get("serial_number") or "").strip()
            if not serial:
                serial = f"GEN-{stamp}-{index}"
                warnings.append({"row": index, "message": f"Missing serial number, generated {serial}"})
            elif serial in existing:
                original = serial
                serial = f"{original}-GEN-{stamp}"
                if serial in existing:
                    serial = f"{serial}-{index}"
                warnings.append({
                    "row": index,
                    "message": f"Duplicate serial number {original}, renamed to {serial}",
                })
            row["serial_number"] = serial

            try:
                data = AssetCreate.model_validate(row)
            except ValidationError as exc:
                failed.append({"row": index, "errors": _format_errors(exc)})
                continue

            values = data.model_dump()
            if values.get("next_due_date") is None:
                values["next_due_date"] = date.today() + timedelta(days=DEFAULT_SERVICE_INTERVAL_DAYS)

            asset = Asset(user_id=user.id, organization_id=user.organization_id, **values)
            try:
                async with self.session.begin_nested():
                    self.session.add(asset)
                    await self.session.flush()
            except IntegrityError as exc:
                failed.append({
                    "row": index,
                    "errors": [{"field": "row", "message": str(exc.orig)}],
                })
                continue

            existing.add(serial)
            inserted.append(asset)

        self.logger.log_operation_complete(
            "import_assets",
            user_id=user_id,
            duration_ms=(time.monotonic() - started) * 1000,
            inserted=len(inserted),
            failed=len(failed),
        )
        return {"inserted": inserted, "failed": failed, "warnings": warnings}

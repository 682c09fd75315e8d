"""
Asset service.

CRUD for assets within the caller's organization scope, plus the basic-tier
asset cap and serial number uniqueness.
"""

from datetime import date, timedelta

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from reliatrack.config.settings import settings
from reliatrack.models.analysis import FMEAEntry, RCAEntry, RCMEntry
from reliatrack.models.asset import Asset, AssetStatus
from reliatrack.models.maintenance import MaintenanceTask
from reliatrack.models.procedure import Procedure
from reliatrack.models.user import SubscriptionTier, User
from reliatrack.schemas.asset import AssetCreate, AssetUpdate
from reliatrack.services.exceptions import ForbiddenError, NotFoundError, ValidationFailed
from reliatrack.services.permissions import (
    build_asset_query,
    build_delete_asset_query,
    get_scoped_asset,
    get_user_or_404,
)
from reliatrack.utils.logging import ServiceLogger, audit_logger

DEFAULT_SERVICE_INTERVAL_DAYS = 30


class AssetService:
    """Service for asset management."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.logger = ServiceLogger("assets")

    async def count_owned(self, user_id: str) -> int:
        result = await self.session.execute(
            select(func.count(Asset.id)).where(Asset.user_id == user_id)
        )
        return result.scalar_one()

    async def serial_exists(self, serial_number: str, exclude_id: str | None = None) -> bool:
        query = select(Asset.id).where(Asset.serial_number == serial_number)
        if exclude_id:
            query = query.where(Asset.id != exclude_id)
        result = await self.session.execute(query.limit(1))
        return result.scalar_one_or_none() is not None

    async def check_asset_limit(self, user: User, adding: int = 1) -> None:
        """
        Enforce the basic-tier cap on owned assets.

        Raises:
            ForbiddenError: If ``adding`` more assets would exceed the cap
        """
        if user.subscription_tier != SubscriptionTier.BASIC:
            return
        limit = settings.basic_tier_asset_limit
        current = await self.count_owned(user.id)
        if current + adding > limit:
            audit_logger.log_permission_denied(
                user_id=user.id,
                organization_id=user.organization_id,
                resource_type="asset",
                action="create",
                reason="basic_tier_limit",
            )
            raise ForbiddenError(
                f"Basic plan is limited to {limit} assets. "
                "Upgrade to Professional for unlimited assets."
            )

    async def list_assets(
        self,
        user_id: str,
        location: str | None = None,
        asset_type: str | None = None,
        status: AssetStatus | None = None,
    ) -> list[Asset]:
        criteria = []
        if location:
            criteria.append(Asset.location == location)
        if asset_type:
            criteria.append(Asset.type == asset_type)
        if status:
            criteria.append(Asset.status == status)

        query = await build_asset_query(self.session, user_id, *criteria)
        result = await self.session.execute(query.order_by(Asset.created_at.desc()))
        return list(result.scalars().all())

    async def get_asset(self, user_id: str, asset_id: str) -> Asset:
        return await get_scoped_asset(self.session, user_id, asset_id)

    async def create_asset(self, user_id: str, data: AssetCreate) -> Asset:
        """
        Create an asset owned by ``user_id``.

        Raises:
            NotFoundError: Unknown user
            ForbiddenError: Basic-tier cap reached
            ValidationFailed: Duplicate serial number
        """
        user = await get_user_or_404(self.session, user_id)
        self.logger.log_operation_start("create_asset", user_id=user_id)

        await self.check_asset_limit(user)

        if await self.serial_exists(data.serial_number):
            raise ValidationFailed.for_field(
                "serial_number", "An asset with this serial number already exists"
            )

        values = data.model_dump()
        if values.get("next_due_date") is None:
            values["next_due_date"] = date.today() + timedelta(days=DEFAULT_SERVICE_INTERVAL_DAYS)

        asset = Asset(
            user_id=user.id,
            organization_id=user.organization_id,
            **values,
        )
        self.session.add(asset)
        await self.session.flush()

        self.logger.log_operation_complete("create_asset", user_id=user_id, asset_id=asset.id)
        return asset

    async def update_asset(self, user_id: str, asset_id: str, data: AssetUpdate) -> Asset:
        asset = await get_scoped_asset(self.session, user_id, asset_id)
        update_data = data.model_dump(exclude_unset=True)

        new_serial = update_data.get("serial_number")
        if new_serial and new_serial != asset.serial_number:
            if await self.serial_exists(new_serial, exclude_id=asset.id):
                raise ValidationFailed.for_field(
                    "serial_number", "An asset with this serial number already exists"
                )

        for field, value in update_data.items():
            setattr(asset, field, value)
        await self.session.flush()
        return asset

    async def update_status(self, user_id: str, asset_id: str, status: AssetStatus) -> Asset:
        asset = await get_scoped_asset(self.session, user_id, asset_id)
        old_status = asset.status
        asset.status = status
        await self.session.flush()

        audit_logger.log_action(
            action="status_change",
            user_id=user_id,
            organization_id=asset.organization_id,
            resource_type="asset",
            resource_id=asset.id,
            old_values={"status": old_status.value},
            new_values={"status": status.value},
        )
        return asset

    async def delete_asset(self, user_id: str, asset_id: str) -> None:
        """
        Delete an asset and everything attached to it. Owner only.

        Raises:
            NotFoundError: Missing, or the caller is not the owner
        """
        result = await self.session.execute(build_delete_asset_query(user_id, asset_id))
        asset = result.scalar_one_or_none()
        if asset is None:
            raise NotFoundError("Asset not found or you do not have permission to delete it")

        for child in (FMEAEntry, RCAEntry, RCMEntry, MaintenanceTask, Procedure):
            await self.session.execute(delete(child).where(child.asset_id == asset.id))
        await self.session.delete(asset)
        await self.session.flush()

        audit_logger.log_action(
            action="delete",
            user_id=user_id,
            organization_id=asset.organization_id,
            resource_type="asset",
            resource_id=asset_id,
            old_values={"name": asset.name, "serial_number": asset.serial_number},
        )

"""
Organization lifecycle and membership bookkeeping.

Joining an organization upgrades a user to the professional tier and brings
their assets into the organization; leaving (or being removed) reverses both.
"""

from datetime import date, timedelta
from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from reliatrack.database.base import utcnow
from reliatrack.models.asset import Asset
from reliatrack.models.invitation import TeamInvitation
from reliatrack.models.maintenance import OPEN_STATUSES, MaintenanceTask
from reliatrack.models.organization import Organization
from reliatrack.models.user import MemberRole, SubscriptionTier, User
from reliatrack.services.exceptions import ForbiddenError, NotFoundError, ValidationFailed
from reliatrack.services.permissions import get_user_or_404
from reliatrack.utils.logging import ServiceLogger, audit_logger


async def attach_member(
    session: AsyncSession,
    user: User,
    organization_id: str,
    role: MemberRole,
) -> None:
    user.organization_id = organization_id
    user.role = role
    user.subscription_tier = SubscriptionTier.PROFESSIONAL
    await session.execute(
        update(Asset)
        .where(Asset.user_id == user.id)
        .values(organization_id=organization_id, updated_at=utcnow())
    )
    await session.flush()


async def detach_member(session: AsyncSession, user: User) -> None:
    user.organization_id = None
    user.role = None
    user.subscription_tier = SubscriptionTier.BASIC
    await session.execute(
        update(Asset)
        .where(Asset.user_id == user.id)
        .values(organization_id=None, updated_at=utcnow())
    )
    await session.flush()


async def count_owners(session: AsyncSession, organization_id: str) -> int:
    result = await session.execute(
        select(func.count(User.id)).where(
            User.organization_id == organization_id,
            User.role == MemberRole.OWNER,
        )
    )
    return result.scalar_one()


def require_owner(user: User, action: str) -> None:
    """
    Raises:
        NotFoundError: The user has no organization
        ForbiddenError: The user is not an owner
    """
    if user.organization_id is None:
        raise NotFoundError("You are not part of an organization")
    if user.role != MemberRole.OWNER:
        audit_logger.log_permission_denied(
            user_id=user.id,
            organization_id=user.organization_id,
            resource_type="organization",
            action=action,
            reason="owner_required",
        )
        raise ForbiddenError("Only organization owners can perform this action")


class OrganizationService:
    """Service for organization management."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.logger = ServiceLogger("organization")

    async def _organization_of(self, user: User) -> Organization:
        if user.organization_id is None:
            raise NotFoundError("You are not part of an organization")
        organization = await self.session.get(Organization, user.organization_id)
        if organization is None:
            raise NotFoundError("Organization not found")
        return organization

    async def create(self, user_id: str, name: str) -> Organization:
        user = await get_user_or_404(self.session, user_id)
        if user.organization_id is not None:
            raise ValidationFailed("You are already part of an organization")

        organization = Organization(name=name, created_by=user.id)
        self.session.add(organization)
        await self.session.flush()
        await attach_member(self.session, user, organization.id, MemberRole.OWNER)

        audit_logger.log_action(
            action="create",
            user_id=user.id,
            organization_id=organization.id,
            resource_type="organization",
            resource_id=organization.id,
            new_values={"name": name},
        )
        return organization

    async def info(self, user_id: str) -> dict[str, Any]:
        user = await get_user_or_404(self.session, user_id)
        organization = await self._organization_of(user)

        member_count = (await self.session.execute(
            select(func.count(User.id)).where(User.organization_id == organization.id)
        )).scalar_one()
        asset_count = (await self.session.execute(
            select(func.count(Asset.id)).where(Asset.organization_id == organization.id)
        )).scalar_one()

        return {
            "id": organization.id,
            "name": organization.name,
            "created_by": organization.created_by,
            "created_at": organization.created_at,
            "settings": organization.settings_dict(),
            "member_count": member_count,
            "asset_count": asset_count,
            "role": user.role.value if user.role else None,
        }

    async def update_settings(
        self,
        user_id: str,
        name: str | None = None,
        allow_external_access: bool | None = None,
        share_assets: bool | None = None,
        share_maintenance: bool | None = None,
    ) -> Organization:
        user = await get_user_or_404(self.session, user_id)
        require_owner(user, "update_settings")
        organization = await self._organization_of(user)

        old_values = {"name": organization.name, **organization.settings_dict()}
        if name is not None:
            organization.name = name
        if allow_external_access is not None:
            organization.allow_external_access = allow_external_access
        if share_assets is not None:
            organization.share_assets = share_assets
        if share_maintenance is not None:
            organization.share_maintenance = share_maintenance
        await self.session.flush()

        audit_logger.log_action(
            action="update_settings",
            user_id=user.id,
            organization_id=organization.id,
            resource_type="organization",
            resource_id=organization.id,
            old_values=old_values,
            new_values={"name": organization.name, **organization.settings_dict()},
        )
        return organization

    async def leave(self, user_id: str) -> None:
        user = await get_user_or_404(self.session, user_id)
        organization = await self._organization_of(user)

        if user.role == MemberRole.OWNER and await count_owners(self.session, organization.id) <= 1:
            raise ValidationFailed(
                "The last owner cannot leave. Transfer ownership or delete the organization."
            )

        await detach_member(self.session, user)
        audit_logger.log_action(
            action="leave",
            user_id=user.id,
            organization_id=organization.id,
            resource_type="organization",
            resource_id=organization.id,
        )

    async def delete(self, user_id: str) -> None:
        """Dissolve the organization; members keep their own assets."""
        user = await get_user_or_404(self.session, user_id)
        require_owner(user, "delete")
        organization = await self._organization_of(user)

        members = (await self.session.execute(
            select(User).where(User.organization_id == organization.id)
        )).scalars().all()
        for member in members:
            await detach_member(self.session, member)

        # Orphan anything still pointing at the organization
        await self.session.execute(
            update(Asset)
            .where(Asset.organization_id == organization.id)
            .values(organization_id=None, updated_at=utcnow())
        )
        await self.session.execute(
            delete(TeamInvitation).where(TeamInvitation.organization_id == organization.id)
        )
        await self.session.delete(organization)
        await self.session.flush()

        audit_logger.log_action(
            action="delete",
            user_id=user.id,
            organization_id=organization.id,
            resource_type="organization",
            resource_id=organization.id,
            metadata={"members_detached": len(members)},
        )

    async def assets(self, user_id: str, page: int = 1, page_size: int = 20) -> dict[str, Any]:
        user = await get_user_or_404(self.session, user_id)
        organization = await self._organization_of(user)

        total = (await self.session.execute(
            select(func.count(Asset.id)).where(Asset.organization_id == organization.id)
        )).scalar_one()
        items = (await self.session.execute(
            select(Asset)
            .where(Asset.organization_id == organization.id)
            .order_by(Asset.created_at.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )).scalars().all()

        return {
            "items": list(items),
            "total": total,
            "page": page,
            "page_size": page_size,
            "total_pages": (total + page_size - 1) // page_size,
        }

    async def dashboard(self, user_id: str, today: date | None = None) -> dict[str, Any]:
        today = today or date.today()
        user = await get_user_or_404(self.session, user_id)
        organization = await self._organization_of(user)

        member_count = (await self.session.execute(
            select(func.count(User.id)).where(User.organization_id == organization.id)
        )).scalar_one()
        assets = (await self.session.execute(
            select(Asset)
            .where(Asset.organization_id == organization.id)
            .order_by(Asset.created_at.desc())
        )).scalars().all()

        status_counts: dict[str, int] = {}
        for asset in assets:
            status_counts[asset.status.value] = status_counts.get(asset.status.value, 0) + 1

        maintenance_due = 0
        if assets:
            maintenance_due = (await self.session.execute(
                select(func.count(MaintenanceTask.id)).where(
                    MaintenanceTask.asset_id.in_([asset.id for asset in assets]),
                    MaintenanceTask.status.in_(OPEN_STATUSES),
                    MaintenanceTask.next_due.is_not(None),
                    MaintenanceTask.next_due <= today + timedelta(days=7),
                )
            )).scalar_one()

        return {
            "organization": {"id": organization.id, "name": organization.name},
            "member_count": member_count,
            "total_assets": len(assets),
            "status_counts": status_counts,
            "maintenance_due": maintenance_due,
            "recent_assets": list(assets[:5]),
        }

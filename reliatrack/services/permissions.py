"""
Organization-scoped query builders.

Every asset read goes through :func:`build_asset_query`, which restricts rows
to the caller's own assets plus those owned by fellow organization members.
Deletes are narrower: only the owner matches.

Scope failures surface as 404 rather than 403 so that callers cannot discover
for ids that exist outside their scope.
"""

from typing import Any

from sqlalchemy import Select, and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from reliatrack.models.asset import Asset
from reliatrack.models.user import User
from reliatrack.services.exceptions import NotFoundError


async def get_user_or_404(db: AsyncSession, user_id: str) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def asset_scope(user: User) -> Any:
    """WHERE clause matching every asset ``user`` may read or edit."""
    if user.organization_id is None:
        return Asset.user_id == user.id
    members = select(User.id).where(User.organization_id == user.organization_id)
    return or_(Asset.user_id == user.id, Asset.user_id.in_(members))


async def build_asset_query(
    db: AsyncSession,
    user_id: str,
    *criteria: Any,
) -> Select:
    """
    Select assets visible to ``user_id``, ANDed with extra criteria.

    Raises:
        NotFoundError: If the user does not exist
    """
    user = await get_user_or_404(db, user_id)
    return select(Asset).where(and_(asset_scope(user), *criteria))


def build_delete_asset_query(user_id: str, asset_id: str) -> Select:
    """Owner-only match; organization membership does not grant delete."""
    return select(Asset).where(Asset.id == asset_id, Asset.user_id == user_id)


async def get_scoped_asset(db: AsyncSession, user_id: str, asset_id: str) -> Asset:
    """Fetch one asset within scope or raise 404."""
    query = await build_asset_query(db, user_id, Asset.id == asset_id)
    asset = (await db.execute(query)).scalar_one_or_none()
    if asset is None:
        raise NotFoundError("Asset not found")
    return asset


async def scoped_asset_ids(db: AsyncSession, user_id: str) -> Select:
    """Subquery of asset ids in scope, for filtering child tables."""
    user = await get_user_or_404(db, user_id)
    return select(Asset.id).where(asset_scope(user))

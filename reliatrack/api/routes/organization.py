"""
Organization management routes.
"""

from fastapi import APIRouter, Query, status
from pydantic import BaseModel, Field

from reliatrack.api.dependencies import CurrentUserDep, DatabaseDep
from reliatrack.schemas.asset import AssetPage, AssetResponse
from reliatrack.services.organization_service import OrganizationService

router = APIRouter()


class OrganizationCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class DataSharing(BaseModel):
    assets: bool | None = None
    maintenance: bool | None = None


class OrganizationSettingsUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    allow_external_access: bool | None = None
    data_sharing: DataSharing | None = None


@router.post("/create", status_code=status.HTTP_201_CREATED)
async def create_organization(
    body: OrganizationCreate,
    current_user: CurrentUserDep,
    db: DatabaseDep,
):
    """Create an organization; the caller becomes its owner on the professional plan."""
    organization = await OrganizationService(db).create(current_user.id, body.name)
    return {
        "id": organization.id,
        "name": organization.name,
        "settings": organization.settings_dict(),
        "role": current_user.role,
        "subscription_tier": current_user.subscription_tier,
    }


@router.get("/info")
async def organization_info(current_user: CurrentUserDep, db: DatabaseDep):
    return await OrganizationService(db).info(current_user.id)


@router.put("/settings")
async def update_settings(
    body: OrganizationSettingsUpdate,
    current_user: CurrentUserDep,
    db: DatabaseDep,
):
    sharing = body.data_sharing or DataSharing()
    organization = await OrganizationService(db).update_settings(
        current_user.id,
        name=body.name,
        allow_external_access=body.allow_external_access,
        share_assets=sharing.assets,
        share_maintenance=sharing.maintenance,
    )
    return {
        "id": organization.id,
        "name": organization.name,
        "settings": organization.settings_dict(),
    }


@router.delete("/leave")
async def leave_organization(current_user: CurrentUserDep, db: DatabaseDep):
    await OrganizationService(db).leave(current_user.id)
    return {"message": "You have left the organization"}


@router.delete("/delete")
async def delete_organization(current_user: CurrentUserDep, db: DatabaseDep):
    """Owners only. Members are detached and downgraded; assets stay with their owners."""
    await OrganizationService(db).delete(current_user.id)
    return {"message": "Organization deleted"}


@router.get("/assets", response_model=AssetPage)
async def organization_assets(
    current_user: CurrentUserDep,
    db: DatabaseDep,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    result = await OrganizationService(db).assets(current_user.id, page, page_size)
    result["items"] = [AssetResponse.from_asset(asset) for asset in result["items"]]
    return result


@router.get("/dashboard")
async def organization_dashboard(current_user: CurrentUserDep, db: DatabaseDep):
    result = await OrganizationService(db).dashboard(current_user.id)
    result["recent_assets"] = [AssetResponse.from_asset(a) for a in result["recent_assets"]]
    return result

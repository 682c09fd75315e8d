"""
Assets Router

Asset CRUD within the caller's organization scope.
"""

from fastapi import APIRouter, Query, status

from reliatrack.api.dependencies import CurrentUserDep, DatabaseDep
from reliatrack.models.asset import AssetStatus
from reliatrack.schemas.asset import (
    AssetCreate,
    AssetListResponse,
    AssetResponse,
    AssetStatusUpdate,
    AssetUpdate,
)
from reliatrack.services.asset_service import AssetService

router = APIRouter()


@router.get("", response_model=AssetListResponse)
async def list_assets(
    current_user: CurrentUserDep,
    db: DatabaseDep,
    location: str | None = Query(None),
    asset_type: str | None = Query(None, alias="type"),
    asset_status: AssetStatus | None = Query(None, alias="status"),
):
    """List assets visible to the caller, newest first."""
    assets = await AssetService(db).list_assets(
        current_user.id,
        location=location,
        asset_type=asset_type,
        status=asset_status,
    )
    return AssetListResponse(
        items=[AssetResponse.from_asset(asset) for asset in assets],
        total=len(assets),
    )


@router.get("/{asset_id}", response_model=AssetResponse)
async def get_asset(asset_id: str, current_user: CurrentUserDep, db: DatabaseDep):
    asset = await AssetService(db).get_asset(current_user.id, asset_id)
    return AssetResponse.from_asset(asset)


@router.post("", response_model=AssetResponse, status_code=status.HTTP_201_CREATED)
async def create_asset(body: AssetCreate, current_user: CurrentUserDep, db: DatabaseDep):
    """
    Create a new asset.

    Basic plan accounts are limited to 5 assets; serial numbers are unique.
    """
    asset = await AssetService(db).create_asset(current_user.id, body)
    return AssetResponse.from_asset(asset)


@router.put("/{asset_id}", response_model=AssetResponse)
async def update_asset(
    asset_id: str,
    body: AssetUpdate,
    current_user: CurrentUserDep,
    db: DatabaseDep,
):
    asset = await AssetService(db).update_asset(current_user.id, asset_id, body)
    return AssetResponse.from_asset(asset)


@router.put("/{asset_id}/status", response_model=AssetResponse)
async def update_asset_status(
    asset_id: str,
    body: AssetStatusUpdate,
    current_user: CurrentUserDep,
    db: DatabaseDep,
):
    asset = await AssetService(db).update_status(current_user.id, asset_id, body.status)
    return AssetResponse.from_asset(asset)


@router.delete("/{asset_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_asset(asset_id: str, current_user: CurrentUserDep, db: DatabaseDep):
    """Delete an asset. Only its owner may delete it."""
    await AssetService(db).delete_asset(current_user.id, asset_id)

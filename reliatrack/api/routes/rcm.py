"""
Reliability Centered Maintenance routes.
"""

from fastapi import APIRouter, status

from reliatrack.api.dependencies import CurrentUserDep, DatabaseDep
from reliatrack.schemas.analysis import RCMCreate, RCMResponse
from reliatrack.services.analysis_service import AnalysisService

router = APIRouter()


@router.post("", response_model=RCMResponse, status_code=status.HTTP_201_CREATED)
async def create_rcm(body: RCMCreate, current_user: CurrentUserDep, db: DatabaseDep):
    entry = await AnalysisService(db).add_rcm(current_user.id, body)
    return RCMResponse.model_validate(entry)


@router.get("/{asset_id}", response_model=list[RCMResponse])
async def list_rcm(asset_id: str, current_user: CurrentUserDep, db: DatabaseDep):
    entries = await AnalysisService(db).list_rcm(current_user.id, asset_id)
    return [RCMResponse.model_validate(entry) for entry in entries]

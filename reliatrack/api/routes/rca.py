"""
Five-whys RCA quick entry.
"""

from fastapi import APIRouter, status

from reliatrack.api.dependencies import CurrentUserDep, DatabaseDep
from reliatrack.schemas.analysis import QuickRCACreate, RCAResponse
from reliatrack.services.analysis_service import AnalysisService

router = APIRouter()


@router.post("", response_model=RCAResponse, status_code=status.HTTP_201_CREATED)
async def create_quick_rca(body: QuickRCACreate, current_user: CurrentUserDep, db: DatabaseDep):
    """Record a five-whys analysis. Exactly five answers are required."""
    entry = await AnalysisService(db).add_quick_rca(current_user.id, body)
    return RCAResponse.model_validate(entry)


@router.get("/{asset_id}", response_model=list[RCAResponse])
async def list_rca(asset_id: str, current_user: CurrentUserDep, db: DatabaseDep):
    entries = await AnalysisService(db).list_rca(current_user.id, asset_id)
    return [RCAResponse.model_validate(entry) for entry in entries]

"""
FMEA and RCA routes nested under assets.
"""

from fastapi import APIRouter, status

from reliatrack.api.dependencies import CurrentUserDep, DatabaseDep
from reliatrack.schemas.analysis import (
    AllAnalysisResponse,
    AnalysisSummary,
    FMEACreate,
    FMEAResponse,
    FMEAUpdate,
    RCACreate,
    RCAFields,
    RCAResponse,
)
from reliatrack.services.analysis_service import AnalysisService

router = APIRouter()


def _fmea(entry, asset_name: str | None = None) -> FMEAResponse:
    response = FMEAResponse.model_validate(entry)
    response.asset_name = asset_name
    return response


def _rca(entry, asset_name: str | None = None) -> RCAResponse:
    response = RCAResponse.model_validate(entry)
    response.asset_name = asset_name
    return response


@router.get("/all/analysis", response_model=AllAnalysisResponse)
async def all_analysis(current_user: CurrentUserDep, db: DatabaseDep):
    """FMEA by RPN descending and RCA newest first, with a summary."""
    result = await AnalysisService(db).all_analysis(current_user.id)
    return AllAnalysisResponse(
        fmea=[_fmea(entry, name) for entry, name in result["fmea"]],
        rca=[_rca(entry, name) for entry, name in result["rca"]],
        summary=AnalysisSummary(**result["summary"]),
    )


# FMEA

@router.post("/fmea", response_model=FMEAResponse, status_code=status.HTTP_201_CREATED)
async def create_fmea(body: FMEACreate, current_user: CurrentUserDep, db: DatabaseDep):
    """
    Add an FMEA entry.

    Ratings must be 1-10. ``rpn`` may be omitted; when supplied it must equal
    severity x occurrence x detection or the request is rejected with 400.
    """
    entry = await AnalysisService(db).add_fmea(current_user.id, body)
    return _fmea(entry)


@router.get("/{asset_id}/fmea", response_model=list[FMEAResponse])
async def list_fmea(asset_id: str, current_user: CurrentUserDep, db: DatabaseDep):
    entries = await AnalysisService(db).list_fmea(current_user.id, asset_id)
    return [_fmea(entry) for entry in entries]


@router.put("/fmea/{entry_id}", response_model=FMEAResponse)
async def update_fmea(
    entry_id: str,
    body: FMEAUpdate,
    current_user: CurrentUserDep,
    db: DatabaseDep,
):
    entry = await AnalysisService(db).update_fmea(current_user.id, entry_id, body)
    return _fmea(entry)


@router.delete("/fmea/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_fmea(entry_id: str, current_user: CurrentUserDep, db: DatabaseDep):
    await AnalysisService(db).delete_fmea(current_user.id, entry_id)


# RCA

@router.post("/rca", response_model=RCAResponse, status_code=status.HTTP_201_CREATED)
async def create_rca(body: RCACreate, current_user: CurrentUserDep, db: DatabaseDep):
    entry = await AnalysisService(db).add_rca(current_user.id, body)
    return _rca(entry)


@router.get("/{asset_id}/rca", response_model=list[RCAResponse])
async def list_rca(asset_id: str, current_user: CurrentUserDep, db: DatabaseDep):
    entries = await AnalysisService(db).list_rca(current_user.id, asset_id)
    return [_rca(entry) for entry in entries]


@router.put("/rca/{entry_id}", response_model=RCAResponse)
async def replace_rca(
    entry_id: str,
    body: RCAFields,
    current_user: CurrentUserDep,
    db: DatabaseDep,
):
    """Replace an RCA entry; creation time and author are preserved."""
    entry = await AnalysisService(db).replace_rca(current_user.id, entry_id, body)
    return _rca(entry)

"""
Maintenance procedure routes.
"""

from datetime import datetime
from typing import Any

from fastapi import APIRouter, status
from pydantic import BaseModel, ConfigDict, Field, field_validator

from reliatrack.api.dependencies import CurrentUserDep, DatabaseDep
from reliatrack.models.procedure import ProcedurePriority, ProcedureType
from reliatrack.schemas import reject_null
from reliatrack.services.procedure_service import ProcedureService

router = APIRouter()


class ProcedureStep(BaseModel):
    step: int = Field(..., ge=1)
    title: str
    instruction: str
    expanded_details: str | None = None


class ProcedureFields(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    type: ProcedureType = ProcedureType.STANDARD
    priority: ProcedurePriority = ProcedurePriority.IMPORTANT
    estimated_time: str | None = None
    interval: str | None = None
    component: str | None = None
    rpn_triggered: bool = False
    rpn_score: int | None = Field(None, ge=1, le=1000)
    tools: list[str] = Field(default_factory=list)
    materials: list[str] = Field(default_factory=list)
    people: list[str] = Field(default_factory=list)
    safety: list[str] = Field(default_factory=list)
    steps: list[ProcedureStep] = Field(default_factory=list)


class ProcedureCreate(ProcedureFields):
    asset_id: str


class ProcedureUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    type: ProcedureType | None = None
    priority: ProcedurePriority | None = None
    estimated_time: str | None = None
    interval: str | None = None
    component: str | None = None
    tools: list[str] | None = None
    materials: list[str] | None = None
    people: list[str] | None = None
    safety: list[str] | None = None
    steps: list[ProcedureStep] | None = None

    @field_validator(
        "title", "type", "priority", "tools", "materials", "people", "safety", "steps",
        mode="before",
    )
    @classmethod
    def required_not_null(cls, value: Any) -> Any:
        return reject_null(value)


class ProcedureResponse(ProcedureFields):
    model_config = ConfigDict(from_attributes=True)

    id: str
    asset_id: str
    organization_id: str | None = None
    created_by: str
    created_at: datetime
    updated_at: datetime


@router.get("/asset/{asset_id}", response_model=list[ProcedureResponse])
async def list_procedures(asset_id: str, current_user: CurrentUserDep, db: DatabaseDep):
    return await ProcedureService(db).list_for_asset(current_user.id, asset_id)


@router.post("", response_model=ProcedureResponse, status_code=status.HTTP_201_CREATED)
async def create_procedure(body: ProcedureCreate, current_user: CurrentUserDep, db: DatabaseDep):
    return await ProcedureService(db).create(
        current_user.id,
        body.asset_id,
        body.model_dump(exclude={"asset_id"}),
    )


@router.post(
    "/generate/{asset_id}",
    response_model=list[ProcedureResponse],
    status_code=status.HTTP_201_CREATED,
)
async def generate_procedures(asset_id: str, current_user: CurrentUserDep, db: DatabaseDep):
    """Draft repair procedures from the asset's high-RPN FMEA entries."""
    return await ProcedureService(db).generate_from_fmea(current_user.id, asset_id)


@router.put("/{procedure_id}", response_model=ProcedureResponse)
async def update_procedure(
    procedure_id: str,
    body: ProcedureUpdate,
    current_user: CurrentUserDep,
    db: DatabaseDep,
):
    return await ProcedureService(db).update(
        current_user.id,
        procedure_id,
        body.model_dump(exclude_unset=True),
    )


@router.delete("/{procedure_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_procedure(procedure_id: str, current_user: CurrentUserDep, db: DatabaseDep):
    await ProcedureService(db).delete(current_user.id, procedure_id)

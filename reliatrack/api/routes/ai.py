"""
AI insight routes.
"""

from fastapi import APIRouter
from pydantic import BaseModel, Field

from reliatrack.api.dependencies import CurrentUserDep, DatabaseDep
from reliatrack.services.insights_service import AnalysisType, InsightsService, list_models

router = APIRouter()


class InsightRequest(BaseModel):
    query: str = Field(..., min_length=1, max_length=4000)
    analysis_type: AnalysisType = AnalysisType.GENERAL
    model: str = "grok-3-mini"
    include_data: bool = True


class FocusedRequest(BaseModel):
    query: str | None = Field(None, max_length=4000)
    model: str = "grok-3-mini"


class InsightResponse(BaseModel):
    insight: str
    model: str
    analysis_type: AnalysisType
    credits_used: int
    credits_remaining: int
    usage: dict = Field(default_factory=dict)


@router.get("/models")
async def get_models():
    return {"models": list_models()}


@router.get("/credits")
async def get_credits(current_user: CurrentUserDep, db: DatabaseDep):
    return await InsightsService(db).credits(current_user.id)


@router.post("/insights", response_model=InsightResponse)
async def generate_insights(body: InsightRequest, current_user: CurrentUserDep, db: DatabaseDep):
    return await InsightsService(db).generate(
        current_user.id,
        body.query,
        analysis_type=body.analysis_type,
        model=body.model,
        include_data=body.include_data,
    )


@router.post("/risk-analysis", response_model=InsightResponse)
async def risk_analysis(body: FocusedRequest, current_user: CurrentUserDep, db: DatabaseDep):
    return await InsightsService(db).generate(
        current_user.id,
        body.query or "Which failure modes carry the most risk and how should we mitigate them?",
        analysis_type=AnalysisType.RISK,
        model=body.model,
    )


@router.post("/predictive-analysis", response_model=InsightResponse)
async def predictive_analysis(body: FocusedRequest, current_user: CurrentUserDep, db: DatabaseDep):
    return await InsightsService(db).generate(
        current_user.id,
        body.query or "Which assets are most likely to fail next and when should we intervene?",
        analysis_type=AnalysisType.PREDICTIVE,
        model=body.model,
    )

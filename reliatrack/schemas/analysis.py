"""
FMEA / RCA / RCM request and response schemas.
"""

from datetime import date, datetime
from typing import Annotated, Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)

from reliatrack.models.analysis import AnalysisStatus, Criticality
from reliatrack.schemas import reject_null
from reliatrack.services.risk import RPNMismatchError, verify_rpn

Rating = Annotated[int, Field(ge=1, le=10)]


class FMEAFields(BaseModel):
    component: str = Field(..., min_length=1, max_length=255)
    failure_mode: str = Field(..., min_length=1, max_length=500)
    effects: str = Field(..., min_length=1)
    causes: str | None = None
    controls: str | None = None
    severity: Rating
    occurrence: Rating
    detection: Rating
    rpn: int | None = Field(None, description="Optional; must equal severity x occurrence x detection")
    actions: str | None = None
    responsible: str | None = None
    due_date: date | None = None
    status: AnalysisStatus = AnalysisStatus.OPEN

    @field_validator("rpn")
    @classmethod
    def rpn_matches_ratings(cls, value: int | None, info: ValidationInfo) -> int | None:
        ratings = [info.data.get(name) for name in ("severity", "occurrence", "detection")]
        if value is None or None in ratings:
            return value
        try:
            return verify_rpn(*ratings, supplied=value)
        except RPNMismatchError as exc:
            raise ValueError(str(exc)) from exc

    @model_validator(mode="after")
    def fill_rpn(self):
        self.rpn = verify_rpn(self.severity, self.occurrence, self.detection)
        return self


class FMEACreate(FMEAFields):
    asset_id: str


class FMEAUpdate(BaseModel):
    """Partial update. The RPN is rechecked against the merged ratings."""
    component: str | None = Field(None, min_length=1, max_length=255)
    failure_mode: str | None = Field(None, min_length=1, max_length=500)
    effects: str | None = Field(None, min_length=1)
    causes: str | None = None
    controls: str | None = None
    severity: int | None = Field(None, ge=1, le=10)
    occurrence: int | None = Field(None, ge=1, le=10)
    detection: int | None = Field(None, ge=1, le=10)
    rpn: int | None = None
    actions: str | None = None
    responsible: str | None = None
    due_date: date | None = None
    status: AnalysisStatus | None = None

    @field_validator(
        "component", "failure_mode", "effects", "severity", "occurrence", "detection", "status",
        mode="before",
    )
    @classmethod
    def required_not_null(cls, value: Any) -> Any:
        return reject_null(value)


class FMEAResponse(FMEAFields):
    model_config = ConfigDict(from_attributes=True)

    id: str
    asset_id: str
    asset_name: str | None = None
    created_by: str | None = None
    created_at: datetime
    updated_at: datetime


class WhyAnswer(BaseModel):
    why: str
    answer: str = ""


class RCAFields(BaseModel):
    failure_date: date | None = None
    problem_description: str = Field(..., min_length=1)
    immediate_actions: str | None = None
    root_causes: str | None = None
    corrective_actions: str | None = None
    preventive_actions: str | None = None
    responsible: str | None = None
    cost: float = Field(0.0, ge=0)
    status: AnalysisStatus = AnalysisStatus.OPEN
    five_whys: list[WhyAnswer] = Field(default_factory=list)
    fishbone_diagram: dict[str, list[str]] = Field(default_factory=dict)


class RCACreate(RCAFields):
    asset_id: str


class RCAResponse(RCAFields):
    model_config = ConfigDict(from_attributes=True)

    id: str
    asset_id: str
    asset_name: str | None = None
    created_by: str | None = None
    created_at: datetime
    updated_at: datetime


class QuickRCACreate(BaseModel):
    """Five-whys shorthand."""
    asset_id: str
    problem: str = Field(..., min_length=1)
    whys: list[str] = Field(..., min_length=5, max_length=5)
    fishbone: dict[str, list[str]] = Field(default_factory=dict)


class RCMCreate(BaseModel):
    asset_id: str
    task: str = Field(..., min_length=1, max_length=500)
    interval: int = Field(..., ge=1, description="Days between executions")
    criticality: Criticality


class RCMResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    asset_id: str
    task: str
    interval: int = Field(validation_alias=AliasChoices("interval", "interval_days"))
    criticality: Criticality
    created_by: str | None = None
    created_at: datetime


class AnalysisSummary(BaseModel):
    total_fmea: int
    total_rca: int
    open_fmea: int
    open_rca: int
    high_risk_fmea: int


class AllAnalysisResponse(BaseModel):
    fmea: list[FMEAResponse]
    rca: list[RCAResponse]
    summary: AnalysisSummary

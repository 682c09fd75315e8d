"""
Asset request/response schemas.
"""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from reliatrack.models.asset import Asset, AssetCondition, AssetStatus
from reliatrack.schemas import PaginatedResponse, reject_null


def _check_year(value: int | None) -> int | None:
    current_year = date.today().year
    if value is not None and value > current_year:
        raise ValueError(f"must be between 1900 and {current_year}")
    return value


class AssetBase(BaseModel):
    """Fields shared by create and response models."""
    name: str = Field(..., min_length=1, max_length=255)
    type: str = Field(..., min_length=1, max_length=100)
    manufacturer: str = Field(..., min_length=1, max_length=255)
    model: str = Field(..., min_length=1, max_length=255)
    serial_number: str = Field(..., min_length=1, max_length=255)
    location: str = Field(..., min_length=1, max_length=255)
    year_manufactured: int | None = Field(None, ge=1900)
    status: AssetStatus = AssetStatus.OPERATIONAL
    condition: AssetCondition = AssetCondition.GOOD
    purchase_date: date | None = None
    purchase_price: float | None = Field(None, ge=0)
    warranty_expiry: date | None = None
    last_service_date: date | None = None
    next_service_date: date | None = None
    next_due_date: date | None = None
    maintenance_interval_days: int | None = Field(None, ge=1)
    operating_hours: float | None = Field(None, ge=0)
    notes: str | None = None


class AssetCreate(AssetBase):
    """Schema for creating an asset."""

    @field_validator("year_manufactured")
    @classmethod
    def year_not_in_future(cls, value: int | None) -> int | None:
        return _check_year(value)


class AssetUpdate(BaseModel):
    """Schema for partial updates; omitted fields are left as-is."""
    name: str | None = Field(None, min_length=1, max_length=255)
    type: str | None = Field(None, min_length=1, max_length=100)
    manufacturer: str | None = Field(None, min_length=1, max_length=255)
    model: str | None = Field(None, min_length=1, max_length=255)
    serial_number: str | None = Field(None, min_length=1, max_length=255)
    location: str | None = Field(None, min_length=1, max_length=255)
    year_manufactured: int | None = Field(None, ge=1900)
    status: AssetStatus | None = None
    condition: AssetCondition | None = None
    purchase_date: date | None = None
    purchase_price: float | None = Field(None, ge=0)
    warranty_expiry: date | None = None
    last_service_date: date | None = None
    next_service_date: date | None = None
    next_due_date: date | None = None
    maintenance_interval_days: int | None = Field(None, ge=1)
    operating_hours: float | None = Field(None, ge=0)
    notes: str | None = None

    @field_validator(
        "name", "type", "manufacturer", "model", "serial_number", "location",
        "status", "condition",
        mode="before",
    )
    @classmethod
    def required_not_null(cls, value: Any) -> Any:
        return reject_null(value)

    @field_validator("year_manufactured")
    @classmethod
    def year_not_in_future(cls, value: int | None) -> int | None:
        return _check_year(value)


class AssetStatusUpdate(BaseModel):
    status: AssetStatus


class AssetResponse(AssetBase):
    """Schema for asset response."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    organization_id: str | None = None
    age: int | None = None
    days_until_service: int | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_asset(cls, asset: Asset) -> "AssetResponse":
        data: dict[str, Any] = {
            column.key: getattr(asset, column.key)
            for column in Asset.__table__.columns
        }
        data["age"] = asset.age()
        data["days_until_service"] = asset.days_until_service()
        return cls.model_validate(data)


class AssetListResponse(BaseModel):
    items: list[AssetResponse]
    total: int


class AssetPage(PaginatedResponse):
    items: list[AssetResponse]

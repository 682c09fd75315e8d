"""
Service provider directory routes.
"""

from typing import Literal

from fastapi import APIRouter, Query, status
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from reliatrack.api.dependencies import CurrentUserDep, DatabaseDep
from reliatrack.models.provider import Provider, ProviderTier, ServiceCategory
from reliatrack.services.exceptions import ValidationFailed
from reliatrack.services.provider_service import ProviderService

router = APIRouter()


class ProviderCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    service_type: ServiceCategory = ServiceCategory.OTHER
    description: str | None = None
    phone: str | None = None
    email: EmailStr | None = None
    website: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    radius: float = Field(50.0, gt=0, le=500, description="Service radius in miles")
    place_id: str | None = None


class ProviderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    service_type: ServiceCategory
    description: str | None = None
    phone: str | None = None
    email: str | None = None
    website: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    lat: float
    lng: float
    radius: float
    verified: bool
    rating: float | None = None
    subscription_tier: ProviderTier
    distance: float | None = Field(None, description="Miles from the query point")


class ProviderSearchResponse(BaseModel):
    providers: list[ProviderResponse]
    count: int


class ClaimRequest(BaseModel):
    provider_id: str
    business_license: str


class SubscribeRequest(BaseModel):
    provider_id: str
    email: EmailStr
    tier: Literal["verified", "contact", "promoted"]


def _with_distance(provider: Provider, distance: float | None = None) -> ProviderResponse:
    response = ProviderResponse.model_validate(provider)
    response.distance = round(distance, 2) if distance is not None else None
    return response


@router.get("", response_model=ProviderSearchResponse)
async def search_providers(
    db: DatabaseDep,
    lat: float | None = Query(None, ge=-90, le=90),
    lng: float | None = Query(None, ge=-180, le=180),
    radius: float = Query(25, ge=10, le=50, description="Miles"),
    service_type: str = Query("all", description="Service category or \"all\""),
    limit: int = Query(10, ge=1, le=20),
):
    """
    Find providers serving a location, nearest first.

    A provider matches when its distance is within the larger of its own
    service radius and the requested radius.
    """
    if lat is None or lng is None:
        raise ValidationFailed(
            "Validation error",
            errors=[
                {"field": name, "message": "Field required"}
                for name, value in (("lat", lat), ("lng", lng))
                if value is None
            ],
        )

    category = None
    if service_type != "all":
        try:
            category = ServiceCategory(service_type)
        except ValueError:
            raise ValidationFailed.for_field("service_type", f"Unknown service type '{service_type}'")

    matches = await ProviderService(db).search(
        lat,
        lng,
        radius,
        service_type=category,
        limit=limit,
    )
    providers = [_with_distance(provider, distance) for provider, distance in matches]
    return ProviderSearchResponse(providers=providers, count=len(providers))


@router.post("", response_model=ProviderResponse, status_code=status.HTTP_201_CREATED)
async def register_provider(body: ProviderCreate, current_user: CurrentUserDep, db: DatabaseDep):
    provider = await ProviderService(db).register(current_user.id, body.model_dump())
    return _with_distance(provider)


@router.post("/claim", response_model=ProviderResponse)
async def claim_provider(body: ClaimRequest, current_user: CurrentUserDep, db: DatabaseDep):
    """Claim a listing by submitting a business license; the listing becomes verified."""
    provider = await ProviderService(db).claim(
        current_user.id, body.provider_id, body.business_license
    )
    return _with_distance(provider)


@router.post("/subscribe")
async def subscribe_provider(body: SubscribeRequest, current_user: CurrentUserDep, db: DatabaseDep):
    result = await ProviderService(db).subscribe(
        current_user.id,
        body.provider_id,
        body.email,
        ProviderTier(body.tier),
    )
    return {
        "provider": _with_distance(result["provider"]),
        "subscription_id": result["subscription_id"],
        "status": result["status"],
    }


@router.get("/{provider_id}", response_model=ProviderResponse)
async def get_provider(provider_id: str, db: DatabaseDep):
    return _with_distance(await ProviderService(db).get(provider_id))

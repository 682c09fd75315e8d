"""
Pydantic schemas shared across API routes.

Resource-specific request/response models live next to their resource in
``schemas/<resource>.py``; small route-local models stay in the route module.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr

from reliatrack.models.user import MemberRole, SubscriptionTier


def reject_null(value: Any) -> Any:
    """Before-validator for partial updates whose column cannot be cleared."""
    if value is None:
        raise ValueError("may not be null")
    return value


class PaginatedResponse(BaseModel):
    """Paginated list response."""
    items: list[Any]
    total: int
    page: int
    page_size: int
    total_pages: int


class UserResponse(BaseModel):
    """User information response."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: EmailStr
    first_name: str
    last_name: str
    company: str | None = None
    phone: str | None = None
    organization_id: str | None = None
    role: MemberRole | None = None
    subscription_tier: SubscriptionTier
    trial_ending: bool = False
    ai_credits: int = 0
    notify_email: bool = True
    notify_sms: bool = False
    created_at: datetime


class TokenResponse(BaseModel):
    """Authentication token response."""
    token: str
    token_type: str = "bearer"
    user: UserResponse

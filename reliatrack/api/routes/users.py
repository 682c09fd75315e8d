"""
User profile routes.
"""

from fastapi import APIRouter
from pydantic import BaseModel, Field

from reliatrack.api.dependencies import CurrentUserDep, DatabaseDep
from reliatrack.schemas import UserResponse

router = APIRouter()


class NotificationPreferences(BaseModel):
    email: bool | None = None
    sms: bool | None = None


class ProfileUpdate(BaseModel):
    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    company: str | None = None
    phone: str | None = None
    notifications: NotificationPreferences | None = None


@router.get("/profile", response_model=UserResponse)
async def get_profile(current_user: CurrentUserDep):
    return current_user


@router.put("/profile", response_model=UserResponse)
async def update_profile(body: ProfileUpdate, current_user: CurrentUserDep, db: DatabaseDep):
    """Update profile fields and notification preferences."""
    update_data = body.model_dump(exclude_unset=True, exclude={"notifications"})
    for field, value in update_data.items():
        if value is not None:
            setattr(current_user, field, value)

    if body.notifications is not None:
        if body.notifications.email is not None:
            current_user.notify_email = body.notifications.email
        if body.notifications.sms is not None:
            current_user.notify_sms = body.notifications.sms

    await db.flush()
    return current_user

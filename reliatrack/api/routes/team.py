"""
Team management routes: members, invitations and roles.
"""

from datetime import datetime

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, ConfigDict, EmailStr

from reliatrack.api.dependencies import CurrentUserDep, DatabaseDep
from reliatrack.models.invitation import InvitationStatus, TeamInvitation
from reliatrack.models.user import MemberRole
from reliatrack.services.team_service import TeamService, invite_url

router = APIRouter()


class InviteRequest(BaseModel):
    email: EmailStr
    role: MemberRole = MemberRole.TECHNICIAN


class JoinRequest(BaseModel):
    token: str


class RoleUpdate(BaseModel):
    role: MemberRole


class MemberResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    first_name: str
    last_name: str
    role: MemberRole | None = None
    created_at: datetime


class InvitationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    role: MemberRole
    status: InvitationStatus
    expires_at: datetime
    created_at: datetime


def _invitation_payload(invitation: TeamInvitation) -> dict:
    return {
        **InvitationResponse.model_validate(invitation).model_dump(),
        "token": invitation.token,
        "invite_url": invite_url(invitation.token),
    }


@router.get("/members", response_model=list[MemberResponse])
async def list_members(current_user: CurrentUserDep, db: DatabaseDep):
    """Organization members, owners first."""
    return await TeamService(db).members(current_user.id)


@router.post("/invite", status_code=status.HTTP_201_CREATED)
async def invite_member(body: InviteRequest, current_user: CurrentUserDep, db: DatabaseDep):
    """
    Invite someone by email. Owners only.

    Re-inviting an address with a pending invitation returns that invitation
    with 200 instead of creating another.
    """
    invitation, created = await TeamService(db).invite(current_user.id, body.email, body.role)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        content=jsonable_encoder({
            "invitation": _invitation_payload(invitation),
            "is_new": created,
        }),
    )


@router.get("/invitations", response_model=list[InvitationResponse])
async def list_invitations(current_user: CurrentUserDep, db: DatabaseDep):
    return await TeamService(db).pending_invitations(current_user.id)


@router.get("/invitation/{token}/validate")
async def validate_invitation(token: str, db: DatabaseDep):
    """Public: check a token before asking the visitor to sign up or log in."""
    details = await TeamService(db).validate(token)
    invitation = details["invitation"]
    return {
        "valid": True,
        "email": invitation.email,
        "role": invitation.role,
        "organization_name": details["organization_name"],
        "invited_by": details["invited_by"],
        "expires_at": invitation.expires_at,
    }


async def _accept(token: str, current_user, db) -> dict:
    organization = await TeamService(db).accept(current_user.id, token)
    return {
        "message": f"Joined {organization.name}",
        "organization": {"id": organization.id, "name": organization.name},
        "role": current_user.role,
        "subscription_tier": current_user.subscription_tier,
    }


@router.post("/invitation/{token}/accept")
async def accept_invitation(token: str, current_user: CurrentUserDep, db: DatabaseDep):
    return await _accept(token, current_user, db)


@router.post("/join")
async def join_team(body: JoinRequest, current_user: CurrentUserDep, db: DatabaseDep):
    return await _accept(body.token, current_user, db)


@router.put("/members/{member_id}/role", response_model=MemberResponse)
async def update_member_role(
    member_id: str,
    body: RoleUpdate,
    current_user: CurrentUserDep,
    db: DatabaseDep,
):
    return await TeamService(db).change_role(current_user.id, member_id, body.role)


@router.delete("/members/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_member(member_id: str, current_user: CurrentUserDep, db: DatabaseDep):
    await TeamService(db).remove_member(current_user.id, member_id)


@router.delete("/invitations/{invitation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_invitation(invitation_id: str, current_user: CurrentUserDep, db: DatabaseDep):
    await TeamService(db).cancel_invitation(current_user.id, invitation_id)

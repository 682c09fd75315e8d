"""
Team membership service: invitations, roles and removals.
"""

from datetime import timedelta
from typing import Any

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from reliatrack.config.settings import settings
from reliatrack.database.base import utcnow
from reliatrack.models.invitation import InvitationStatus, TeamInvitation
from reliatrack.models.organization import Organization
from reliatrack.models.user import MemberRole, User
from reliatrack.services.exceptions import ForbiddenError, NotFoundError, ValidationFailed
from reliatrack.services.organization_service import (
    attach_member,
    count_owners,
    detach_member,
    require_owner,
)
from reliatrack.services.permissions import get_user_or_404
from reliatrack.utils.logging import ServiceLogger, audit_logger
from reliatrack.utils.security import generate_invitation_token, mask_email


def invite_url(token: str) -> str:
    return f"{settings.frontend_url.rstrip('/')}/join?token={token}"


class TeamService:
    """Service for organization team management."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.logger = ServiceLogger("team")

    async def members(self, user_id: str) -> list[User]:
        """Owners first, then by first name."""
        user = await get_user_or_404(self.session, user_id)
        if user.organization_id is None:
            raise NotFoundError("You are not part of an organization")

        owner_first = case((User.role == MemberRole.OWNER, 0), else_=1)
        result = await self.session.execute(
            select(User)
            .where(User.organization_id == user.organization_id)
            .order_by(owner_first, User.first_name)
        )
        return list(result.scalars().all())

    async def invite(
        self,
        user_id: str,
        email: str,
        role: MemberRole = MemberRole.TECHNICIAN,
    ) -> tuple[TeamInvitation, bool]:
        """
        Invite ``email`` to the caller's organization.

        Returns:
            (invitation, created). A pending invitation for the same address
            is returned as-is with ``created`` False.
        """
        inviter = await get_user_or_404(self.session, user_id)
        require_owner(inviter, "invite")
        email = email.lower()

        member = (await self.session.execute(
            select(User.id).where(
                func.lower(User.email) == email,
                User.organization_id == inviter.organization_id,
            )
        )).scalar_one_or_none()
        if member is not None:
            raise ValidationFailed.for_field("email", "User is already a member of this organization")

        now = utcnow()
        pending = (await self.session.execute(
            select(TeamInvitation).where(
                TeamInvitation.organization_id == inviter.organization_id,
                TeamInvitation.email == email,
                TeamInvitation.status == InvitationStatus.PENDING,
                TeamInvitation.expires_at > now,
            )
        )).scalars().first()
        if pending is not None:
            return pending, False

        invitation = TeamInvitation(
            organization_id=inviter.organization_id,
            email=email,
            role=role,
            token=generate_invitation_token(),
            invited_by=inviter.id,
            status=InvitationStatus.PENDING,
            expires_at=now + timedelta(days=settings.invitation_expiry_days),
        )
        self.session.add(invitation)
        await self.session.flush()

        audit_logger.log_action(
            action="invite",
            user_id=inviter.id,
            organization_id=inviter.organization_id,
            resource_type="invitation",
            resource_id=invitation.id,
            new_values={"email": mask_email(email), "role": role.value},
        )
        return invitation, True

    async def pending_invitations(self, user_id: str) -> list[TeamInvitation]:
        user = await get_user_or_404(self.session, user_id)
        require_owner(user, "list_invitations")
        result = await self.session.execute(
            select(TeamInvitation)
            .where(
                TeamInvitation.organization_id == user.organization_id,
                TeamInvitation.status == InvitationStatus.PENDING,
                TeamInvitation.expires_at > utcnow(),
            )
            .order_by(TeamInvitation.created_at.desc())
        )
        return list(result.scalars().all())

    async def validate(self, token: str) -> dict[str, Any]:
        """
        Look up a usable invitation by token.

        An invitation found past its expiry is marked expired before the
        404 is raised.
        """
        invitation = (await self.session.execute(
            select(TeamInvitation).where(TeamInvitation.token == token)
        )).scalar_one_or_none()
        if invitation is None or invitation.status != InvitationStatus.PENDING:
            raise NotFoundError("Invitation not found or no longer valid")

        if invitation.is_expired():
            invitation.status = InvitationStatus.EXPIRED
            # Persist the status change even though the request fails
            await self.session.commit()
            raise NotFoundError("Invitation has expired")

        organization = await self.session.get(Organization, invitation.organization_id)
        inviter = (
            await self.session.get(User, invitation.invited_by)
            if invitation.invited_by
            else None
        )
        return {
            "invitation": invitation,
            "organization_name": organization.name if organization else None,
            "invited_by": inviter.full_name if inviter else None,
        }

    async def accept(self, user_id: str, token: str) -> Organization:
        user = await get_user_or_404(self.session, user_id)
        details = await self.validate(token)
        invitation: TeamInvitation = details["invitation"]

        if invitation.email.lower() != user.email.lower():
            audit_logger.log_permission_denied(
                user_id=user.id,
                organization_id=invitation.organization_id,
                resource_type="invitation",
                action="accept",
                reason="email_mismatch",
            )
            raise ForbiddenError("This invitation was sent to a different email address")
        if user.organization_id is not None:
            raise ValidationFailed("You are already part of an organization")

        await attach_member(self.session, user, invitation.organization_id, invitation.role)
        invitation.status = InvitationStatus.ACCEPTED
        invitation.accepted_at = utcnow()
        invitation.accepted_by = user.id
        await self.session.flush()

        audit_logger.log_action(
            action="join",
            user_id=user.id,
            organization_id=invitation.organization_id,
            resource_type="organization",
            resource_id=invitation.organization_id,
            new_values={"role": invitation.role.value},
        )
        return await self.session.get(Organization, invitation.organization_id)

    async def _member_of_same_org(self, owner: User, member_id: str) -> User:
        member = await self.session.get(User, member_id)
        if member is None or member.organization_id != owner.organization_id:
            raise NotFoundError("Team member not found")
        return member

    async def change_role(self, user_id: str, member_id: str, role: MemberRole) -> User:
        owner = await get_user_or_404(self.session, user_id)
        require_owner(owner, "change_role")
        member = await self._member_of_same_org(owner, member_id)

        if (
            member.role == MemberRole.OWNER
            and role != MemberRole.OWNER
            and await count_owners(self.session, owner.organization_id) <= 1
        ):
            raise ValidationFailed("Cannot demote the last owner of the organization")

        old_role = member.role
        member.role = role
        await self.session.flush()

        audit_logger.log_action(
            action="role_change",
            user_id=owner.id,
            organization_id=owner.organization_id,
            resource_type="user",
            resource_id=member.id,
            old_values={"role": old_role.value if old_role else None},
            new_values={"role": role.value},
        )
        return member

    async def remove_member(self, user_id: str, member_id: str) -> None:
        owner = await get_user_or_404(self.session, user_id)
        require_owner(owner, "remove_member")
        if member_id == owner.id:
            raise ValidationFailed("You cannot remove yourself. Use leave instead.")

        member = await self._member_of_same_org(owner, member_id)
        if (
            member.role == MemberRole.OWNER
            and await count_owners(self.session, owner.organization_id) <= 1
        ):
            raise ValidationFailed("Cannot remove the last owner of the organization")

        organization_id = owner.organization_id
        await detach_member(self.session, member)

        audit_logger.log_action(
            action="remove_member",
            user_id=owner.id,
            organization_id=organization_id,
            resource_type="user",
            resource_id=member.id,
        )

    async def cancel_invitation(self, user_id: str, invitation_id: str) -> None:
        owner = await get_user_or_404(self.session, user_id)
        require_owner(owner, "cancel_invitation")
        invitation = await self.session.get(TeamInvitation, invitation_id)
        if invitation is None or invitation.organization_id != owner.organization_id:
            raise NotFoundError("Invitation not found")

        invitation.status = InvitationStatus.CANCELLED
        await self.session.flush()

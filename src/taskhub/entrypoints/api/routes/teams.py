"""Team member management API routes."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends

from taskhub.core.rbac.types import TeamMembership, TeamRole
from taskhub.entrypoints.api.deps import get_membership_service
from taskhub.entrypoints.api.errors import success_body
from taskhub.entrypoints.api.middleware.jwt_auth import RequireTeamAdmin, RequireTeamMember
from taskhub.entrypoints.api.schemas import CamelModel
from taskhub.services.membership import TeamMembershipService

router = APIRouter(prefix="/teams", tags=["teams"])

MembershipServiceDep = Annotated[TeamMembershipService, Depends(get_membership_service)]


class AddMemberRequest(CamelModel):
    """Add member request body."""

    user_id: str
    role: TeamRole = TeamRole.DEV


class UpdateRoleRequest(CamelModel):
    """Role change request body."""

    role: TeamRole


def _membership_to_dict(membership: TeamMembership) -> dict[str, Any]:
    return {
        "teamId": membership.team_id,
        "userId": membership.user_id,
        "role": membership.role.value,
        "joinedAt": membership.joined_at.isoformat(),
    }


@router.get("/{team_id}/members")
async def list_members(
    team_id: str,
    team: RequireTeamMember,
    service: MembershipServiceDep,
) -> dict[str, Any]:
    """List the members of a team. Any member may call this."""
    members = await service.list_members(team_id)
    return success_body([_membership_to_dict(m) for m in members])


@router.post("/{team_id}/members", status_code=201)
async def add_member(
    team_id: str,
    body: AddMemberRequest,
    team: RequireTeamAdmin,
    service: MembershipServiceDep,
) -> dict[str, Any]:
    """Add a user to the team (admin only)."""
    membership = await service.add_member(team_id, body.user_id, body.role)
    return success_body(_membership_to_dict(membership))


@router.patch("/{team_id}/members/{user_id}")
async def update_member_role(
    team_id: str,
    user_id: str,
    body: UpdateRoleRequest,
    team: RequireTeamAdmin,
    service: MembershipServiceDep,
) -> dict[str, Any]:
    """Change a member's role (admin only)."""
    membership = await service.change_role(team_id, user_id, body.role)
    return success_body(_membership_to_dict(membership))


@router.delete("/{team_id}/members/{user_id}")
async def remove_member(
    team_id: str,
    user_id: str,
    team: RequireTeamAdmin,
    service: MembershipServiceDep,
) -> dict[str, Any]:
    """Remove a member from the team (admin only)."""
    await service.remove_member(team_id, user_id)
    return success_body({"message": "Member removed successfully"})

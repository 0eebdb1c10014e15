"""Team member management."""

import structlog

from taskhub.core.auth.repository import UserRepository
from taskhub.core.exceptions import MemberNotFoundError
from taskhub.core.rbac.permissions import ensure_can_add_member
from taskhub.core.rbac.repository import TeamMembershipRepository
from taskhub.core.rbac.types import TOP_ROLE, TeamMembership, TeamRole

logger = structlog.get_logger()


class TeamMembershipService:
    """Mutates team memberships after validating them through the permission rules.

    Callers are expected to have passed the team-membership gate with the
    admin role already; this service enforces the business invariants.
    """

    def __init__(self, memberships: TeamMembershipRepository, users: UserRepository) -> None:
        """Initialize the service."""
        self._memberships = memberships
        self._users = users

    async def create_team_owner(self, team_id: str, user_id: str) -> TeamMembership:
        """Make the creator of a new team its first admin."""
        membership = await self._memberships.add_member(team_id, user_id, TOP_ROLE)
        logger.info("team_owner_added", team_id=team_id, user_id=user_id)
        return membership

    async def list_members(self, team_id: str) -> list[TeamMembership]:
        """List a team's memberships."""
        return await self._memberships.list_members(team_id)

    async def add_member(
        self, team_id: str, user_id: str, role: TeamRole = TeamRole.DEV
    ) -> TeamMembership:
        """Add a user to a team.

        Raises:
            UserNotFoundError: If the user does not exist.
            AlreadyMemberError: If the user is already a member.
        """
        ensure_can_add_member(
            user_exists=await self._users.user_exists(user_id),
            existing=await self._memberships.get_membership(team_id, user_id),
        )
        membership = await self._memberships.add_member(team_id, user_id, role)
        logger.info("team_member_added", team_id=team_id, user_id=user_id, role=role.value)
        return membership

    async def change_role(self, team_id: str, user_id: str, role: TeamRole) -> TeamMembership:
        """Change a member's role.

        The last-admin check runs inside the repository's write, so two
        concurrent demotions cannot both pass it.

        Raises:
            MemberNotFoundError: If the user is not a member.
            LastAdminError: If this would demote the team's only admin.
        """
        target = await self._require_member(team_id, user_id)

        updated = await self._memberships.update_role(team_id, user_id, role)
        if updated is None:
            raise MemberNotFoundError()
        logger.info(
            "team_member_role_changed",
            team_id=team_id,
            user_id=user_id,
            old_role=target.role.value,
            new_role=role.value,
        )
        return updated

    async def remove_member(self, team_id: str, user_id: str) -> None:
        """Remove a member from a team.

        Raises:
            MemberNotFoundError: If the user is not a member.
            LastAdminError: If this would remove the team's only admin.
        """
        if not await self._memberships.remove_member(team_id, user_id):
            raise MemberNotFoundError()
        logger.info("team_member_removed", team_id=team_id, user_id=user_id)

    async def _require_member(self, team_id: str, user_id: str) -> TeamMembership:
        membership = await self._memberships.get_membership(team_id, user_id)
        if membership is None:
            raise MemberNotFoundError()
        return membership

"""Team membership repository protocol."""

from typing import Protocol, runtime_checkable

from taskhub.core.rbac.types import TeamMembership, TeamRole


@runtime_checkable
class TeamMembershipRepository(Protocol):
    """Protocol for team membership storage.

    One row per (team, user) pair.
    """

    async def get_membership(self, team_id: str, user_id: str) -> TeamMembership | None:
        """Get a user's membership in a team."""
        ...

    async def list_members(self, team_id: str) -> list[TeamMembership]:
        """List a team's memberships, oldest first."""
        ...

    async def count_admins(self, team_id: str) -> int:
        """Count members holding the top role."""
        ...

    async def add_member(self, team_id: str, user_id: str, role: TeamRole) -> TeamMembership:
        """Insert a membership row.

        Raises:
            AlreadyMemberError: If the pair already exists.
        """
        ...

    async def update_role(
        self, team_id: str, user_id: str, role: TeamRole
    ) -> TeamMembership | None:
        """Change a member's role. Returns None if there is no such member.

        The last-admin check and the write happen atomically.

        Raises:
            LastAdminError: If this would demote the team's only admin.
        """
        ...

    async def remove_member(self, team_id: str, user_id: str) -> bool:
        """Delete a membership row. Returns whether a row was removed.

        The last-admin check and the delete happen atomically.

        Raises:
            LastAdminError: If this would remove the team's only admin.
        """
        ...

"""In-memory team membership repository."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import UTC, datetime

from taskhub.core.exceptions import AlreadyMemberError
from taskhub.core.rbac.permissions import ensure_not_last_admin
from taskhub.core.rbac.types import TeamMembership, TeamRole


class InMemoryTeamMembershipRepository:
    """Dict-backed TeamMembershipRepository keyed by (team_id, user_id)."""

    def __init__(self) -> None:
        """Initialize empty storage."""
        self._rows: dict[tuple[str, str], TeamMembership] = {}
        self._lock = asyncio.Lock()

    async def get_membership(self, team_id: str, user_id: str) -> TeamMembership | None:
        """Get a user's membership in a team."""
        return self._rows.get((team_id, user_id))

    async def list_members(self, team_id: str) -> list[TeamMembership]:
        """List a team's memberships, oldest first."""
        members = [m for (tid, _), m in self._rows.items() if tid == team_id]
        return sorted(members, key=lambda m: m.joined_at)

    async def count_admins(self, team_id: str) -> int:
        """Count members holding the top role."""
        return self._admin_count(team_id)

    async def add_member(self, team_id: str, user_id: str, role: TeamRole) -> TeamMembership:
        """Insert a membership row."""
        async with self._lock:
            if (team_id, user_id) in self._rows:
                raise AlreadyMemberError()
            membership = TeamMembership(
                team_id=team_id,
                user_id=user_id,
                role=role,
                joined_at=datetime.now(UTC),
            )
            self._rows[(team_id, user_id)] = membership
            return membership

    async def update_role(
        self, team_id: str, user_id: str, role: TeamRole
    ) -> TeamMembership | None:
        """Change a member's role, refusing to demote the last admin."""
        async with self._lock:
            current = self._rows.get((team_id, user_id))
            if current is None:
                return None
            ensure_not_last_admin(current, self._admin_count(team_id), new_role=role)
            updated = replace(current, role=role)
            self._rows[(team_id, user_id)] = updated
            return updated

    async def remove_member(self, team_id: str, user_id: str) -> bool:
        """Delete a membership row, refusing to remove the last admin."""
        async with self._lock:
            current = self._rows.get((team_id, user_id))
            if current is None:
                return False
            ensure_not_last_admin(current, self._admin_count(team_id))
            del self._rows[(team_id, user_id)]
            return True

    def _admin_count(self, team_id: str) -> int:
        return sum(1 for m in self._rows.values() if m.team_id == team_id and m.is_admin)

"""Team membership repository."""

import logging
from datetime import UTC
from typing import Any
from uuid import uuid4

import asyncpg

from taskhub.adapters.db.app_db import AppDatabase, affected_rows
from taskhub.core.exceptions import AlreadyMemberError
from taskhub.core.rbac.permissions import ensure_not_last_admin
from taskhub.core.rbac.types import TOP_ROLE, TeamMembership, TeamRole

logger = logging.getLogger(__name__)


class PostgresTeamMembershipRepository:
    """Repository for team membership rows."""

    def __init__(self, db: AppDatabase) -> None:
        """Initialize the repository."""
        self._db = db

    async def get_membership(self, team_id: str, user_id: str) -> TeamMembership | None:
        """Get a user's membership in a team."""
        row = await self._db.fetch_one(
            """
            SELECT team_id, user_id, role, joined_at
            FROM team_members WHERE team_id = $1 AND user_id = $2
            """,
            team_id,
            user_id,
        )
        if not row:
            return None
        return self._row_to_membership(row)

    async def list_members(self, team_id: str) -> list[TeamMembership]:
        """List a team's memberships, oldest first."""
        rows = await self._db.fetch_all(
            """
            SELECT team_id, user_id, role, joined_at
            FROM team_members WHERE team_id = $1 ORDER BY joined_at ASC
            """,
            team_id,
        )
        return [self._row_to_membership(row) for row in rows]

    async def count_admins(self, team_id: str) -> int:
        """Count members holding the top role."""
        count = await self._db.fetch_val(
            "SELECT COUNT(*) FROM team_members WHERE team_id = $1 AND role = $2",
            team_id,
            TOP_ROLE.value,
        )
        return int(count or 0)

    async def add_member(self, team_id: str, user_id: str, role: TeamRole) -> TeamMembership:
        """Add a user to a team."""
        try:
            row = await self._db.execute_returning(
                """
                INSERT INTO team_members (id, team_id, user_id, role)
                VALUES ($1, $2, $3, $4)
                RETURNING team_id, user_id, role, joined_at
                """,
                str(uuid4()),
                team_id,
                user_id,
                role.value,
            )
        except asyncpg.UniqueViolationError:
            logger.info(f"User {user_id} is already a member of team {team_id}")
            raise AlreadyMemberError() from None
        assert row is not None, "INSERT RETURNING should always return a row"
        return self._row_to_membership(row)

    async def update_role(
        self, team_id: str, user_id: str, role: TeamRole
    ) -> TeamMembership | None:
        """Change a member's role, refusing to demote the team's last admin.

        The admin rows stay locked from the check until commit, so concurrent
        demotions are serialized and the second one sees the first.
        """
        async with self._db.transaction() as conn:
            current = await self._lock_for_admin_change(conn, team_id, user_id)
            if current is None:
                return None
            target, admin_count = current
            ensure_not_last_admin(target, admin_count, new_role=role)

            row = await conn.fetchrow(
                """
                UPDATE team_members SET role = $3
                WHERE team_id = $1 AND user_id = $2
                RETURNING team_id, user_id, role, joined_at
                """,
                team_id,
                user_id,
                role.value,
            )
        assert row is not None, "locked row should still exist"
        return self._row_to_membership(dict(row))

    async def remove_member(self, team_id: str, user_id: str) -> bool:
        """Remove a user from a team, refusing to remove the team's last admin."""
        async with self._db.transaction() as conn:
            current = await self._lock_for_admin_change(conn, team_id, user_id)
            if current is None:
                return False
            target, admin_count = current
            ensure_not_last_admin(target, admin_count)

            status = await conn.execute(
                "DELETE FROM team_members WHERE team_id = $1 AND user_id = $2",
                team_id,
                user_id,
            )
        return affected_rows(status) == 1

    async def _lock_for_admin_change(
        self, conn: asyncpg.Connection, team_id: str, user_id: str
    ) -> tuple[TeamMembership, int] | None:
        """Lock the team's admin rows and the target row.

        Returns the target membership and the admin count, or None if the user
        is not a member. Admin rows are locked in user_id order.
        """
        admins = await conn.fetch(
            """
            SELECT user_id FROM team_members
            WHERE team_id = $1 AND role = $2
            ORDER BY user_id
            FOR UPDATE
            """,
            team_id,
            TOP_ROLE.value,
        )
        row = await conn.fetchrow(
            """
            SELECT team_id, user_id, role, joined_at
            FROM team_members WHERE team_id = $1 AND user_id = $2
            FOR UPDATE
            """,
            team_id,
            user_id,
        )
        if row is None:
            return None
        return self._row_to_membership(dict(row)), len(admins)

    def _row_to_membership(self, row: dict[str, Any]) -> TeamMembership:
        """Convert database row to TeamMembership."""
        joined_at = row["joined_at"]
        return TeamMembership(
            team_id=str(row["team_id"]),
            user_id=str(row["user_id"]),
            role=TeamRole(row["role"]),
            joined_at=joined_at if joined_at.tzinfo else joined_at.replace(tzinfo=UTC),
        )

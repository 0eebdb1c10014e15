"""RBAC domain types."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class TeamRole(str, Enum):
    """Team membership roles."""

    ADMIN = "admin"
    MANAGER = "manager"
    DEV = "dev"
    GUEST = "guest"


# Role hierarchy - higher index = more permissions
ROLE_HIERARCHY = [TeamRole.GUEST, TeamRole.DEV, TeamRole.MANAGER, TeamRole.ADMIN]

TOP_ROLE = ROLE_HIERARCHY[-1]


def role_at_least(role: TeamRole, min_role: TeamRole) -> bool:
    """Whether `role` meets or exceeds `min_role` in the hierarchy."""
    return ROLE_HIERARCHY.index(role) >= ROLE_HIERARCHY.index(min_role)


@dataclass(frozen=True)
class TeamMembership:
    """A user's membership in a team."""

    team_id: str
    user_id: str
    role: TeamRole
    joined_at: datetime

    @property
    def is_admin(self) -> bool:
        """Whether the member holds the top role."""
        return self.role == TOP_ROLE


@dataclass(frozen=True)
class Task:
    """The fields of a task that permission decisions look at.

    `team_id` is None for tasks in the personal namespace.
    """

    id: str
    team_id: str | None
    created_by: str
    assigned_to: str | None = None

    @property
    def is_personal(self) -> bool:
        """Whether the task lives outside any team."""
        return self.team_id is None


@dataclass(frozen=True)
class Comment:
    """The fields of a task comment that permission decisions look at."""

    id: str
    task_id: str
    author_id: str

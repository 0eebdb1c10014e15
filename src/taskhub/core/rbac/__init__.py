"""RBAC core domain."""

from taskhub.core.rbac.permissions import (
    can_modify_comment,
    can_modify_task,
    ensure_can_add_member,
    ensure_can_modify_comment,
    ensure_can_modify_task,
    ensure_not_last_admin,
)
from taskhub.core.rbac.repository import TeamMembershipRepository
from taskhub.core.rbac.types import (
    ROLE_HIERARCHY,
    TOP_ROLE,
    Comment,
    Task,
    TeamMembership,
    TeamRole,
    role_at_least,
)

__all__ = [
    "ROLE_HIERARCHY",
    "TOP_ROLE",
    "Comment",
    "Task",
    "TeamMembership",
    "TeamMembershipRepository",
    "TeamRole",
    "can_modify_comment",
    "can_modify_task",
    "ensure_can_add_member",
    "ensure_can_modify_comment",
    "ensure_can_modify_task",
    "ensure_not_last_admin",
    "role_at_least",
]

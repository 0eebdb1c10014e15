"""Resource permission rules.

Each rule is a pure function over (actor, role, resource snapshot). A rule
returns None when the action is allowed and raises a TaskhubError otherwise,
so callers run them before mutating anything.
"""

from taskhub.core.exceptions import (
    AlreadyMemberError,
    ForbiddenError,
    LastAdminError,
    UserNotFoundError,
)
from taskhub.core.rbac.types import TOP_ROLE, Comment, Task, TeamMembership, TeamRole


def can_modify_task(actor_id: str, actor_role: TeamRole | None, task: Task) -> bool:
    """Whether the actor may edit or delete the task.

    Team tasks: the admin or the current assignee.
    Personal tasks: the creator or the assignee; roles do not apply.
    """
    if task.is_personal:
        return actor_id in (task.created_by, task.assigned_to)
    return actor_role == TOP_ROLE or (
        task.assigned_to is not None and task.assigned_to == actor_id
    )


def ensure_can_modify_task(actor_id: str, actor_role: TeamRole | None, task: Task) -> None:
    """Raise ForbiddenError unless the actor may edit or delete the task."""
    if not can_modify_task(actor_id, actor_role, task):
        raise ForbiddenError("Only admins or the assigned user can modify this task")


def can_modify_comment(actor_id: str, actor_role: TeamRole | None, comment: Comment) -> bool:
    """Whether the actor may edit or delete the comment."""
    return actor_role == TOP_ROLE or comment.author_id == actor_id


def ensure_can_modify_comment(
    actor_id: str, actor_role: TeamRole | None, comment: Comment
) -> None:
    """Raise ForbiddenError unless the actor may edit or delete the comment."""
    if not can_modify_comment(actor_id, actor_role, comment):
        raise ForbiddenError("You can only modify your own comments")


def ensure_not_last_admin(
    target: TeamMembership,
    admin_count: int,
    new_role: TeamRole | None = None,
) -> None:
    """Reject removing or demoting the team's only admin.

    Args:
        target: Membership about to be removed or changed.
        admin_count: Current number of admins in the team.
        new_role: Role being assigned, or None for a removal.

    Raises:
        LastAdminError: If the team would be left without an admin.
    """
    if not target.is_admin or new_role == TOP_ROLE:
        return
    if admin_count <= 1:
        if new_role is None:
            raise LastAdminError("Cannot remove the last admin")
        raise LastAdminError("Cannot demote the last admin")


def ensure_can_add_member(user_exists: bool, existing: TeamMembership | None) -> None:
    """Validate adding a user to a team.

    Raises:
        UserNotFoundError: If the target user does not exist.
        AlreadyMemberError: If the user is already a member.
    """
    if not user_exists:
        raise UserNotFoundError()
    if existing is not None:
        raise AlreadyMemberError()

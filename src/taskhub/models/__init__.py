"""Relational schema."""

from taskhub.models.base import BaseModel, metadata
from taskhub.models.task import Task, TaskComment
from taskhub.models.team import Team, TeamMember
from taskhub.models.user import RefreshToken, User

__all__ = [
    "BaseModel",
    "metadata",
    "User",
    "RefreshToken",
    "Team",
    "TeamMember",
    "Task",
    "TaskComment",
]

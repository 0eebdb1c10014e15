"""API middleware."""

from taskhub.entrypoints.api.middleware.jwt_auth import (
    AuthContext,
    CurrentUser,
    RequireTeamAdmin,
    RequireTeamMember,
    TeamContext,
    require_team_member,
    verify_jwt,
)

__all__ = [
    "AuthContext",
    "TeamContext",
    "verify_jwt",
    "require_team_member",
    "CurrentUser",
    "RequireTeamMember",
    "RequireTeamAdmin",
]

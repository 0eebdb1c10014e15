"""JWT authentication and team membership gates."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Annotated, Any

import structlog
from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from taskhub.core.auth.jwt import TokenCodec
from taskhub.core.exceptions import ForbiddenError, InvalidTokenError, UnauthorizedError
from taskhub.core.rbac.repository import TeamMembershipRepository
from taskhub.core.rbac.types import TeamRole, role_at_least
from taskhub.entrypoints.api.deps import get_membership_repo, get_token_codec

logger = structlog.get_logger()

# Use Bearer token authentication
bearer_scheme = HTTPBearer(auto_error=False)

# Same message for every failure so callers learn nothing about the cause
UNAUTHORIZED_MESSAGE = "Invalid or missing access token"


@dataclass
class AuthContext:
    """Identity from a verified access token."""

    user_id: str
    email: str


@dataclass
class TeamContext:
    """Identity plus the caller's role in the team named by the route."""

    user_id: str
    email: str
    team_id: str
    role: TeamRole


async def verify_jwt(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Security(bearer_scheme),  # noqa: B008
    codec: TokenCodec = Depends(get_token_codec),  # noqa: B008
) -> AuthContext:
    """Verify the bearer access token and return the caller's identity.

    Args:
        request: The current request.
        credentials: Bearer token credentials.
        codec: Token codec.

    Returns:
        AuthContext with user info.

    Raises:
        UnauthorizedError: If the token is missing, malformed, badly signed, or expired.
    """
    if not credentials:
        raise UnauthorizedError(UNAUTHORIZED_MESSAGE)

    try:
        claims = codec.verify_access_token(credentials.credentials)
    except InvalidTokenError as e:
        logger.warning("jwt_validation_failed", reason=e.message)
        raise UnauthorizedError(UNAUTHORIZED_MESSAGE) from None

    context = AuthContext(user_id=claims.user_id, email=claims.email)

    # Store in request state for downstream use
    request.state.user = context

    logger.debug("jwt_verified", user_id=context.user_id)

    return context


def require_team_member(min_role: TeamRole | None = None) -> Callable[..., Any]:
    """Dependency to require membership in the route's team.

    Role hierarchy (lowest to highest):
    - guest: read-only access
    - dev: works on tasks
    - manager: organizes the team's work
    - admin: manages members and settings

    Usage:
        @router.delete("/teams/{team_id}/members/{user_id}")
        async def remove_member(
            team: Annotated[TeamContext, Depends(require_team_member(TeamRole.ADMIN))],
        ):
            ...

    Args:
        min_role: Minimum required role, or None for any member.

    Returns:
        Dependency function that validates membership and role.
    """

    async def membership_checker(
        team_id: str,
        request: Request,
        auth: Annotated[AuthContext, Depends(verify_jwt)],
        memberships: Annotated[TeamMembershipRepository, Depends(get_membership_repo)],
    ) -> TeamContext:
        membership = await memberships.get_membership(team_id, auth.user_id)
        if membership is None:
            logger.info("team_gate_denied", team_id=team_id, user_id=auth.user_id)
            raise ForbiddenError("Not a team member")

        if min_role is not None and not role_at_least(membership.role, min_role):
            logger.info(
                "team_gate_denied",
                team_id=team_id,
                user_id=auth.user_id,
                role=membership.role.value,
                required=min_role.value,
            )
            raise ForbiddenError("Insufficient role")

        context = TeamContext(
            user_id=auth.user_id,
            email=auth.email,
            team_id=team_id,
            role=membership.role,
        )
        request.state.team = context
        return context

    return membership_checker


# Common dependencies for convenience
CurrentUser = Annotated[AuthContext, Depends(verify_jwt)]
RequireTeamMember = Annotated[TeamContext, Depends(require_team_member())]
RequireTeamAdmin = Annotated[TeamContext, Depends(require_team_member(TeamRole.ADMIN))]

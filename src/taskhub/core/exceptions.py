"""Domain-specific exceptions.

All request-level failures in taskhub inherit from TaskhubError and carry a
machine-readable ErrorKind. The core stays transport-agnostic: the API layer
maps each kind to a status code exactly once (see entrypoints.api.errors).
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of business failure kinds.

    Values double as the wire error codes.
    """

    EMAIL_EXISTS = "EMAIL_EXISTS"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    ALREADY_MEMBER = "ALREADY_MEMBER"
    LAST_ADMIN = "LAST_ADMIN"


class ConfigurationError(Exception):
    """Invalid process configuration, raised at startup."""

    pass


class TaskhubError(Exception):
    """Base exception for all taskhub business errors.

    Subclasses pin `kind` and a default message. None of these are retried:
    each reflects invalid input or a definitive policy decision.

    Attributes:
        kind: Machine-readable failure kind.
        code: Wire code; defaults to the kind value.
        message: Human-readable description.
    """

    kind: ErrorKind = ErrorKind.FORBIDDEN
    code: str | None = None
    default_message: str = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        """Initialize with an optional message override.

        Args:
            message: Error description. Falls back to the class default.
        """
        self.message = message or self.default_message
        super().__init__(self.message)
        if self.code is None:
            self.code = self.kind.value


class EmailExistsError(TaskhubError):
    """Email already registered to another user."""

    kind = ErrorKind.EMAIL_EXISTS
    default_message = "Email already registered"


class InvalidCredentialsError(TaskhubError):
    """Login failed.

    Deliberately does not say whether the email or the password was wrong.
    """

    kind = ErrorKind.INVALID_CREDENTIALS
    default_message = "Invalid email or password"


class InvalidTokenError(TaskhubError):
    """Token not found, malformed, badly signed, or already consumed."""

    kind = ErrorKind.INVALID_TOKEN
    default_message = "Invalid refresh token"


class TokenExpiredError(InvalidTokenError):
    """Refresh token found but past its expiry."""

    kind = ErrorKind.TOKEN_EXPIRED
    default_message = "Refresh token expired"


class UnauthorizedError(TaskhubError):
    """Missing, invalid, or expired access token."""

    kind = ErrorKind.UNAUTHORIZED
    default_message = "Unauthorized"


class ForbiddenError(TaskhubError):
    """Authenticated but lacking the required role or ownership."""

    kind = ErrorKind.FORBIDDEN
    default_message = "Forbidden"


class NotFoundError(TaskhubError):
    """Referenced user, team, task, or comment does not exist."""

    kind = ErrorKind.NOT_FOUND
    default_message = "Not found"


class UserNotFoundError(NotFoundError):
    """Target user does not exist."""

    code = "USER_NOT_FOUND"
    default_message = "User not found"


class MemberNotFoundError(NotFoundError):
    """User is not a member of the team."""

    code = "MEMBER_NOT_FOUND"
    default_message = "Team member not found"


class AlreadyMemberError(TaskhubError):
    """Membership row already exists for the (team, user) pair."""

    kind = ErrorKind.ALREADY_MEMBER
    default_message = "User is already a team member"


class LastAdminError(TaskhubError):
    """Operation would leave the team without an admin."""

    kind = ErrorKind.LAST_ADMIN
    default_message = "Cannot remove the last admin"

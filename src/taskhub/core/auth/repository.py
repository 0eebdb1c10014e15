"""Repository protocols for users and refresh tokens."""

from datetime import datetime
from typing import Protocol, runtime_checkable

from taskhub.core.auth.types import RefreshTokenRecord, User


@runtime_checkable
class UserRepository(Protocol):
    """Protocol for user database operations.

    Implementations provide actual database access (PostgreSQL, memory).
    """

    async def get_user_by_id(self, user_id: str) -> User | None:
        """Get user by ID."""
        ...

    async def get_user_by_email(self, email: str) -> User | None:
        """Get user by email address."""
        ...

    async def create_user(
        self,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
    ) -> User:
        """Create a new user.

        Raises:
            EmailExistsError: If the email is taken (storage-level uniqueness).
        """
        ...

    async def update_user(
        self,
        user_id: str,
        email: str | None = None,
        password_hash: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> User | None:
        """Update user fields. Returns None if the user does not exist."""
        ...

    async def user_exists(self, user_id: str) -> bool:
        """Check whether a user ID exists."""
        ...


@runtime_checkable
class RefreshTokenLedger(Protocol):
    """Protocol for refresh token storage.

    Rows are keyed by the token hash; the plaintext token is never stored.
    The AuthService is the only writer.
    """

    async def store(self, user_id: str, token_hash: str, expires_at: datetime) -> None:
        """Insert one record."""
        ...

    async def find_by_hash(self, token_hash: str) -> RefreshTokenRecord | None:
        """Look up a record by token hash."""
        ...

    async def consume(self, token_hash: str) -> RefreshTokenRecord | None:
        """Atomically delete a record and return it.

        At most one concurrent caller receives the row for a given hash;
        every other caller gets None.
        """
        ...

    async def delete_by_hash(self, token_hash: str) -> bool:
        """Delete a record. Idempotent; returns whether a row was removed."""
        ...

    async def delete_for_user(self, user_id: str, token_hash: str) -> bool:
        """Delete a record only if it belongs to the given user."""
        ...

    async def delete_all_for_user(self, user_id: str) -> int:
        """Delete every record of a user. Returns the count removed."""
        ...

    async def delete_expired(self, now: datetime) -> int:
        """Purge records whose expiry has passed. Returns the count removed."""
        ...

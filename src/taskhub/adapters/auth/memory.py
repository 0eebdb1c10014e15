"""In-memory user repository and refresh token ledger.

Used by the test suite and for local development without Postgres.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from uuid import uuid4

from taskhub.core.auth.types import RefreshTokenRecord, User
from taskhub.core.exceptions import EmailExistsError


class InMemoryUserRepository:
    """Dict-backed UserRepository."""

    def __init__(self) -> None:
        """Initialize empty storage."""
        self._users: dict[str, User] = {}
        self._lock = asyncio.Lock()

    async def get_user_by_id(self, user_id: str) -> User | None:
        """Get user by ID."""
        return self._users.get(user_id)

    async def get_user_by_email(self, email: str) -> User | None:
        """Get user by email address."""
        return next((u for u in self._users.values() if u.email == email), None)

    async def create_user(
        self,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
    ) -> User:
        """Create a new user."""
        async with self._lock:
            if any(u.email == email for u in self._users.values()):
                raise EmailExistsError()
            now = datetime.now(UTC)
            user = User(
                id=str(uuid4()),
                email=email,
                password_hash=password_hash,
                first_name=first_name,
                last_name=last_name,
                created_at=now,
                updated_at=now,
            )
            self._users[user.id] = user
            return user

    async def update_user(
        self,
        user_id: str,
        email: str | None = None,
        password_hash: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> User | None:
        """Update user fields."""
        async with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None
            changes = {
                key: value
                for key, value in {
                    "email": email,
                    "password_hash": password_hash,
                    "first_name": first_name,
                    "last_name": last_name,
                }.items()
                if value is not None
            }
            if not changes:
                return user
            if "email" in changes and any(
                u.email == email and u.id != user_id for u in self._users.values()
            ):
                raise EmailExistsError()
            updated = user.model_copy(update={**changes, "updated_at": datetime.now(UTC)})
            self._users[user_id] = updated
            return updated

    async def user_exists(self, user_id: str) -> bool:
        """Check whether a user ID exists."""
        return user_id in self._users


class InMemoryRefreshTokenLedger:
    """Dict-backed RefreshTokenLedger keyed by token hash."""

    def __init__(self) -> None:
        """Initialize empty storage."""
        self._records: dict[str, RefreshTokenRecord] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._records)

    async def store(self, user_id: str, token_hash: str, expires_at: datetime) -> None:
        """Insert one record."""
        async with self._lock:
            self._records[token_hash] = RefreshTokenRecord(
                user_id=user_id,
                token_hash=token_hash,
                expires_at=expires_at,
                created_at=datetime.now(UTC),
            )

    async def find_by_hash(self, token_hash: str) -> RefreshTokenRecord | None:
        """Look up a record by token hash."""
        return self._records.get(token_hash)

    async def consume(self, token_hash: str) -> RefreshTokenRecord | None:
        """Atomically delete a record and return it."""
        async with self._lock:
            return self._records.pop(token_hash, None)

    async def delete_by_hash(self, token_hash: str) -> bool:
        """Delete a record by hash."""
        async with self._lock:
            return self._records.pop(token_hash, None) is not None

    async def delete_for_user(self, user_id: str, token_hash: str) -> bool:
        """Delete a record only if it belongs to the given user."""
        async with self._lock:
            record = self._records.get(token_hash)
            if record is None or record.user_id != user_id:
                return False
            del self._records[token_hash]
            return True

    async def delete_all_for_user(self, user_id: str) -> int:
        """Delete every record of a user."""
        async with self._lock:
            doomed = [h for h, r in self._records.items() if r.user_id == user_id]
            for token_hash in doomed:
                del self._records[token_hash]
            return len(doomed)

    async def delete_expired(self, now: datetime) -> int:
        """Purge records whose expiry has passed."""
        async with self._lock:
            doomed = [h for h, r in self._records.items() if r.expires_at < now]
            for token_hash in doomed:
                del self._records[token_hash]
            return len(doomed)

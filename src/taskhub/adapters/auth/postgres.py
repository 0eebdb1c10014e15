"""PostgreSQL implementations of the user repository and refresh token ledger."""

from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

import asyncpg

from taskhub.adapters.db.app_db import AppDatabase, affected_rows
from taskhub.core.auth.types import RefreshTokenRecord, User
from taskhub.core.exceptions import EmailExistsError


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=UTC)


class PostgresUserRepository:
    """PostgreSQL implementation of UserRepository."""

    def __init__(self, db: AppDatabase) -> None:
        """Initialize with database connection.

        Args:
            db: Application database instance.
        """
        self._db = db

    def _row_to_user(self, row: dict[str, Any]) -> User:
        """Convert database row to User model."""
        return User(
            id=str(row["id"]),
            email=row["email"],
            password_hash=row["password_hash"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            created_at=_aware(row["created_at"]),
            updated_at=_aware(row["updated_at"]),
        )

    async def get_user_by_id(self, user_id: str) -> User | None:
        """Get user by ID."""
        row = await self._db.fetch_one(
            "SELECT * FROM users WHERE id = $1",
            user_id,
        )
        return self._row_to_user(row) if row else None

    async def get_user_by_email(self, email: str) -> User | None:
        """Get user by email address."""
        row = await self._db.fetch_one(
            "SELECT * FROM users WHERE email = $1",
            email,
        )
        return self._row_to_user(row) if row else None

    async def create_user(
        self,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
    ) -> User:
        """Create a new user."""
        try:
            row = await self._db.fetch_one(
                """
                INSERT INTO users (id, email, password_hash, first_name, last_name)
                VALUES ($1, $2, $3, $4, $5)
                RETURNING *
                """,
                str(uuid4()),
                email,
                password_hash,
                first_name,
                last_name,
            )
        except asyncpg.UniqueViolationError:
            raise EmailExistsError() from None
        assert row is not None, "INSERT RETURNING should always return a row"
        return self._row_to_user(row)

    async def update_user(
        self,
        user_id: str,
        email: str | None = None,
        password_hash: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> User | None:
        """Update user fields."""
        fields = {
            "email": email,
            "password_hash": password_hash,
            "first_name": first_name,
            "last_name": last_name,
        }
        updates = []
        params: list[Any] = []

        for column, value in fields.items():
            if value is not None:
                params.append(value)
                updates.append(f"{column} = ${len(params)}")

        if not updates:
            return await self.get_user_by_id(user_id)

        params.append(datetime.now(UTC))
        updates.append(f"updated_at = ${len(params)}")

        params.append(user_id)
        query = f"""
            UPDATE users SET {", ".join(updates)}
            WHERE id = ${len(params)}
            RETURNING *
        """
        try:
            row = await self._db.fetch_one(query, *params)
        except asyncpg.UniqueViolationError:
            raise EmailExistsError() from None
        return self._row_to_user(row) if row else None

    async def user_exists(self, user_id: str) -> bool:
        """Check whether a user ID exists."""
        found = await self._db.fetch_val(
            "SELECT EXISTS (SELECT 1 FROM users WHERE id = $1)",
            user_id,
        )
        return bool(found)


class PostgresRefreshTokenLedger:
    """PostgreSQL implementation of RefreshTokenLedger."""

    def __init__(self, db: AppDatabase) -> None:
        """Initialize with database connection."""
        self._db = db

    def _row_to_record(self, row: dict[str, Any]) -> RefreshTokenRecord:
        return RefreshTokenRecord(
            user_id=str(row["user_id"]),
            token_hash=row["token_hash"],
            expires_at=_aware(row["expires_at"]),
            created_at=_aware(row["created_at"]),
        )

    async def store(self, user_id: str, token_hash: str, expires_at: datetime) -> None:
        """Insert one record."""
        await self._db.execute(
            """
            INSERT INTO refresh_tokens (id, user_id, token_hash, expires_at)
            VALUES ($1, $2, $3, $4)
            """,
            str(uuid4()),
            user_id,
            token_hash,
            expires_at,
        )

    async def find_by_hash(self, token_hash: str) -> RefreshTokenRecord | None:
        """Look up a record by token hash."""
        row = await self._db.fetch_one(
            "SELECT * FROM refresh_tokens WHERE token_hash = $1",
            token_hash,
        )
        return self._row_to_record(row) if row else None

    async def consume(self, token_hash: str) -> RefreshTokenRecord | None:
        """Atomically delete a record and return it.

        A single DELETE ... RETURNING: Postgres row locking guarantees only
        one concurrent statement gets the row back.
        """
        row = await self._db.execute_returning(
            """
            DELETE FROM refresh_tokens
            WHERE token_hash = $1
            RETURNING user_id, token_hash, expires_at, created_at
            """,
            token_hash,
        )
        return self._row_to_record(row) if row else None

    async def delete_by_hash(self, token_hash: str) -> bool:
        """Delete a record by hash."""
        status = await self._db.execute(
            "DELETE FROM refresh_tokens WHERE token_hash = $1",
            token_hash,
        )
        return affected_rows(status) > 0

    async def delete_for_user(self, user_id: str, token_hash: str) -> bool:
        """Delete a record only if it belongs to the given user."""
        status = await self._db.execute(
            "DELETE FROM refresh_tokens WHERE user_id = $1 AND token_hash = $2",
            user_id,
            token_hash,
        )
        return affected_rows(status) > 0

    async def delete_all_for_user(self, user_id: str) -> int:
        """Delete every record of a user."""
        status = await self._db.execute(
            "DELETE FROM refresh_tokens WHERE user_id = $1",
            user_id,
        )
        return affected_rows(status)

    async def delete_expired(self, now: datetime) -> int:
        """Purge records whose expiry has passed."""
        status = await self._db.execute(
            "DELETE FROM refresh_tokens WHERE expires_at < $1",
            now,
        )
        return affected_rows(status)

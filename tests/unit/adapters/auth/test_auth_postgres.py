"""Tests for PostgreSQL user repository and refresh token ledger."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import asyncpg
import pytest
from taskhub.adapters.auth.postgres import PostgresRefreshTokenLedger, PostgresUserRepository
from taskhub.core.auth.repository import RefreshTokenLedger, UserRepository
from taskhub.core.exceptions import EmailExistsError


def user_row(**overrides: object) -> dict[str, object]:
    row: dict[str, object] = {
        "id": "user-1",
        "email": "test@example.com",
        "password_hash": "hashed",  # pragma: allowlist secret
        "first_name": "Test",
        "last_name": "User",
        "created_at": datetime.now(UTC),
        "updated_at": datetime.now(UTC),
    }
    row.update(overrides)
    return row


class TestPostgresUserRepository:
    """Test PostgresUserRepository implementation."""

    @pytest.fixture
    def mock_db(self) -> MagicMock:
        """Create mock database."""
        return MagicMock()

    @pytest.fixture
    def repo(self, mock_db: MagicMock) -> PostgresUserRepository:
        """Create repository with mock database."""
        return PostgresUserRepository(mock_db)

    def test_implements_protocol(self, repo: PostgresUserRepository) -> None:
        """Repository should implement UserRepository protocol."""
        assert isinstance(repo, UserRepository)

    @pytest.mark.asyncio
    async def test_get_user_by_email(
        self, repo: PostgresUserRepository, mock_db: MagicMock
    ) -> None:
        """Should return user when found by email."""
        mock_db.fetch_one = AsyncMock(return_value=user_row())

        result = await repo.get_user_by_email("test@example.com")

        assert result is not None
        assert result.email == "test@example.com"
        assert result.id == "user-1"

    @pytest.mark.asyncio
    async def test_get_user_by_email_not_found(
        self, repo: PostgresUserRepository, mock_db: MagicMock
    ) -> None:
        """Should return None when user not found."""
        mock_db.fetch_one = AsyncMock(return_value=None)

        assert await repo.get_user_by_email("notfound@example.com") is None

    @pytest.mark.asyncio
    async def test_naive_timestamps_become_utc(
        self, repo: PostgresUserRepository, mock_db: MagicMock
    ) -> None:
        """Naive timestamps from the driver are tagged UTC."""
        mock_db.fetch_one = AsyncMock(
            return_value=user_row(created_at=datetime(2024, 1, 1), updated_at=datetime(2024, 1, 1))
        )

        result = await repo.get_user_by_id("user-1")

        assert result is not None
        assert result.created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_create_user(self, repo: PostgresUserRepository, mock_db: MagicMock) -> None:
        """Should insert and return the new user."""
        mock_db.fetch_one = AsyncMock(return_value=user_row())

        result = await repo.create_user("test@example.com", "hashed", "Test", "User")

        assert result.email == "test@example.com"
        args = mock_db.fetch_one.call_args[0]
        assert "INSERT INTO users" in args[0]
        assert args[2:] == ("test@example.com", "hashed", "Test", "User")

    @pytest.mark.asyncio
    async def test_create_user_duplicate(
        self, repo: PostgresUserRepository, mock_db: MagicMock
    ) -> None:
        """A unique violation surfaces as EmailExistsError."""
        mock_db.fetch_one = AsyncMock(side_effect=asyncpg.UniqueViolationError("duplicate key"))

        with pytest.raises(EmailExistsError):
            await repo.create_user("test@example.com", "hashed", "Test", "User")

    @pytest.mark.asyncio
    async def test_update_user_builds_set_list(
        self, repo: PostgresUserRepository, mock_db: MagicMock
    ) -> None:
        """Only given columns are updated, plus updated_at."""
        mock_db.fetch_one = AsyncMock(return_value=user_row(first_name="New"))

        result = await repo.update_user("user-1", first_name="New")

        assert result is not None
        query = mock_db.fetch_one.call_args[0][0]
        assert "first_name = $1" in query
        assert "updated_at = $2" in query
        assert "WHERE id = $3" in query
        assert "email =" not in query

    @pytest.mark.asyncio
    async def test_update_user_nothing_to_change(
        self, repo: PostgresUserRepository, mock_db: MagicMock
    ) -> None:
        """With no fields the current row is returned."""
        mock_db.fetch_one = AsyncMock(return_value=user_row())

        await repo.update_user("user-1")

        assert "SELECT" in mock_db.fetch_one.call_args[0][0]

    @pytest.mark.asyncio
    async def test_user_exists(self, repo: PostgresUserRepository, mock_db: MagicMock) -> None:
        """Existence check returns a bool."""
        mock_db.fetch_val = AsyncMock(return_value=True)

        assert await repo.user_exists("user-1") is True


class TestPostgresRefreshTokenLedger:
    """Test PostgresRefreshTokenLedger implementation."""

    @pytest.fixture
    def mock_db(self) -> MagicMock:
        """Create mock database."""
        return MagicMock()

    @pytest.fixture
    def ledger(self, mock_db: MagicMock) -> PostgresRefreshTokenLedger:
        """Create ledger with mock database."""
        return PostgresRefreshTokenLedger(mock_db)

    def test_implements_protocol(self, ledger: PostgresRefreshTokenLedger) -> None:
        """Ledger should implement RefreshTokenLedger protocol."""
        assert isinstance(ledger, RefreshTokenLedger)

    @pytest.mark.asyncio
    async def test_store(self, ledger: PostgresRefreshTokenLedger, mock_db: MagicMock) -> None:
        """Stores the hash, never a raw token."""
        mock_db.execute = AsyncMock(return_value="INSERT 0 1")
        expires = datetime.now(UTC) + timedelta(days=7)

        await ledger.store("user-1", "a" * 64, expires)

        args = mock_db.execute.call_args[0]
        assert "INSERT INTO refresh_tokens" in args[0]
        assert args[2:] == ("user-1", "a" * 64, expires)

    @pytest.mark.asyncio
    async def test_consume_uses_delete_returning(
        self, ledger: PostgresRefreshTokenLedger, mock_db: MagicMock
    ) -> None:
        """Consume is a single DELETE ... RETURNING."""
        now = datetime.now(UTC)
        mock_db.execute_returning = AsyncMock(
            return_value={
                "user_id": "user-1",
                "token_hash": "abc",
                "expires_at": now,
                "created_at": now,
            }
        )

        record = await ledger.consume("abc")

        assert record is not None
        assert record.user_id == "user-1"
        query = mock_db.execute_returning.call_args[0][0]
        assert "DELETE FROM refresh_tokens" in query
        assert "RETURNING" in query

    @pytest.mark.asyncio
    async def test_consume_missing(
        self, ledger: PostgresRefreshTokenLedger, mock_db: MagicMock
    ) -> None:
        """Consume returns None when nothing matched."""
        mock_db.execute_returning = AsyncMock(return_value=None)

        assert await ledger.consume("abc") is None

    @pytest.mark.asyncio
    async def test_delete_for_user(
        self, ledger: PostgresRefreshTokenLedger, mock_db: MagicMock
    ) -> None:
        """Scoped delete reports whether a row went away."""
        mock_db.execute = AsyncMock(return_value="DELETE 0")

        assert await ledger.delete_for_user("user-1", "abc") is False

    @pytest.mark.asyncio
    async def test_delete_all_for_user(
        self, ledger: PostgresRefreshTokenLedger, mock_db: MagicMock
    ) -> None:
        """Returns the number of revoked rows."""
        mock_db.execute = AsyncMock(return_value="DELETE 3")

        assert await ledger.delete_all_for_user("user-1") == 3

    @pytest.mark.asyncio
    async def test_delete_expired(
        self, ledger: PostgresRefreshTokenLedger, mock_db: MagicMock
    ) -> None:
        """Purges rows strictly before the cutoff."""
        mock_db.execute = AsyncMock(return_value="DELETE 2")
        now = datetime.now(UTC)

        assert await ledger.delete_expired(now) == 2
        assert "expires_at < $1" in mock_db.execute.call_args[0][0]

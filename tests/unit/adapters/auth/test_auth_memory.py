"""Tests for in-memory auth storage."""

from datetime import UTC, datetime, timedelta

import pytest
from taskhub.adapters.auth.memory import InMemoryRefreshTokenLedger, InMemoryUserRepository
from taskhub.core.auth.repository import RefreshTokenLedger, UserRepository
from taskhub.core.exceptions import EmailExistsError


class TestInMemoryUserRepository:
    """Test the dict-backed user repository."""

    def test_implements_protocol(self, users: InMemoryUserRepository) -> None:
        """Repository should implement UserRepository protocol."""
        assert isinstance(users, UserRepository)

    @pytest.mark.asyncio
    async def test_create_and_get(self, users: InMemoryUserRepository) -> None:
        """Created users are found by id and email."""
        user = await users.create_user("a@example.com", "hash", "A", "B")

        assert await users.get_user_by_id(user.id) == user
        assert await users.get_user_by_email("a@example.com") == user
        assert await users.user_exists(user.id) is True

    @pytest.mark.asyncio
    async def test_unique_email(self, users: InMemoryUserRepository) -> None:
        """A second user with the same email is rejected."""
        await users.create_user("a@example.com", "hash", "A", "B")

        with pytest.raises(EmailExistsError):
            await users.create_user("a@example.com", "hash", "C", "D")

    @pytest.mark.asyncio
    async def test_update(self, users: InMemoryUserRepository) -> None:
        """Updates replace only given fields."""
        user = await users.create_user("a@example.com", "hash", "A", "B")

        updated = await users.update_user(user.id, first_name="Z")

        assert updated is not None
        assert updated.first_name == "Z"
        assert updated.last_name == "B"

    @pytest.mark.asyncio
    async def test_update_missing(self, users: InMemoryUserRepository) -> None:
        """Updating an unknown user returns None."""
        assert await users.update_user("missing", first_name="Z") is None


class TestInMemoryRefreshTokenLedger:
    """Test the dict-backed ledger."""

    def test_implements_protocol(self, ledger: InMemoryRefreshTokenLedger) -> None:
        """Ledger should implement RefreshTokenLedger protocol."""
        assert isinstance(ledger, RefreshTokenLedger)

    @pytest.mark.asyncio
    async def test_consume_once(self, ledger: InMemoryRefreshTokenLedger) -> None:
        """A record can be consumed exactly once."""
        await ledger.store("u", "h", datetime.now(UTC) + timedelta(days=1))

        assert await ledger.consume("h") is not None
        assert await ledger.consume("h") is None

    @pytest.mark.asyncio
    async def test_delete_for_user_checks_owner(self, ledger: InMemoryRefreshTokenLedger) -> None:
        """Another user's record is not deleted."""
        await ledger.store("u", "h", datetime.now(UTC) + timedelta(days=1))

        assert await ledger.delete_for_user("other", "h") is False
        assert await ledger.delete_for_user("u", "h") is True
        assert len(ledger) == 0

    @pytest.mark.asyncio
    async def test_delete_expired(self, ledger: InMemoryRefreshTokenLedger) -> None:
        """Only past-expiry records are purged."""
        now = datetime.now(UTC)
        await ledger.store("u", "old", now - timedelta(seconds=1))
        await ledger.store("u", "new", now + timedelta(days=1))

        assert await ledger.delete_expired(now) == 1
        assert await ledger.find_by_hash("new") is not None

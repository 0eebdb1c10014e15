"""Tests for the application database adapter."""

import pytest
from taskhub.adapters.db.app_db import AppDatabase, affected_rows


class TestAffectedRows:
    """Test command status parsing."""

    @pytest.mark.parametrize(
        ("status", "expected"),
        [
            ("DELETE 3", 3),
            ("DELETE 0", 0),
            ("UPDATE 1", 1),
            ("INSERT 0 1", 1),
            ("", 0),
            ("garbage", 0),
        ],
    )
    def test_parse(self, status: str, expected: int) -> None:
        """Row count is the last token of the status."""
        assert affected_rows(status) == expected


class TestAppDatabase:
    """Test pool lifecycle guards."""

    @pytest.mark.asyncio
    async def test_acquire_without_pool(self) -> None:
        """Using the adapter before connect fails loudly."""
        db = AppDatabase("postgresql://localhost/test")

        with pytest.raises(RuntimeError):
            await db.fetch_one("SELECT 1")

    @pytest.mark.asyncio
    async def test_close_without_pool(self) -> None:
        """Closing an unconnected adapter is a no-op."""
        await AppDatabase("postgresql://localhost/test").close()

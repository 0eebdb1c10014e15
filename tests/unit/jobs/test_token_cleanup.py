"""Tests for the expired refresh token cleanup job."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from taskhub.adapters.auth.memory import InMemoryRefreshTokenLedger
from taskhub.jobs.token_cleanup import purge_expired_tokens


class TestPurgeExpiredTokens:
    """Test purge_expired_tokens."""

    @pytest.mark.asyncio
    async def test_purges_only_expired(self, ledger: InMemoryRefreshTokenLedger) -> None:
        """Live tokens survive the sweep."""
        now = datetime.now(UTC)
        await ledger.store("u", "expired", now - timedelta(hours=1))
        await ledger.store("u", "live", now + timedelta(days=1))

        count = await purge_expired_tokens(ledger, now=now)

        assert count == 1
        assert len(ledger) == 1
        assert await ledger.find_by_hash("live") is not None

    @pytest.mark.asyncio
    async def test_passes_cutoff(self) -> None:
        """The cutoff defaults to the current time."""
        ledger = MagicMock()
        ledger.delete_expired = AsyncMock(return_value=0)

        assert await purge_expired_tokens(ledger) == 0

        cutoff = ledger.delete_expired.call_args[0][0]
        assert cutoff.tzinfo is not None
        assert abs(datetime.now(UTC) - cutoff) < timedelta(minutes=1)

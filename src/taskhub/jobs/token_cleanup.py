"""Expired refresh token cleanup job.

Run via: python -m taskhub.jobs.token_cleanup
"""

import asyncio
from datetime import UTC, datetime

import structlog

from taskhub.adapters.auth.postgres import PostgresRefreshTokenLedger
from taskhub.adapters.db.app_db import AppDatabase
from taskhub.config import Settings
from taskhub.core.auth.repository import RefreshTokenLedger

logger = structlog.get_logger()


async def purge_expired_tokens(ledger: RefreshTokenLedger, now: datetime | None = None) -> int:
    """Delete ledger rows whose expiry has passed.

    Refresh also removes expired rows lazily when they are presented; this
    sweeps the ones nobody comes back for.
    """
    now = now or datetime.now(UTC)
    count = await ledger.delete_expired(now)
    logger.info("expired_refresh_tokens_purged", count=count, cutoff=now.isoformat())
    return count


async def main() -> None:
    """Run refresh token cleanup."""
    settings = Settings.from_env()

    db = AppDatabase(settings.database_url)
    await db.connect()
    try:
        await purge_expired_tokens(PostgresRefreshTokenLedger(db))
    finally:
        await db.close()


if __name__ == "__main__":
    asyncio.run(main())

"""Database adapters."""

from taskhub.adapters.db.app_db import AppDatabase, affected_rows

__all__ = ["AppDatabase", "affected_rows"]

"""Auth adapters."""

from taskhub.adapters.auth.memory import InMemoryRefreshTokenLedger, InMemoryUserRepository
from taskhub.adapters.auth.postgres import PostgresRefreshTokenLedger, PostgresUserRepository

__all__ = [
    "InMemoryRefreshTokenLedger",
    "InMemoryUserRepository",
    "PostgresRefreshTokenLedger",
    "PostgresUserRepository",
]

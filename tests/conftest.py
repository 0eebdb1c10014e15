"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import pytest
from taskhub.adapters.auth.memory import InMemoryRefreshTokenLedger, InMemoryUserRepository
from taskhub.adapters.rbac.memory import InMemoryTeamMembershipRepository
from taskhub.config import Settings
from taskhub.core.auth.jwt import TokenCodec
from taskhub.core.auth.service import AuthService
from taskhub.services.membership import TeamMembershipService

TEST_SECRET = "test-secret-key-for-unit-tests"  # pragma: allowlist secret


@pytest.fixture
def anyio_backend() -> str:
    """Configure anyio to use asyncio backend."""
    return "asyncio"


@pytest.fixture
def settings() -> Settings:
    """Settings with the cheapest bcrypt cost so tests stay fast."""
    return Settings(
        environment="test",
        jwt_secret_key=TEST_SECRET,
        bcrypt_rounds=4,
    )


@pytest.fixture
def codec(settings: Settings) -> TokenCodec:
    """Token codec bound to the test settings."""
    return TokenCodec(settings)


@pytest.fixture
def users() -> InMemoryUserRepository:
    """Empty in-memory user repository."""
    return InMemoryUserRepository()


@pytest.fixture
def ledger() -> InMemoryRefreshTokenLedger:
    """Empty in-memory refresh token ledger."""
    return InMemoryRefreshTokenLedger()


@pytest.fixture
def memberships() -> InMemoryTeamMembershipRepository:
    """Empty in-memory membership repository."""
    return InMemoryTeamMembershipRepository()


@pytest.fixture
def auth_service(
    users: InMemoryUserRepository,
    ledger: InMemoryRefreshTokenLedger,
    codec: TokenCodec,
    settings: Settings,
) -> AuthService:
    """Auth service over in-memory storage."""
    return AuthService(users, ledger, codec, settings)


@pytest.fixture
def membership_service(
    memberships: InMemoryTeamMembershipRepository,
    users: InMemoryUserRepository,
) -> TeamMembershipService:
    """Membership service over in-memory storage."""
    return TeamMembershipService(memberships, users)

"""Dependency injection and application lifespan management."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog
from fastapi import Request

from taskhub.adapters.auth.memory import InMemoryRefreshTokenLedger, InMemoryUserRepository
from taskhub.adapters.auth.postgres import PostgresRefreshTokenLedger, PostgresUserRepository
from taskhub.adapters.db.app_db import AppDatabase
from taskhub.adapters.rbac.memory import InMemoryTeamMembershipRepository
from taskhub.adapters.rbac.postgres import PostgresTeamMembershipRepository
from taskhub.config import Settings
from taskhub.core.auth.jwt import TokenCodec
from taskhub.core.auth.repository import RefreshTokenLedger, UserRepository
from taskhub.core.auth.service import AuthService
from taskhub.core.rbac.repository import TeamMembershipRepository
from taskhub.services.membership import TeamMembershipService

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = structlog.get_logger()


@dataclass
class AppServices:
    """Everything the request handlers need, wired once per process."""

    settings: Settings
    codec: TokenCodec
    users: UserRepository
    ledger: RefreshTokenLedger
    memberships: TeamMembershipRepository
    auth: AuthService
    membership: TeamMembershipService


def build_services(
    settings: Settings,
    users: UserRepository,
    ledger: RefreshTokenLedger,
    memberships: TeamMembershipRepository,
) -> AppServices:
    """Wire services around the given repositories."""
    codec = TokenCodec(settings)
    return AppServices(
        settings=settings,
        codec=codec,
        users=users,
        ledger=ledger,
        memberships=memberships,
        auth=AuthService(users, ledger, codec, settings),
        membership=TeamMembershipService(memberships, users),
    )


def build_postgres_services(settings: Settings, db: AppDatabase) -> AppServices:
    """Wire services backed by PostgreSQL."""
    return build_services(
        settings,
        users=PostgresUserRepository(db),
        ledger=PostgresRefreshTokenLedger(db),
        memberships=PostgresTeamMembershipRepository(db),
    )


def build_in_memory_services(settings: Settings) -> AppServices:
    """Wire services backed by process memory."""
    return build_services(
        settings,
        users=InMemoryUserRepository(),
        ledger=InMemoryRefreshTokenLedger(),
        memberships=InMemoryTeamMembershipRepository(),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan - setup and teardown.

    Connects the database pool unless services were injected up front
    (tests, in-memory development).
    """
    if getattr(app.state, "services", None) is not None:
        yield
        return

    settings: Settings = app.state.settings
    app_db = AppDatabase(settings.database_url)
    await app_db.connect()
    app.state.app_db = app_db
    app.state.services = build_postgres_services(settings, app_db)
    logger.info("app_started", environment=settings.environment)

    try:
        yield
    finally:
        await app_db.close()


def get_services(request: Request) -> AppServices:
    """Get the wired services from app state."""
    services: AppServices = request.app.state.services
    return services


def get_auth_service(request: Request) -> AuthService:
    """Get auth service from request context."""
    return get_services(request).auth


def get_membership_service(request: Request) -> TeamMembershipService:
    """Get team membership service from request context."""
    return get_services(request).membership


def get_token_codec(request: Request) -> TokenCodec:
    """Get the token codec from request context."""
    return get_services(request).codec


def get_membership_repo(request: Request) -> TeamMembershipRepository:
    """Get the team membership repository from request context."""
    return get_services(request).memberships

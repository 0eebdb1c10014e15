"""RBAC adapters."""

from taskhub.adapters.rbac.memory import InMemoryTeamMembershipRepository
from taskhub.adapters.rbac.postgres import PostgresTeamMembershipRepository

__all__ = ["InMemoryTeamMembershipRepository", "PostgresTeamMembershipRepository"]

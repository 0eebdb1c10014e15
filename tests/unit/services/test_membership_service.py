"""Tests for team membership service."""

import asyncio

import pytest
from taskhub.adapters.auth.memory import InMemoryUserRepository
from taskhub.adapters.rbac.memory import InMemoryTeamMembershipRepository
from taskhub.core.exceptions import (
    AlreadyMemberError,
    LastAdminError,
    MemberNotFoundError,
    UserNotFoundError,
)
from taskhub.core.rbac.types import TeamRole
from taskhub.services.membership import TeamMembershipService

TEAM = "team-1"


async def make_user(users: InMemoryUserRepository, email: str) -> str:
    user = await users.create_user(email, "hash", "First", "Last")
    return user.id


class TestTeamOwner:
    """Test team creation ownership."""

    @pytest.mark.asyncio
    async def test_creator_becomes_admin(
        self, membership_service: TeamMembershipService, users: InMemoryUserRepository
    ) -> None:
        """The creator joins as admin."""
        owner = await make_user(users, "owner@example.com")

        membership = await membership_service.create_team_owner(TEAM, owner)

        assert membership.role == TeamRole.ADMIN
        assert membership.is_admin


class TestAddMember:
    """Test adding members."""

    @pytest.mark.asyncio
    async def test_add_default_role(
        self, membership_service: TeamMembershipService, users: InMemoryUserRepository
    ) -> None:
        """New members default to dev."""
        user = await make_user(users, "dev@example.com")

        membership = await membership_service.add_member(TEAM, user)

        assert membership.role == TeamRole.DEV
        assert [m.user_id for m in await membership_service.list_members(TEAM)] == [user]

    @pytest.mark.asyncio
    async def test_add_unknown_user(self, membership_service: TeamMembershipService) -> None:
        """Adding a missing user fails."""
        with pytest.raises(UserNotFoundError):
            await membership_service.add_member(TEAM, "ghost")

    @pytest.mark.asyncio
    async def test_add_twice(
        self, membership_service: TeamMembershipService, users: InMemoryUserRepository
    ) -> None:
        """Adding an existing member fails."""
        user = await make_user(users, "dev@example.com")
        await membership_service.add_member(TEAM, user)

        with pytest.raises(AlreadyMemberError):
            await membership_service.add_member(TEAM, user, TeamRole.GUEST)


class TestLastAdminInvariant:
    """A team never loses its last admin."""

    @pytest.mark.asyncio
    async def test_cannot_remove_or_demote_sole_admin(
        self, membership_service: TeamMembershipService, users: InMemoryUserRepository
    ) -> None:
        """The sole admin can neither leave nor be demoted."""
        owner = await make_user(users, "owner@example.com")
        await membership_service.create_team_owner(TEAM, owner)

        with pytest.raises(LastAdminError):
            await membership_service.remove_member(TEAM, owner)
        with pytest.raises(LastAdminError):
            await membership_service.change_role(TEAM, owner, TeamRole.DEV)

    @pytest.mark.asyncio
    async def test_second_admin_unblocks(
        self,
        membership_service: TeamMembershipService,
        users: InMemoryUserRepository,
        memberships: InMemoryTeamMembershipRepository,
    ) -> None:
        """Once a second admin exists the first can be demoted, then removed."""
        owner = await make_user(users, "owner@example.com")
        other = await make_user(users, "other@example.com")
        await membership_service.create_team_owner(TEAM, owner)
        await membership_service.add_member(TEAM, other, TeamRole.ADMIN)

        demoted = await membership_service.change_role(TEAM, owner, TeamRole.MANAGER)
        assert demoted.role == TeamRole.MANAGER

        await membership_service.remove_member(TEAM, owner)
        assert await memberships.get_membership(TEAM, owner) is None
        assert await memberships.count_admins(TEAM) == 1

    @pytest.mark.asyncio
    async def test_concurrent_demotions(
        self,
        membership_service: TeamMembershipService,
        users: InMemoryUserRepository,
        memberships: InMemoryTeamMembershipRepository,
    ) -> None:
        """Two admins demoting each other at once cannot leave the team without one."""
        owner = await make_user(users, "owner@example.com")
        other = await make_user(users, "other@example.com")
        await membership_service.create_team_owner(TEAM, owner)
        await membership_service.add_member(TEAM, other, TeamRole.ADMIN)

        results = await asyncio.gather(
            membership_service.change_role(TEAM, owner, TeamRole.DEV),
            membership_service.change_role(TEAM, other, TeamRole.DEV),
            return_exceptions=True,
        )

        assert sum(isinstance(r, LastAdminError) for r in results) == 1
        assert await memberships.count_admins(TEAM) == 1

    @pytest.mark.asyncio
    async def test_non_admin_removal(
        self, membership_service: TeamMembershipService, users: InMemoryUserRepository
    ) -> None:
        """Non-admins can always be removed."""
        owner = await make_user(users, "owner@example.com")
        dev = await make_user(users, "dev@example.com")
        await membership_service.create_team_owner(TEAM, owner)
        await membership_service.add_member(TEAM, dev)

        await membership_service.remove_member(TEAM, dev)

        assert len(await membership_service.list_members(TEAM)) == 1


class TestMissingMember:
    """Operations on users outside the team."""

    @pytest.mark.asyncio
    async def test_change_role_missing(self, membership_service: TeamMembershipService) -> None:
        """Changing a non-member's role fails."""
        with pytest.raises(MemberNotFoundError):
            await membership_service.change_role(TEAM, "nobody", TeamRole.DEV)

    @pytest.mark.asyncio
    async def test_remove_missing(self, membership_service: TeamMembershipService) -> None:
        """Removing a non-member fails."""
        with pytest.raises(MemberNotFoundError):
            await membership_service.remove_member(TEAM, "nobody")

"""Auth service for registration, login, and refresh token rotation."""

import asyncio

import structlog

from taskhub.config import Settings
from taskhub.core.auth.jwt import TokenCodec
from taskhub.core.auth.password import generate_password, hash_password, verify_password
from taskhub.core.auth.repository import RefreshTokenLedger, UserRepository
from taskhub.core.auth.types import AuthResult, TokenPair, User, UserView
from taskhub.core.exceptions import (
    EmailExistsError,
    InvalidCredentialsError,
    InvalidTokenError,
    TokenExpiredError,
    UserNotFoundError,
)

logger = structlog.get_logger()

# Verified against when the email is unknown, so both login failures cost one bcrypt check
_TIMING_DUMMY_PASSWORD = "timing-equalizer-not-a-real-password"  # pragma: allowlist secret


def normalize_email(email: str) -> str:
    """Canonical form used for every email lookup and insert."""
    return email.strip().lower()


class AuthService:
    """Service for authentication operations.

    The only component allowed to write the refresh token ledger.
    """

    def __init__(
        self,
        users: UserRepository,
        ledger: RefreshTokenLedger,
        codec: TokenCodec,
        settings: Settings,
    ) -> None:
        """Initialize with repositories and token codec.

        Args:
            users: User repository.
            ledger: Refresh token ledger.
            codec: Token codec bound to the signing configuration.
            settings: Process settings (bcrypt cost factor).
        """
        self._users = users
        self._ledger = ledger
        self._codec = codec
        self._rounds = settings.bcrypt_rounds
        # Hashed once up front so every unknown-email login costs exactly one verify
        self._dummy_hash = hash_password(_TIMING_DUMMY_PASSWORD, self._rounds)

    async def register(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
    ) -> AuthResult:
        """Register a new user and sign them in.

        Args:
            email: User's email address.
            password: Plain text password.
            first_name: Given name.
            last_name: Family name.

        Returns:
            The new user (without hash) and a token pair.

        Raises:
            EmailExistsError: If the email is already registered.
        """
        email = normalize_email(email)
        existing = await self._users.get_user_by_email(email)
        if existing:
            raise EmailExistsError()

        password_hash = await self._hash(password)
        user = await self._users.create_user(
            email=email,
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
        )

        result = await self._issue_tokens(user)
        logger.info("user_registered", user_id=user.id)
        return result

    async def login(self, email: str, password: str) -> AuthResult:
        """Authenticate user and return tokens.

        Unknown email and wrong password fail identically.

        Args:
            email: User's email address.
            password: Plain text password.

        Returns:
            The user (without hash) and a token pair.

        Raises:
            InvalidCredentialsError: If authentication fails.
        """
        user = await self._users.get_user_by_email(normalize_email(email))
        if user is None:
            await self._verify(password, self._dummy_hash)
            logger.info("login_failed")
            raise InvalidCredentialsError()

        if not await self._verify(password, user.password_hash):
            logger.info("login_failed")
            raise InvalidCredentialsError()

        result = await self._issue_tokens(user)
        logger.info("login_succeeded", user_id=user.id)
        return result

    async def logout(self, user_id: str, refresh_token: str | None = None) -> None:
        """Revoke one refresh token, or all of them when none is given.

        Always succeeds, even if nothing was stored.

        Args:
            user_id: Authenticated user's ID.
            refresh_token: Token of the session to end; None ends every session.
        """
        if refresh_token:
            token_hash = self._codec.hash_refresh_token(refresh_token)
            removed = await self._ledger.delete_for_user(user_id, token_hash)
            logger.info("logout", user_id=user_id, scope="single", removed=int(removed))
        else:
            count = await self._ledger.delete_all_for_user(user_id)
            logger.info("logout", user_id=user_id, scope="all", removed=count)

    async def refresh(self, refresh_token: str) -> TokenPair:
        """Exchange a refresh token for a new token pair.

        The presented token is consumed exactly once: the ledger row is
        deleted atomically before anything is issued, so a replay, even a
        concurrent one, finds nothing. An expired row is deleted as well,
        which is why a second attempt reports InvalidToken.

        Args:
            refresh_token: Refresh token from a previous register/login/refresh.

        Returns:
            New access token and new refresh token.

        Raises:
            InvalidTokenError: If the token is unknown or already consumed.
            TokenExpiredError: If the token was found but had expired.
        """
        if not refresh_token:
            raise InvalidTokenError("Refresh token is required")

        token_hash = self._codec.hash_refresh_token(refresh_token)
        record = await self._ledger.consume(token_hash)
        if record is None:
            logger.warning("refresh_token_invalid")
            raise InvalidTokenError()

        if self._codec.is_expired(record.expires_at):
            logger.info("refresh_token_expired", user_id=record.user_id)
            raise TokenExpiredError()

        user = await self._users.get_user_by_id(record.user_id)
        if user is None:
            logger.warning("refresh_token_orphaned", user_id=record.user_id)
            raise InvalidTokenError()

        result = await self._issue_tokens(user)
        logger.info("refresh_token_rotated", user_id=user.id)
        return TokenPair(access_token=result.access_token, refresh_token=result.refresh_token)

    async def get_current_user(self, user_id: str) -> UserView | None:
        """Look up a user for "who am I" calls. Returns None on miss."""
        user = await self._users.get_user_by_id(user_id)
        return user.to_view() if user else None

    async def update_profile(
        self,
        user_id: str,
        email: str,
        first_name: str,
        last_name: str,
    ) -> UserView:
        """Update the user's own name and email.

        Raises:
            UserNotFoundError: If the user does not exist.
            EmailExistsError: If the email belongs to another user.
        """
        email = normalize_email(email)
        owner = await self._users.get_user_by_email(email)
        if owner is not None and owner.id != user_id:
            raise EmailExistsError()

        user = await self._users.update_user(
            user_id,
            email=email,
            first_name=first_name,
            last_name=last_name,
        )
        if user is None:
            raise UserNotFoundError()

        logger.info("profile_updated", user_id=user_id)
        return user.to_view()

    async def change_password(
        self,
        user_id: str,
        current_password: str,
        new_password: str,
    ) -> None:
        """Change the user's password and revoke every refresh token.

        Raises:
            UserNotFoundError: If the user does not exist.
            InvalidCredentialsError: If the current password is wrong.
        """
        user = await self._users.get_user_by_id(user_id)
        if user is None:
            raise UserNotFoundError()

        if not await self._verify(current_password, user.password_hash):
            raise InvalidCredentialsError("Current password is incorrect")

        password_hash = await self._hash(new_password)
        await self._users.update_user(user_id, password_hash=password_hash)
        revoked = await self._ledger.delete_all_for_user(user_id)
        logger.info("password_changed", user_id=user_id, sessions_revoked=revoked)

    async def create_user(
        self,
        email: str,
        first_name: str,
        last_name: str,
    ) -> tuple[UserView, str]:
        """Create a user on someone else's behalf with a generated password.

        No tokens are issued; the plain password is returned once.

        Raises:
            EmailExistsError: If the email is already registered.
        """
        email = normalize_email(email)
        if await self._users.get_user_by_email(email):
            raise EmailExistsError()

        password = generate_password()
        user = await self._users.create_user(
            email=email,
            password_hash=await self._hash(password),
            first_name=first_name,
            last_name=last_name,
        )
        logger.info("user_created", user_id=user.id)
        return user.to_view(), password

    async def _issue_tokens(self, user: User) -> AuthResult:
        """Issue an access token and store a fresh refresh token."""
        access_token = self._codec.issue_access_token(user.id, user.email)
        refresh_token = self._codec.issue_refresh_token()
        await self._ledger.store(
            user_id=user.id,
            token_hash=self._codec.hash_refresh_token(refresh_token),
            expires_at=self._codec.refresh_token_expiry(),
        )
        return AuthResult(
            user=user.to_view(),
            access_token=access_token,
            refresh_token=refresh_token,
        )

    async def _hash(self, password: str) -> str:
        # bcrypt is CPU-bound; keep it off the event loop
        return await asyncio.to_thread(hash_password, password, self._rounds)

    async def _verify(self, password: str, password_hash: str) -> bool:
        return await asyncio.to_thread(verify_password, password, password_hash)


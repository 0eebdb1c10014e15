"""JWT access tokens and opaque refresh tokens."""

import hashlib
import secrets
from datetime import UTC, datetime, timedelta

import jwt

from taskhub.config import Settings
from taskhub.core.auth.types import AccessTokenClaims
from taskhub.core.exceptions import InvalidTokenError

REFRESH_TOKEN_BYTES = 64


class TokenCodec:
    """Creates and verifies the two token kinds.

    Access tokens are stateless signed JWTs checked on every request.
    Refresh tokens are random strings whose hash is the ledger key.
    """

    def __init__(self, settings: Settings) -> None:
        """Bind the codec to a signing configuration.

        Args:
            settings: Process settings holding the secret and lifetimes.
        """
        self._secret = settings.jwt_secret_key
        self._algorithm = settings.jwt_algorithm
        self._access_ttl = timedelta(minutes=settings.access_token_expire_minutes)
        self._refresh_ttl = timedelta(days=settings.refresh_token_expire_days)

    def issue_access_token(self, user_id: str, email: str, now: datetime | None = None) -> str:
        """Create a short-lived access token.

        Args:
            user_id: User identifier, stored as the subject
            email: User's email
            now: Issue time, defaults to the current UTC time

        Returns:
            Encoded JWT string
        """
        now = now or datetime.now(UTC)
        expire = now + self._access_ttl

        payload = {
            "sub": user_id,
            "email": email,
            "type": "access",
            "exp": int(expire.timestamp()),
            "iat": int(now.timestamp()),
        }

        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify_access_token(self, token: str) -> AccessTokenClaims:
        """Decode and validate an access token.

        No leeway is applied to the expiry.

        Args:
            token: Encoded JWT string

        Returns:
            Verified claims

        Raises:
            InvalidTokenError: If token is malformed, badly signed, or expired
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            raise InvalidTokenError("Token has expired") from None
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(f"Invalid token: {e}") from None

        if payload.get("type") != "access" or not isinstance(payload.get("email"), str):
            raise InvalidTokenError("Invalid token: not an access token")

        return AccessTokenClaims(
            user_id=payload["sub"],
            email=payload["email"],
            issued_at=datetime.fromtimestamp(payload["iat"], UTC),
            expires_at=datetime.fromtimestamp(payload["exp"], UTC),
        )

    def issue_refresh_token(self) -> str:
        """Create a new opaque refresh token.

        64 random bytes, URL-safe. The value says nothing about its owner;
        only the ledger row under its hash does.
        """
        return secrets.token_urlsafe(REFRESH_TOKEN_BYTES)

    @staticmethod
    def hash_refresh_token(token: str) -> str:
        """Digest a refresh token into its ledger key (SHA-256 hex).

        A fast digest is enough here: the input is already high entropy.
        """
        return hashlib.sha256(token.encode("utf-8")).hexdigest()

    def refresh_token_expiry(self, now: datetime | None = None) -> datetime:
        """Absolute expiry for a refresh token issued at `now`."""
        return (now or datetime.now(UTC)) + self._refresh_ttl

    @staticmethod
    def is_expired(expires_at: datetime, now: datetime | None = None) -> bool:
        """Whether a ledger expiry lies strictly in the past.

        Stored timestamps without a zone are read as UTC.
        """
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=UTC)
        return (now or datetime.now(UTC)) > expires_at

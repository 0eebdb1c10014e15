"""Auth domain types and utilities."""

from taskhub.core.auth.jwt import TokenCodec
from taskhub.core.auth.password import generate_password, hash_password, verify_password
from taskhub.core.auth.repository import RefreshTokenLedger, UserRepository
from taskhub.core.auth.service import AuthService, normalize_email
from taskhub.core.auth.types import (
    AccessTokenClaims,
    AuthResult,
    RefreshTokenRecord,
    TokenPair,
    User,
    UserView,
)

__all__ = [
    "User",
    "UserView",
    "AccessTokenClaims",
    "RefreshTokenRecord",
    "TokenPair",
    "AuthResult",
    "hash_password",
    "verify_password",
    "generate_password",
    "TokenCodec",
    "UserRepository",
    "RefreshTokenLedger",
    "AuthService",
    "normalize_email",
]

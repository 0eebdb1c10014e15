"""Auth domain types."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class User(BaseModel):
    """User domain model, including the stored password hash."""

    id: str
    email: str
    password_hash: str
    first_name: str
    last_name: str
    created_at: datetime
    updated_at: datetime

    def to_view(self) -> "UserView":
        """Project to the public view without the password hash."""
        return UserView(
            id=self.id,
            email=self.email,
            first_name=self.first_name,
            last_name=self.last_name,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class UserView(BaseModel):
    """User as exposed to callers."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    email: str
    first_name: str
    last_name: str
    created_at: datetime
    updated_at: datetime


class AccessTokenClaims(BaseModel):
    """Verified access token contents."""

    user_id: str
    email: str
    issued_at: datetime
    expires_at: datetime


class RefreshTokenRecord(BaseModel):
    """Ledger row for a refresh token. Holds the hash, never the token."""

    user_id: str
    token_hash: str
    expires_at: datetime
    created_at: datetime


class TokenPair(BaseModel):
    """Access and refresh token issued together."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    access_token: str
    refresh_token: str


class AuthResult(TokenPair):
    """Result of register and login."""

    user: UserView

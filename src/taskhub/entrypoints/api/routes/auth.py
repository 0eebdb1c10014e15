"""Auth API routes for registration, login, logout, and token refresh."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends
from pydantic import EmailStr, Field, field_validator

from taskhub.core.auth.service import AuthService
from taskhub.core.exceptions import NotFoundError
from taskhub.entrypoints.api.deps import get_auth_service
from taskhub.entrypoints.api.errors import success_body
from taskhub.entrypoints.api.middleware.jwt_auth import CurrentUser
from taskhub.entrypoints.api.schemas import CamelModel, check_password_bytes

router = APIRouter(prefix="/auth", tags=["auth"])


# Request models
class RegisterRequest(CamelModel):
    """Registration request body."""

    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)

    @field_validator("password")
    @classmethod
    def _validate_password(cls, value: str) -> str:
        return check_password_bytes(value)


class LoginRequest(CamelModel):
    """Login request body."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class RefreshRequest(CamelModel):
    """Token refresh request body."""

    refresh_token: str = Field(..., min_length=1)


class LogoutRequest(CamelModel):
    """Logout request body."""

    refresh_token: str | None = None


@router.post("/register", status_code=201)
async def register(
    body: RegisterRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> dict[str, Any]:
    """Register a new user and sign them in.

    Args:
        body: Registration info.
        service: Auth service.

    Returns:
        The user plus access and refresh tokens.
    """
    result = await service.register(
        email=body.email,
        password=body.password,
        first_name=body.first_name,
        last_name=body.last_name,
    )
    return success_body(result.model_dump(mode="json", by_alias=True))


@router.post("/login")
async def login(
    body: LoginRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> dict[str, Any]:
    """Authenticate a user and return tokens.

    Args:
        body: Login credentials.
        service: Auth service.

    Returns:
        The user plus access and refresh tokens.
    """
    result = await service.login(email=body.email, password=body.password)
    return success_body(result.model_dump(mode="json", by_alias=True))


@router.post("/logout")
async def logout(
    auth: CurrentUser,
    service: Annotated[AuthService, Depends(get_auth_service)],
    body: LogoutRequest | None = None,
) -> dict[str, Any]:
    """Revoke one refresh token, or all of the caller's when none is given."""
    await service.logout(auth.user_id, body.refresh_token if body else None)
    return success_body({"message": "Logged out successfully"})


@router.post("/refresh")
async def refresh(
    body: RefreshRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> dict[str, Any]:
    """Exchange a refresh token for a new token pair.

    The presented token is revoked; replaying it fails.
    """
    pair = await service.refresh(body.refresh_token)
    return success_body(pair.model_dump(mode="json", by_alias=True))


@router.get("/me")
async def get_current_user(
    auth: CurrentUser,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> dict[str, Any]:
    """Get the authenticated user."""
    user = await service.get_current_user(auth.user_id)
    if user is None:
        raise NotFoundError("User not found")
    return success_body(user.model_dump(mode="json", by_alias=True))

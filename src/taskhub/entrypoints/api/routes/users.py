"""User profile API routes."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends
from pydantic import EmailStr, Field, field_validator

from taskhub.core.auth.service import AuthService
from taskhub.entrypoints.api.deps import get_auth_service
from taskhub.entrypoints.api.errors import success_body
from taskhub.entrypoints.api.middleware.jwt_auth import CurrentUser
from taskhub.entrypoints.api.schemas import CamelModel, check_password_bytes

router = APIRouter(prefix="/users", tags=["users"])


class UpdateProfileRequest(CamelModel):
    """Profile update request body."""

    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)


class ChangePasswordRequest(CamelModel):
    """Password change request body."""

    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=72)

    @field_validator("new_password")
    @classmethod
    def _validate_new_password(cls, value: str) -> str:
        return check_password_bytes(value)


class CreateUserRequest(CamelModel):
    """Create-user request body. The password is generated."""

    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)


@router.post("", status_code=201)
async def create_user(
    body: CreateUserRequest,
    auth: CurrentUser,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> dict[str, Any]:
    """Create a user with a generated password.

    The password is returned once so the caller can hand it over.
    """
    user, password = await service.create_user(
        email=body.email,
        first_name=body.first_name,
        last_name=body.last_name,
    )
    return success_body(
        {"user": user.model_dump(mode="json", by_alias=True), "password": password}
    )


@router.patch("/me")
async def update_profile(
    body: UpdateProfileRequest,
    auth: CurrentUser,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> dict[str, Any]:
    """Update the caller's name and email."""
    user = await service.update_profile(
        auth.user_id,
        email=body.email,
        first_name=body.first_name,
        last_name=body.last_name,
    )
    return success_body(user.model_dump(mode="json", by_alias=True))


@router.patch("/me/password")
async def change_password(
    body: ChangePasswordRequest,
    auth: CurrentUser,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> dict[str, Any]:
    """Change the caller's password.

    Every refresh token of the caller is revoked, so other sessions must
    log in again once their access tokens lapse.
    """
    await service.change_password(
        auth.user_id,
        current_password=body.current_password,
        new_password=body.new_password,
    )
    return success_body({"message": "Password changed successfully"})

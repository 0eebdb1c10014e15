"""Shared request model base and field checks."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from taskhub.core.auth.password import MAX_PASSWORD_BYTES


class CamelModel(BaseModel):
    """Request body accepting camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def check_password_bytes(value: str) -> str:
    """Reject passwords bcrypt cannot hash.

    Field lengths count characters, while bcrypt's limit is in UTF-8 bytes.
    """
    if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return value

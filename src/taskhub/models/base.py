"""Declarative base for the relational schema."""

from sqlalchemy import MetaData, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, registry

# Create a registry with type annotations
mapper_registry: registry = registry()

# Custom naming conventions for constraints
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)

ID_LENGTH = 36


class BaseModel(DeclarativeBase):
    """Base model with an opaque string primary key."""

    registry = mapper_registry
    metadata = metadata

    # Mark as abstract so child classes are concrete tables
    __abstract__ = True

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True)

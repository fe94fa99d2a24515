"""SQLAlchemy Base model and common column helpers.

This module provides:
- Base: Declarative base for all models
- UUIDPrimaryKeyMixin: UUID primary key for all entities
- UTCDateTime: timezone-aware datetimes that survive SQLite round trips

Usage:
    from cinema.models.base import Base, UTCDateTime, UUIDPrimaryKeyMixin

    class MyModel(UUIDPrimaryKeyMixin, Base):
        __tablename__ = "my_table"
        stamped_at: Mapped[datetime] = mapped_column(UTCDateTime())
"""

import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime
from sqlalchemy.engine import Dialect
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column
from sqlalchemy.types import TypeDecorator


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class UUIDPrimaryKeyMixin:
    """Mixin that adds a UUID primary key column.

    Business identity (fingerprint, movie id) lives in its own indexed
    column; the surrogate key only identifies a row.
    """

    @declared_attr
    def id(cls) -> Mapped[uuid.UUID]:
        return mapped_column(
            primary_key=True,
            default=uuid.uuid4,
            nullable=False,
        )


class UTCDateTime(TypeDecorator[datetime]):
    """Store datetimes as naive UTC and load them back as aware UTC.

    SQLite has no timezone support, so aware values are normalised on the
    way in and re-tagged on the way out.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(
        self, value: datetime | None, dialect: Dialect
    ) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value
        return value.astimezone(UTC).replace(tzinfo=None)

    def process_result_value(
        self, value: datetime | None, dialect: Dialect
    ) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

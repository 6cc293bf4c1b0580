"""
Module: inventory_kernel.db.base
Responsibility: Declarative base, column type conventions and the
    timestamped base that every table uses.
Architecture position: Kernel > DB.  Imported by every model; imports
    nothing else from the kernel.

Conventions:
    - Primary keys are uuid4 values stored as 36-character strings, so the
      same schema runs on PostgreSQL and SQLite.
    - ``Mapped[Decimal]`` columns are Numeric(14, 2); floats are never used
      for money.
    - ``Mapped[datetime]`` columns are timezone-aware.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import ClassVar
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Numeric, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """UUID in Python, String(36) in the database."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else str(value)

    def process_result_value(self, value, dialect):
        return None if value is None else UUID(value)


class Base(DeclarativeBase):
    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(14, 2),
        datetime: DateTime(timezone=True),
        UUID: UUIDString(),
    }

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)


def _wall_clock() -> datetime:
    return datetime.now(UTC)


class TrackedBase(Base):
    """
    Adds created_at / updated_at.

    Services pass explicit values from their injected Clock; the column
    defaults only cover rows written outside a service (fixtures, scripts).
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        default=_wall_clock,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=_wall_clock,
        server_default=func.now(),
        onupdate=_wall_clock,
    )

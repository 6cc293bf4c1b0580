"""
Module: inventory_kernel.selectors.base
Responsibility: Abstract base class for all read-only query selectors.  Selectors
    form the "Q" side of the kernel, providing structured read access to
    products, orders and adjustments without mutation capability.
Architecture position: Kernel > Selectors.  May import from db/, models/ and
    domain/dtos.py.  MUST NOT import from services/ or outer layers.

Invariants enforced:
    - Read-only access: Selectors accept a Session from the caller but MUST NOT
      call session.add(), session.delete(), session.commit(), or session.flush().
    - DTO return convention: Selectors return frozen dataclasses, NOT raw ORM
      model instances.
    - Listings are newest first (created_at DESC, id DESC as tie-break).

Failure modes:
    - ValidationError for page < 1 or limit < 1.
    - Returns None or an empty page when nothing matches (never raises on
      absence of data).
"""

from abc import ABC
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from inventory_kernel.db.base import Base
from inventory_kernel.domain.dtos import Page
from inventory_kernel.exceptions import ValidationError

ModelType = TypeVar("ModelType", bound=Base)
DTO = TypeVar("DTO")


class BaseSelector(ABC, Generic[ModelType]):
    """
    Abstract base class for all selectors.

    Contract:
        Selectors accept a Session from the caller, perform read-only queries,
        and return DTOs.  They MUST NOT mutate any data.
    """

    def __init__(self, session: Session):
        self.session = session

    def _paginate(
        self,
        stmt: Select[Any],
        page: int,
        limit: int,
        to_dto: Callable[[ModelType], DTO],
    ) -> Page[DTO]:
        """Run ``stmt`` for one page and count the full result set."""
        if page < 1 or limit < 1:
            raise ValidationError(
                "page and limit must be positive",
                field_errors=[
                    {"field": name, "message": "must be >= 1"}
                    for name, value in (("page", page), ("limit", limit))
                    if value < 1
                ],
            )

        total = self.session.execute(
            select(func.count()).select_from(stmt.order_by(None).subquery())
        ).scalar_one()
        rows = self.session.execute(
            stmt.offset((page - 1) * limit).limit(limit)
        ).unique().scalars()

        return Page(
            items=tuple(to_dto(row) for row in rows),
            page=page,
            limit=limit,
            total=total,
        )

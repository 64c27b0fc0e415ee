"""Generic async repository with pagination and column filters."""

from __future__ import annotations

from typing import Any, Generic, Sequence, TypeVar

from sqlalchemy import ColumnElement, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from internhub.db.base import Base
from internhub.domain.mixins import utcnow

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Generic CRUD repository.

    Repositories only flush; the request-scoped session commits (or rolls
    back) once the router returns.
    """

    model: type[ModelT]
    default_order: str = "created_at"

    def __init__(self, session: AsyncSession):
        self._session = session

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _base_query(self):
        return select(self.model)

    def _ordered(self, q, order_by: str | None, order: str):
        col = getattr(self.model, order_by or self.default_order, None)
        if col is None:
            col = getattr(self.model, self.default_order)
        return q.order_by(col.desc() if order == "desc" else col.asc())

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get_by_id(self, entity_id: str) -> ModelT | None:
        result = await self._session.execute(
            self._base_query().where(self.model.id == entity_id)
        )
        return result.scalars().first()

    async def all(self, order: str = "desc") -> list[ModelT]:
        q = self._ordered(self._base_query(), None, order)
        return list((await self._session.execute(q)).scalars().all())

    async def list(
        self,
        *,
        offset: int = 0,
        limit: int = 20,
        order_by: str | None = None,
        order: str = "desc",
        filters: dict[str, Any] | None = None,
        conditions: Sequence[ColumnElement[bool]] = (),
    ) -> tuple[list[ModelT], int]:
        """Return (items, total_count) with pagination and optional column filters."""
        q = self._base_query()

        # Apply simple equality filters
        if filters:
            for col_name, value in filters.items():
                if value is not None and hasattr(self.model, col_name):
                    q = q.where(getattr(self.model, col_name) == value)
        for cond in conditions:
            q = q.where(cond)

        # Count
        count_q = select(func.count()).select_from(q.subquery())
        total = (await self._session.execute(count_q)).scalar_one()

        q = self._ordered(q, order_by, order).offset(offset).limit(limit)

        items = (await self._session.execute(q)).scalars().all()
        return list(items), total

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def create(self, **kwargs: Any) -> ModelT:
        instance = self.model(**kwargs)
        self._session.add(instance)
        await self._session.flush()  # populate id
        await self._session.refresh(instance)
        return instance

    async def save(self, instance: ModelT) -> ModelT:
        """Flush in-place attribute changes on a loaded instance."""
        if hasattr(instance, "updated_at"):
            instance.updated_at = utcnow()
        self._session.add(instance)
        await self._session.flush()
        return instance

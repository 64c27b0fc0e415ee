"""Pagination helpers for list endpoints."""

import math

from fastapi import Query
from pydantic import BaseModel


class PaginationParams:
    """FastAPI dependency for `?page=1&limit=10&order=desc`.

    The sort column is chosen per listing by the service (offers sort on
    ``sent_at``, audit logs on ``performed_at`` ...); ``sort`` only overrides it.
    """

    def __init__(
        self,
        page: int = Query(default=1, ge=1, description="Page number (1-based)"),
        limit: int = Query(default=10, ge=1, le=1000, description="Items per page"),
        sort: str | None = Query(default=None, description="Sort field override"),
        order: str = Query(default="desc", pattern="^(asc|desc)$", description="Sort order"),
    ):
        self.page = page
        self.limit = limit
        self.sort = sort
        self.order = order

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def of(cls, page: int = 1, limit: int = 10, sort: str | None = None, order: str = "desc"):
        """Build params outside a request (services, tests)."""
        return cls(page=page, limit=limit, sort=sort, order=order)


class PageMeta(BaseModel):
    total: int
    page: int
    limit: int
    pages: int

    model_config = {"populate_by_name": True}

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "PageMeta":
        return cls(
            total=total,
            page=page,
            limit=limit,
            pages=math.ceil(total / limit) if limit else 1,
        )

"""Pagination helpers for list endpoints."""


import math

from fastapi import Query

from pipevault.schemas.common import CamelModel


class PaginationParams:
    """FastAPI dependency for `?page=1&limit=50&order=desc`.

    Audit and queue listings are always sorted by creation time, so only the
    direction is selectable.
    """

    def __init__(
        self,
        page: int = Query(default=1, ge=1, description="Page number (1-based)"),
        limit: int = Query(default=50, ge=1, le=500, description="Items per page"),
        order: str = Query(default="desc", pattern="^(asc|desc)$", description="Newest or oldest first"),
    ):
        self.page = page
        self.limit = limit
        self.order = order

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class PageMeta(CamelModel):
    total: int
    page: int
    limit: int
    pages: int
    has_next: bool = False
    has_previous: bool = False

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "PageMeta":
        pages = max(1, math.ceil(total / limit)) if limit else 1
        return cls(
            total=total,
            page=page,
            limit=limit,
            pages=pages,
            has_next=page < pages,
            has_previous=page > 1,
        )

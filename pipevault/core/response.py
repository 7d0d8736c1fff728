"""Standardized JSON response envelope helpers."""


from typing import Generic, TypeVar

from pydantic import BaseModel

from pipevault.core.pagination import PageMeta

T = TypeVar("T")


class DataResponse(BaseModel, Generic[T]):
    """Single-item (or unpaginated list) envelope: `{ data: ... }`"""

    data: T


class ListResponse(BaseModel, Generic[T]):
    """Paginated list envelope: `{ data: [...], meta: {...} }`"""

    data: list[T]
    meta: PageMeta


def paginated(items: list, total: int, page: int, limit: int) -> dict:
    """Build a paginated response dict for use with ListResponse."""
    return {"data": items, "meta": PageMeta.build(total, page, limit)}

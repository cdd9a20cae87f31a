"""Offset pagination for list endpoints."""

from __future__ import annotations

from typing import Generic, TypeVar

from fastapi import Query
from pydantic import BaseModel

T = TypeVar("T")

MAX_PAGE_SIZE = 100


class PaginationParams(BaseModel):
    limit: int
    offset: int


def get_pagination_params(
    limit: int = Query(default=20, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
) -> PaginationParams:
    """Read ``limit``/``offset`` from the query string."""
    return PaginationParams(limit=limit, offset=offset)


class Page(BaseModel, Generic[T]):
    """One slice of an ordered listing, with the total row count."""

    items: list[T]
    total: int
    limit: int
    offset: int
    next_offset: int | None = None


def build_page(items: list[T], total: int, params: PaginationParams) -> Page[T]:
    consumed = params.offset + len(items)
    return Page(
        items=items,
        total=total,
        limit=params.limit,
        offset=params.offset,
        next_offset=consumed if consumed < total else None,
    )

"""Pagination helpers for list endpoints."""


from typing import Literal

from fastapi import Query
from pydantic import BaseModel

SortField = Literal["created_at", "updated_at", "total_amount", "paid_amount", "winner_name"]


class PaginationParams:
    """FastAPI dependency for `?page=1&limit=20&sort=created_at&order=desc`.

    ``sort`` is restricted to purchase attributes that are always set, so the
    in-memory sort never compares ``None``.
    """

    def __init__(
        self,
        page: int = Query(default=1, ge=1, description="Page number (1-based)"),
        limit: int = Query(default=20, ge=1, le=200, description="Items per page"),
        sort: SortField = Query(default="created_at", description="Sort field"),
        order: Literal["asc", "desc"] = Query(default="desc", description="Sort order"),
    ):
        self.page = page
        self.limit = limit
        self.sort = sort
        self.order = order

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class PageMeta(BaseModel):
    total: int
    page: int
    limit: int
    pages: int

"""Standardized JSON response envelopes: `{ data }` and `{ data, meta }`."""


import math
from typing import Generic, TypeVar

from pydantic import BaseModel

from fulfillment.core.pagination import PageMeta, PaginationParams

T = TypeVar("T")


class DataResponse(BaseModel, Generic[T]):
    data: T


class ListResponse(BaseModel, Generic[T]):
    data: list[T]
    meta: PageMeta


def paginated(items: list, total: int, pagination: PaginationParams) -> dict:
    """Build the `{data, meta}` dict validated by ListResponse."""
    return {
        "data": items,
        "meta": {
            "total": total,
            "page": pagination.page,
            "limit": pagination.limit,
            "pages": math.ceil(total / pagination.limit) if total else 0,
        },
    }

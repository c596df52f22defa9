"""Generic in-memory repository with pagination and simple equality filters."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel

ModelT = TypeVar("ModelT", bound=BaseModel)


class BaseRepository(Generic[ModelT]):
    """Process-local registry of domain objects keyed by ``id``.

    Objects are stored and returned by reference; callers mutate them in place.
    Nothing survives a restart.
    """

    model: type[ModelT]

    def __init__(self) -> None:
        self._items: dict[str, ModelT] = {}

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, entity_id: str) -> ModelT | None:
        return self._items.get(entity_id)

    def list(
        self,
        *,
        offset: int = 0,
        limit: int = 20,
        order_by: str = "created_at",
        order: str = "desc",
        filters: dict[str, Any] | None = None,
    ) -> tuple[list[ModelT], int]:
        """Return (items, total_count) with pagination and optional attribute filters."""
        items = list(self._items.values())

        if filters:
            for attr, value in filters.items():
                if value is not None:
                    items = [i for i in items if getattr(i, attr, None) == value]

        total = len(items)
        if items and hasattr(items[0], order_by):
            items.sort(key=lambda i: getattr(i, order_by), reverse=order == "desc")
        return items[offset:offset + limit], total

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def add(self, instance: ModelT) -> ModelT:
        self._items[instance.id] = instance  # type: ignore[attr-defined]
        return instance

"""Shared pydantic base classes for domain models."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class DomainModel(BaseModel):
    """Base for all domain models: snake_case in Python, camelCase on the wire."""

    model_config = {
        "populate_by_name": True,
        "alias_generator": to_camel,
    }


class TimestampMixin(DomainModel):
    """Adds created_at and updated_at."""

    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)

    def touch(self) -> None:
        self.updated_at = _now()

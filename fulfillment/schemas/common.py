"""Request/response schema base: snake_case in Python, camelCase in JSON."""

from __future__ import annotations

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
    }


class HealthResponse(CamelModel):
    status: str = "ok"
    app: str
    env: str
    progress_strategy: str

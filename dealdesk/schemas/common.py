"""Shared schema base and response envelope helpers."""

from decimal import Decimal
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

# Decimals travel as JSON numbers, like the frontend expects
Amount = Annotated[
    Decimal,
    PlainSerializer(lambda v: float(v), return_type=float, when_used="json"),
]


class ApiModel(BaseModel):
    """Base schema: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def envelope(data: Any, **meta: Any) -> dict:
    """Wrap a payload as {"success": true, "data": ..., "meta": {...}}."""
    body = {"success": True, "data": data}
    if meta:
        body["meta"] = meta
    return body

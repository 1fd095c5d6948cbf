from __future__ import annotations

from datetime import datetime, timezone
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel
from pydantic.config import ConfigDict


T = TypeVar("T")


def to_camel(value: str) -> str:
    parts = value.split("_")
    return parts[0] + "".join(word.capitalize() for word in parts[1:])


class BaseSchema(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Meta(BaseSchema):
    as_of: str
    source: str
    scope: Optional[str] = None
    category: Optional[str] = None
    degraded: Optional[bool] = None


class ResponseEnvelope(BaseSchema, Generic[T]):
    data: T
    meta: Optional[Meta] = None


def build_meta(
    source: str,
    *,
    scope: Optional[str] = None,
    category: Optional[str] = None,
    degraded: Optional[bool] = None,
) -> Meta:
    return Meta(
        as_of=datetime.now(timezone.utc).isoformat(),
        source=source,
        scope=scope,
        category=category,
        degraded=degraded,
    )

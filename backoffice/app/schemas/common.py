"""
Shared Pydantic building blocks.

Every payload travels in camelCase on the wire and snake_case in Python;
every response is wrapped in ``Envelope``.
"""

import enum
from typing import Annotated, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel

T = TypeVar("T")

# Identifiers must be non-empty once surrounding whitespace is dropped.
NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=64)]
PositiveInt = Annotated[int, Field(gt=0)]


class Source(str, enum.Enum):
    """Where a read-through lookup found its record."""
    LOCAL = "local"
    EXTERNAL = "external"


class CamelModel(BaseModel):
    """Base schema: camelCase aliases, accepts snake_case too, reads ORM objects."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class Envelope(BaseModel, Generic[T]):
    """
    Uniform response shape.

    ``source`` is only set by read-through lookups.
    """
    success: bool = True
    message: str
    data: Optional[T] = None
    source: Optional[Source] = None


class MessageResponse(BaseModel):
    success: bool = True
    message: str

"""
Shared schema building blocks.

The HTTP contract uses camelCase keys while the Python side keeps
snake_case attribute names.
"""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base model exposing camelCase aliases and accepting either spelling."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(CamelModel, Generic[T]):
    """Response envelope: `{success, message?, data}`."""

    success: bool = True
    message: Optional[str] = None
    data: T

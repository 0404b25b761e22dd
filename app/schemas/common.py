"""
Shared schema configuration and the JSON response envelope.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Generic, Optional, TypeVar

DataT = TypeVar("DataT")


class CamelModel(BaseModel):
    """Base schema exposing camelCase field names on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class APIResponse(CamelModel, Generic[DataT]):
    """Envelope wrapping every JSON response."""

    success: bool = Field(
        True,
        description="Whether the request succeeded"
    )
    message: Optional[str] = Field(
        None,
        description="Human-readable outcome"
    )
    data: Optional[DataT] = Field(
        None,
        description="Response payload"
    )

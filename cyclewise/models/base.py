"""Shared Pydantic base models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CyclewiseBase(BaseModel):
    """Base model with shared config for all Cyclewise schemas.

    Fields are snake_case in Python and camelCase on the wire; either
    spelling is accepted on input.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        str_strip_whitespace=True,
        alias_generator=to_camel,
    )

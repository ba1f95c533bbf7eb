# Copyright (c) Syntropy Systems
"""Shared Pydantic model helpers for idemfuzz."""

from __future__ import annotations

from typing import ClassVar, Union

from pydantic import BaseModel, ConfigDict
from typing_extensions import TypeAlias

JSONPrimitive: TypeAlias = Union[str, int, float, bool, None]


class IdemfuzzBaseModel(BaseModel):
    """Base model with shared config for idemfuzz schemas."""

    model_config: ClassVar[ConfigDict] = ConfigDict(
        extra="ignore",
        populate_by_name=True,
    )

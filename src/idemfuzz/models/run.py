# Copyright (c) Syntropy Systems
"""Data model for fuzzing iterations and their results."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional, cast

from pydantic import Field, model_serializer, model_validator

from .base import IdemfuzzBaseModel, JSONPrimitive

if TYPE_CHECKING:
    from collections.abc import ItemsView, KeysView

    from idemfuzz.diff import DiffSegment

ERROR_SENTINEL = "<error>"


class FormatOptions(IdemfuzzBaseModel):
    """Formatter configuration for one pass, stored as a flat mapping."""

    values: dict[str, JSONPrimitive] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _wrap_values(cls, data: object) -> object:
        if isinstance(data, FormatOptions):
            return data
        if isinstance(data, dict) and "values" not in data:
            return {"values": cast("dict[str, JSONPrimitive]", data)}
        return cast("object", data)

    @model_serializer(mode="plain")
    def _serialize(self) -> dict[str, JSONPrimitive]:
        return self.values

    def items(self) -> ItemsView[str, JSONPrimitive]:
        """Return the mapping's items view."""
        return self.values.items()

    def keys(self) -> KeysView[str]:
        """Return the mapping's keys view."""
        return self.values.keys()

    def get(
        self, key: str, default: JSONPrimitive = None
    ) -> JSONPrimitive:
        """Return a value by key or the provided default."""
        return self.values.get(key, default)

    def __getitem__(self, key: str) -> JSONPrimitive:
        return self.values[key]

    def to_json(self) -> str:
        """Pretty-printed JSON, as written to the corpus."""
        return self.model_dump_json(indent=2)


class ErrorKind(str, Enum):
    """Why a formatter pass failed."""

    INPUT_SYNTAX = "input-syntax"
    INTERNAL = "internal"


class Classification(str, Enum):
    """Final verdict for one iteration."""

    SUCCESS = "Success"
    ERROR = "Error"
    DIFF = "Diff"


@dataclass(frozen=True)
class GeneratedProgram:
    """A random program and the generator parameters that produced it."""

    source: str
    max_depth: int
    backend: str


@dataclass(frozen=True)
class FormatFailure:
    """A captured formatter failure."""

    kind: ErrorKind
    message: str
    detail: str  # traceback, or a structured dump when there is none


@dataclass(frozen=True)
class FormatOutcome:
    """Result of one formatter pass: either output or failure is set."""

    output: Optional[str] = None
    failure: Optional[FormatFailure] = None

    def __post_init__(self) -> None:
        if (self.output is None) == (self.failure is None):
            msg = "FormatOutcome needs exactly one of output or failure"
            raise ValueError(msg)

    @property
    def ok(self) -> bool:
        """Whether the pass produced output."""
        return self.failure is None

    @classmethod
    def success(cls, output: str) -> FormatOutcome:
        return cls(output=output)

    @classmethod
    def failed(cls, failure: FormatFailure) -> FormatOutcome:
        return cls(failure=failure)


@dataclass(frozen=True)
class RunResult:
    """Everything the report and the corpus need about the final iteration."""

    tries: int
    program: GeneratedProgram
    options: FormatOptions
    first: FormatOutcome
    second: Optional[FormatOutcome]  # None when the first pass failed
    classification: Classification
    diff: Optional[list[DiffSegment]] = None

    @property
    def failures(self) -> list[tuple[int, FormatFailure]]:
        """Failed passes as (pass number, failure) pairs."""
        found: list[tuple[int, FormatFailure]] = []
        for num, outcome in ((1, self.first), (2, self.second)):
            if outcome is not None and outcome.failure is not None:
                found.append((num, outcome.failure))
        return found


@dataclass(frozen=True)
class CorpusEntry:
    """On-disk form of one reportable run."""

    source: str
    first_output: str
    second_output: str
    options: FormatOptions

    @classmethod
    def from_result(cls, result: RunResult) -> CorpusEntry:
        """Build an entry, substituting the error sentinel for failed passes."""
        return cls(
            source=result.program.source,
            first_output=_output_or_sentinel(result.first),
            second_output=_output_or_sentinel(result.second),
            options=result.options,
        )


def _output_or_sentinel(outcome: FormatOutcome | None) -> str:
    if outcome is None or outcome.output is None:
        return ERROR_SENTINEL
    return outcome.output

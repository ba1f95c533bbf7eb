# Copyright (c) Syntropy Systems
"""Exception types raised by idemfuzz."""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from idemfuzz.models.run import ErrorKind


class IdemfuzzError(Exception):
    """Base class for idemfuzz errors."""


class FormatterError(IdemfuzzError):
    """Raised by an oracle adapter that knows how its failure should be classified."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message


class CorpusError(IdemfuzzError):
    """The persisted corpus entry is unreadable."""


class CorpusNotFoundError(CorpusError):
    """No corpus entry has been persisted yet."""


class TriesExhaustedError(IdemfuzzError):
    """The try budget ran out before anything reportable happened."""

    def __init__(self, tries: int) -> None:
        super().__init__(f"Nothing to report after {tries} tries")
        self.tries = tries


class UnknownBackendError(IdemfuzzError, KeyError):
    """A generator or oracle name is not registered."""

    def __init__(self, kind: str, name: str, available: list[str]) -> None:
        super().__init__(
            f"Unknown {kind} '{name}' (available: {', '.join(available)})"
        )
        self.kind = kind
        self.name = name
        self.available = available

    def __str__(self) -> str:
        return str(self.args[0])

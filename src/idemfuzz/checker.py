# Copyright (c) Syntropy Systems
"""Idempotence checking: format, reformat, compare."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from idemfuzz.config import DEFAULT_SYNTAX_ERROR_PATTERN
from idemfuzz.models.run import Classification, ErrorKind, FormatOutcome
from idemfuzz.oracle import run_oracle

if TYPE_CHECKING:
    from idemfuzz.models.run import FormatOptions
    from idemfuzz.oracle import Oracle


def classify(first: FormatOutcome, second: FormatOutcome | None) -> Classification:
    """Classify a pair of formatter outcomes.

    Error if either pass failed, Diff if both succeeded with different
    output, Success otherwise.
    """
    if not first.ok or (second is not None and not second.ok):
        return Classification.ERROR
    if second is None:
        msg = "A successful first pass must be followed by a second pass"
        raise ValueError(msg)
    if first.output != second.output:
        return Classification.DIFF
    return Classification.SUCCESS


@dataclass(frozen=True)
class CheckResult:
    """Both passes of one idempotence check."""

    first: FormatOutcome
    second: Optional[FormatOutcome]

    @property
    def classification(self) -> Classification:
        return classify(self.first, self.second)


class IdempotenceChecker:
    """Runs the oracle on a program, then on its own output."""

    oracle: Oracle
    syntax_error_pattern: re.Pattern[str]

    def __init__(
        self,
        oracle: Oracle,
        syntax_error_pattern: str = DEFAULT_SYNTAX_ERROR_PATTERN,
    ) -> None:
        self.oracle = oracle
        self.syntax_error_pattern = re.compile(syntax_error_pattern)

    def format(self, source: str, options: FormatOptions) -> FormatOutcome:
        """One oracle pass with failures normalized."""
        return run_oracle(self.oracle, source, options, self.syntax_error_pattern)

    def check(
        self,
        source: str,
        options: FormatOptions,
        *,
        discard_syntax_errors: bool = True,
    ) -> CheckResult | None:
        """Check one program for idempotence.

        Returns None when the first pass rejects the input as invalid syntax
        and such rejections are being discarded: the generator produced a bad
        program, which says nothing about the formatter.
        """
        first = self.format(source, options)
        if first.output is None:
            if (
                discard_syntax_errors
                and first.failure is not None
                and first.failure.kind is ErrorKind.INPUT_SYNTAX
            ):
                return None
            return CheckResult(first=first, second=None)

        # The second pass sees the formatter's own output, so any failure
        # here is a formatter defect regardless of its kind.
        second = self.format(first.output, options)
        return CheckResult(first=first, second=second)

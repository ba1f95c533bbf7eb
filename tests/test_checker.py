# Copyright (c) Syntropy Systems
"""Tests for the idempotence checker and classification."""

from __future__ import annotations

import pytest
from conftest import (
    TAIL_COMMENT,
    AppendOnceOracle,
    FailingOracle,
    IdentityOracle,
    SecondPassFailingOracle,
)

from idemfuzz.checker import IdempotenceChecker, classify
from idemfuzz.models.run import (
    Classification,
    ErrorKind,
    FormatFailure,
    FormatOptions,
    FormatOutcome,
)

FAILURE = FormatFailure(kind=ErrorKind.INTERNAL, message="boom", detail="boom")


class TestClassify:
    """Tests for classify()."""

    @pytest.mark.parametrize(
        ("first", "second", "expected"),
        [
            (FormatOutcome.success("a"), FormatOutcome.success("a"), Classification.SUCCESS),
            (FormatOutcome.success("a"), FormatOutcome.success("b"), Classification.DIFF),
            (FormatOutcome.failed(FAILURE), None, Classification.ERROR),
            (FormatOutcome.success("a"), FormatOutcome.failed(FAILURE), Classification.ERROR),
        ],
    )
    def test_exactly_one_classification(self, first, second, expected) -> None:
        """Test every outcome pair maps to a single classification."""
        assert classify(first, second) is expected

    def test_successful_first_pass_needs_second(self) -> None:
        """Test that a lone successful pass cannot be classified."""
        with pytest.raises(ValueError, match="second pass"):
            classify(FormatOutcome.success("a"), None)

    def test_outcome_needs_exactly_one_field(self) -> None:
        """Test FormatOutcome rejects both or neither of output and failure."""
        with pytest.raises(ValueError):
            FormatOutcome()
        with pytest.raises(ValueError):
            FormatOutcome(output="a", failure=FAILURE)


class TestIdempotenceChecker:
    """Tests for IdempotenceChecker.check()."""

    def test_identity_is_success(self, options: FormatOptions) -> None:
        """Test a fixed-point formatter is classified Success."""
        oracle = IdentityOracle()
        result = IdempotenceChecker(oracle).check("x = 1\n", options)

        assert result is not None
        assert result.classification is Classification.SUCCESS
        assert oracle.calls == ["x = 1\n", "x = 1\n"]

    def test_second_pass_sees_first_output(self, options: FormatOptions) -> None:
        """Test the second pass is fed the first pass's output."""
        oracle = AppendOnceOracle()
        result = IdempotenceChecker(oracle).check("x = 1\n", options)

        assert result is not None
        assert oracle.calls == ["x = 1\n", "x = 1\n" + TAIL_COMMENT]
        assert result.classification is Classification.DIFF

    def test_internal_error_skips_second_pass(self, options: FormatOptions) -> None:
        """Test an internal first-pass failure is reported without a second pass."""
        oracle = FailingOracle(ErrorKind.INTERNAL)
        result = IdempotenceChecker(oracle).check("x = 1\n", options)

        assert result is not None
        assert result.classification is Classification.ERROR
        assert result.second is None
        assert len(oracle.calls) == 1
        assert result.first.failure is not None
        assert result.first.failure.kind is ErrorKind.INTERNAL

    def test_syntax_rejection_discarded(self, options: FormatOptions) -> None:
        """Test a first-pass syntax rejection is discarded by default."""
        oracle = FailingOracle(ErrorKind.INPUT_SYNTAX)
        result = IdempotenceChecker(oracle).check("x = (\n", options)

        assert result is None

    def test_syntax_rejection_kept_when_requested(self, options: FormatOptions) -> None:
        """Test syntax rejections become errors when not discarding."""
        oracle = FailingOracle(ErrorKind.INPUT_SYNTAX)
        result = IdempotenceChecker(oracle).check(
            "x = (\n", options, discard_syntax_errors=False
        )

        assert result is not None
        assert result.classification is Classification.ERROR
        assert result.first.failure is not None
        assert result.first.failure.kind is ErrorKind.INPUT_SYNTAX

    def test_second_pass_failure_never_discarded(self, options: FormatOptions) -> None:
        """Test a second-pass failure is reported even if it looks like a syntax error."""
        oracle = SecondPassFailingOracle()
        result = IdempotenceChecker(oracle).check("x = 1\n", options)

        assert result is not None
        assert result.classification is Classification.ERROR
        assert result.second is not None
        assert result.second.failure is not None
        assert result.second.failure.kind is ErrorKind.INPUT_SYNTAX
        assert "cannot reparse own output" in result.second.failure.detail

    def test_pattern_marks_syntax_errors(self, options: FormatOptions) -> None:
        """Test the configured pattern classifies foreign exceptions."""
        oracle = SecondPassFailingOracle()
        checker = IdempotenceChecker(oracle, syntax_error_pattern=r"never matches")
        result = checker.check("x = 1\n", options)

        assert result is not None
        assert result.second is not None
        assert result.second.failure is not None
        assert result.second.failure.kind is ErrorKind.INTERNAL

# Copyright (c) Syntropy Systems
"""The generate, filter, format, classify loop."""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Union

from idemfuzz.diff import diff_chars
from idemfuzz.errors import TriesExhaustedError
from idemfuzz.filters import BoringFilter
from idemfuzz.models.run import Classification, GeneratedProgram, RunResult

if TYPE_CHECKING:
    from idemfuzz.checker import IdempotenceChecker
    from idemfuzz.generators import GeneratorFn
    from idemfuzz.models.run import FormatOptions
    from idemfuzz.sampler import OptionSampler

logger = logging.getLogger(__name__)

REPLAY_BACKEND = "replay"


@dataclass
class RunSettings:
    """Switches controlling when the loop stops."""

    max_depth: int = 7
    generator: str = "ast"
    show_initial_parse_errors: bool = False
    show_successes: bool = False
    reproduce: bool = False


@dataclass(frozen=True)
class Continue:
    """Nothing worth reporting this pass; go again."""

    reason: str


@dataclass(frozen=True)
class Report:
    """Stop and report this result."""

    result: RunResult


LoopOutcome = Union[Continue, Report]


@dataclass(frozen=True)
class Replay:
    """A persisted program and options to run instead of generating."""

    source: str
    options: FormatOptions


class RunController:
    """Drives fuzzing iterations until something is worth reporting.

    Each call to step() runs one complete iteration. run() repeats it
    with no upper bound unless max_tries is given.
    """

    tries: int

    def __init__(  # noqa: PLR0913
        self,
        generator: GeneratorFn,
        sampler: OptionSampler,
        checker: IdempotenceChecker,
        boring_filter: BoringFilter | None = None,
        settings: RunSettings | None = None,
        rng: random.Random | None = None,
        replay: Replay | None = None,
    ) -> None:
        self.generator = generator
        self.sampler = sampler
        self.checker = checker
        self.boring_filter = boring_filter or BoringFilter()
        self.settings = settings or RunSettings()
        self.rng = rng or random.Random()  # noqa: S311
        self.replay = replay
        self.tries = 0

        if self.settings.reproduce and replay is None:
            msg = "Reproduction mode needs a persisted program to replay"
            raise ValueError(msg)

    @property
    def discard_syntax_errors(self) -> bool:
        """Whether first-pass syntax rejections are silently retried."""
        return not (self.settings.reproduce or self.settings.show_initial_parse_errors)

    def _next_input(self) -> tuple[GeneratedProgram, Optional[FormatOptions]]:
        if self.settings.reproduce and self.replay is not None:
            program = GeneratedProgram(
                source=self.replay.source,
                max_depth=self.settings.max_depth,
                backend=REPLAY_BACKEND,
            )
            return program, self.replay.options
        source = self.generator(self.settings.max_depth, self.rng)
        program = GeneratedProgram(
            source=source,
            max_depth=self.settings.max_depth,
            backend=self.settings.generator,
        )
        return program, None

    def step(self) -> LoopOutcome:
        """Run one iteration."""
        self.tries += 1
        program, options = self._next_input()

        if self.boring_filter.should_discard(
            program.source, reproduce=self.settings.reproduce
        ):
            logger.debug("Try %d: discarded boring program", self.tries)
            return Continue("boring")

        if options is None:
            options = self.sampler.sample()

        check = self.checker.check(
            program.source,
            options,
            discard_syntax_errors=self.discard_syntax_errors,
        )
        if check is None:
            logger.debug("Try %d: discarded input rejected as invalid syntax", self.tries)
            return Continue("syntax")

        classification = check.classification
        diff = None
        second_output = check.second.output if check.second is not None else None
        if (
            classification is Classification.DIFF
            and check.first.output is not None
            and second_output is not None
        ):
            diff = diff_chars(check.first.output, second_output)

        result = RunResult(
            tries=self.tries,
            program=program,
            options=options,
            first=check.first,
            second=check.second,
            classification=classification,
            diff=diff,
        )

        if (
            classification is not Classification.SUCCESS
            or self.settings.show_successes
            or self.settings.reproduce
        ):
            logger.debug("Try %d: %s", self.tries, classification.value)
            return Report(result)
        return Continue("success")

    def run(self, max_tries: int | None = None) -> RunResult:
        """Loop until an iteration is reportable.

        Raises TriesExhaustedError if max_tries iterations pass without one.
        """
        while max_tries is None or self.tries < max_tries:
            outcome = self.step()
            if isinstance(outcome, Report):
                return outcome.result
        raise TriesExhaustedError(self.tries)

# Copyright (c) Syntropy Systems
"""Formatter oracles and failure normalization."""
from __future__ import annotations

import pprint
import re
import shlex
import traceback
from typing import TYPE_CHECKING, Callable, Protocol

import black
from black.parsing import InvalidInput

from idemfuzz.errors import FormatterError, UnknownBackendError
from idemfuzz.models.run import ErrorKind, FormatFailure, FormatOptions, FormatOutcome

if TYPE_CHECKING:
    from idemfuzz.sampler import OptionSpec


class Oracle(Protocol):
    """A formatter under test."""

    name: str
    syntax_errors: tuple[type[Exception], ...]

    def default_space(self) -> dict[str, OptionSpec]:
        ...

    def format(self, source: str, options: FormatOptions) -> str:
        ...

    def reproduction_command(self, path: str, options: FormatOptions) -> list[str]:
        ...


def _failure_detail(error: BaseException) -> str:
    if error.__traceback__ is not None:
        return "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        ).rstrip()
    # No stack to show; dump the error's state instead
    return pprint.pformat(
        {"type": type(error).__name__, "args": error.args, **vars(error)},
        depth=10,
    )


def normalize_failure(
    oracle: Oracle,
    error: Exception,
    syntax_error_pattern: re.Pattern[str] | None = None,
) -> FormatFailure:
    """Map an arbitrary oracle exception onto the closed ErrorKind set."""
    if isinstance(error, FormatterError):
        kind = error.kind
    elif isinstance(error, oracle.syntax_errors):
        kind = ErrorKind.INPUT_SYNTAX
    elif syntax_error_pattern is not None and syntax_error_pattern.search(
        f"{type(error).__name__}: {error}"
    ):
        kind = ErrorKind.INPUT_SYNTAX
    else:
        kind = ErrorKind.INTERNAL
    return FormatFailure(kind=kind, message=str(error), detail=_failure_detail(error))


def run_oracle(
    oracle: Oracle,
    source: str,
    options: FormatOptions,
    syntax_error_pattern: re.Pattern[str] | None = None,
) -> FormatOutcome:
    """Run one formatter pass, capturing any failure as an outcome."""
    try:
        return FormatOutcome.success(oracle.format(source, options))
    except Exception as e:  # noqa: BLE001
        return FormatOutcome.failed(normalize_failure(oracle, e, syntax_error_pattern))


class BlackOracle:
    """The black code formatter, driven through black.format_str."""

    name = "black"
    syntax_errors: tuple[type[Exception], ...] = (InvalidInput,)

    def default_space(self) -> dict[str, OptionSpec]:
        return {
            "line_length": {"distribution": "int_uniform", "min": 0, "max": 199},
            "string_normalization": {"values": [True, False]},
            "magic_trailing_comma": {"values": [True, False]},
            "preview": {"values": [True, False]},
            "dialect": {"values": ["py", "pyi"]},
        }

    def mode(self, options: FormatOptions) -> black.Mode:
        """Build the black.Mode for a set of options."""
        return black.Mode(
            line_length=int(options.get("line_length", black.DEFAULT_LINE_LENGTH)),
            string_normalization=bool(options.get("string_normalization", True)),
            magic_trailing_comma=bool(options.get("magic_trailing_comma", True)),
            preview=bool(options.get("preview", False)),
            is_pyi=options.get("dialect", "py") == "pyi",
        )

    def format(self, source: str, options: FormatOptions) -> str:
        return black.format_str(source, mode=self.mode(options))

    def reproduction_command(self, path: str, options: FormatOptions) -> list[str]:
        command = [
            "black",
            "--diff",
            f"--line-length={options.get('line_length', black.DEFAULT_LINE_LENGTH)}",
        ]
        if not options.get("string_normalization", True):
            command.append("--skip-string-normalization")
        if not options.get("magic_trailing_comma", True):
            command.append("--skip-magic-trailing-comma")
        if options.get("preview", False):
            command.append("--preview")
        if options.get("dialect", "py") == "pyi":
            command.append("--pyi")
        command.append(path)
        return command


def format_command(command: list[str]) -> str:
    """Render a command line for copy-pasting into a shell."""
    return " ".join(shlex.quote(part) for part in command)


_ORACLES: dict[str, Callable[[], Oracle]] = {
    "black": BlackOracle,
}


def register_oracle(name: str, factory: Callable[[], Oracle]) -> None:
    """Make an oracle selectable by name."""
    _ORACLES[name] = factory


def list_oracles() -> list[str]:
    """Registered oracle names, sorted."""
    return sorted(_ORACLES)


def get_oracle(name: str) -> Oracle:
    """Instantiate a registered oracle."""
    try:
        factory = _ORACLES[name]
    except KeyError:
        raise UnknownBackendError("oracle", name, list_oracles()) from None
    return factory()

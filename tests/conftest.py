# Copyright (c) Syntropy Systems
"""Pytest fixtures for idemfuzz tests."""

from __future__ import annotations

import os
import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

from idemfuzz.errors import FormatterError
from idemfuzz.models.run import ErrorKind, FormatOptions

# Store original cwd at module load time
_original_cwd = Path.cwd()

TAIL_COMMENT = "# formatted\n"


class FakeOracle:
    """Base for scripted oracles; records every call."""

    name = "fake"
    syntax_errors: tuple[type[Exception], ...] = (SyntaxError,)

    def __init__(self) -> None:
        self.calls: list[str] = []

    def default_space(self):
        return {
            "width": {"distribution": "int_uniform", "min": 0, "max": 199},
            "tabs": {"values": [True, False]},
            "dialect": {"values": ["py", "pyi"]},
        }

    def format(self, source: str, options: FormatOptions) -> str:
        self.calls.append(source)
        return self.transform(source)

    def transform(self, source: str) -> str:
        return source

    def reproduction_command(self, path: str, options: FormatOptions) -> list[str]:
        return ["fake-fmt", *(f"--{key}={value}" for key, value in options.items()), path]


class IdentityOracle(FakeOracle):
    """format(x) == x."""

    name = "identity"


class AppendOnceOracle(FakeOracle):
    """Appends a trailing comment the first time it sees each input."""

    name = "append"

    def __init__(self) -> None:
        super().__init__()
        self.seen: dict[str, str] = {}

    def transform(self, source: str) -> str:
        if source not in self.seen:
            self.seen[source] = source + TAIL_COMMENT
        return self.seen[source]


class FailingOracle(FakeOracle):
    """Always fails with a fixed error kind."""

    name = "failing"

    def __init__(self, kind: ErrorKind = ErrorKind.INTERNAL) -> None:
        super().__init__()
        self.kind = kind

    def transform(self, source: str) -> str:
        raise FormatterError(self.kind, f"{self.kind.value} failure")


class SecondPassFailingOracle(FakeOracle):
    """Succeeds once, then raises on every later call."""

    name = "second-pass"

    def transform(self, source: str) -> str:
        if len(self.calls) > 1:
            msg = "SyntaxError: cannot reparse own output"
            raise RuntimeError(msg)
        return source


def fixed_generator(*sources: str):
    """A generator backend cycling through fixed programs."""
    calls: list[int] = []

    def generate(max_depth, rng):
        calls.append(max_depth)
        return sources[(len(calls) - 1) % len(sources)]

    generate.calls = calls  # type: ignore[attr-defined]
    return generate


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def fuzz_project(
    temp_dir: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[Path, None, None]:
    """Change into an empty project directory with no global config."""
    home = temp_dir / "home"
    home.mkdir()
    monkeypatch.setattr("idemfuzz.config.get_global_config_dir", lambda: home / ".idemfuzz")

    project = temp_dir / "project"
    project.mkdir()
    os.chdir(project)

    yield project

    # Always return to original cwd
    os.chdir(_original_cwd)


@pytest.fixture
def options() -> FormatOptions:
    return FormatOptions.model_validate({"width": 80, "tabs": False, "dialect": "py"})

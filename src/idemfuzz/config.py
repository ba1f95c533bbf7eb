# Copyright (c) Syntropy Systems
"""Configuration management for idemfuzz."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, cast

import yaml

if TYPE_CHECKING:
    from idemfuzz.sampler import OptionSpec

STATE_DIR_NAME = ".idemfuzz"

# Empty, whitespace/semicolon-only, or using a global/nonlocal declaration.
DEFAULT_BORING_PATTERN = r"^[\s;]*$|\b(?:global|nonlocal)\b"

DEFAULT_SYNTAX_ERROR_PATTERN = r"SyntaxError|Cannot parse"


@dataclass
class FuzzConfig:
    """Configuration for idemfuzz."""

    # Generator backend name
    generator: str = "ast"

    # Maximum AST depth passed to the generator
    max_depth: int = 7

    # Formatter under test
    oracle: str = "black"

    # Programs matching this are never sent to the formatter
    boring_pattern: str = DEFAULT_BORING_PATTERN

    # First-pass failures matching this count as input rejections
    syntax_error_pattern: str = DEFAULT_SYNTAX_ERROR_PATTERN

    # Where the corpus entry lives (default: .idemfuzz in the working directory)
    corpus_dir: str | None = None

    # Per-option overrides of the oracle's option space
    option_space: dict[str, OptionSpec] = field(default_factory=dict)


def get_state_dir(cwd: Path | None = None) -> Path:
    """Get the .idemfuzz directory for a working directory."""
    if cwd is None:
        cwd = Path.cwd()
    return cwd / STATE_DIR_NAME


def get_global_config_dir() -> Path:
    """Get the global idemfuzz config directory (~/.idemfuzz)."""
    return Path.home() / STATE_DIR_NAME


def get_corpus_dir(config: FuzzConfig, cwd: Path | None = None) -> Path:
    """Resolve the corpus directory, relative paths against the working directory."""
    if cwd is None:
        cwd = Path.cwd()
    if config.corpus_dir:
        corpus_dir = Path(config.corpus_dir).expanduser()
        return corpus_dir if corpus_dir.is_absolute() else cwd / corpus_dir
    return get_state_dir(cwd)


def load_config(cwd: Path | None = None) -> FuzzConfig:
    """Load configuration from .idemfuzz/config.yaml or defaults.

    Looks for config in:
    1. .idemfuzz/config.yaml in the working directory
    2. ~/.idemfuzz/config.yaml
    3. Defaults
    """
    config = FuzzConfig()

    config_path = get_state_dir(cwd) / "config.yaml"
    if not config_path.exists():
        config_path = get_global_config_dir() / "config.yaml"

    if config_path.exists():
        with config_path.open() as f:
            data = cast("dict[str, object]", yaml.safe_load(f) or {})

        for key in ("generator", "oracle", "boring_pattern", "syntax_error_pattern"):
            value = data.get(key)
            if isinstance(value, str) and value:
                setattr(config, key, value)
        max_depth = data.get("max_depth")
        if isinstance(max_depth, int) and not isinstance(max_depth, bool):
            config.max_depth = max_depth
        corpus_dir = data.get("corpus_dir")
        if isinstance(corpus_dir, str) and corpus_dir:
            config.corpus_dir = corpus_dir
        option_space = data.get("option_space")
        if isinstance(option_space, dict):
            config.option_space = {
                str(name): cast("OptionSpec", spec)
                for name, spec in option_space.items()
                if isinstance(spec, dict)
            }

    return config


def default_config_data() -> dict[str, object]:
    """Default values as written by `idemfuzz init`."""
    defaults = FuzzConfig()
    return {
        "generator": defaults.generator,
        "max_depth": defaults.max_depth,
        "oracle": defaults.oracle,
        "boring_pattern": defaults.boring_pattern,
        "syntax_error_pattern": defaults.syntax_error_pattern,
    }

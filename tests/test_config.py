# Copyright (c) Syntropy Systems
"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import yaml

from idemfuzz.config import (
    DEFAULT_BORING_PATTERN,
    FuzzConfig,
    get_corpus_dir,
    get_state_dir,
    load_config,
)


def write_config(directory: Path, data: dict[str, object]) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "config.yaml").write_text(yaml.safe_dump(data))


class TestLoadConfig:
    """Tests for load_config()."""

    def test_defaults(self, fuzz_project: Path) -> None:
        """Test defaults apply without any config file."""
        config = load_config(fuzz_project)

        assert config.generator == "ast"
        assert config.max_depth == 7
        assert config.oracle == "black"
        assert config.boring_pattern == DEFAULT_BORING_PATTERN
        assert config.option_space == {}

    def test_project_config(self, fuzz_project: Path) -> None:
        """Test values are read from .idemfuzz/config.yaml."""
        write_config(
            get_state_dir(fuzz_project),
            {
                "generator": "tokens",
                "max_depth": 3,
                "option_space": {"line_length": {"values": [1, 2]}},
            },
        )

        config = load_config(fuzz_project)

        assert config.generator == "tokens"
        assert config.max_depth == 3
        assert config.option_space == {"line_length": {"values": [1, 2]}}

    def test_wrong_types_ignored(self, fuzz_project: Path) -> None:
        """Test malformed values fall back to defaults."""
        write_config(
            get_state_dir(fuzz_project),
            {"max_depth": "deep", "generator": 5, "option_space": ["x"]},
        )

        config = load_config(fuzz_project)

        assert config.max_depth == 7
        assert config.generator == "ast"
        assert config.option_space == {}

    def test_global_config(self, fuzz_project: Path) -> None:
        """Test ~/.idemfuzz/config.yaml is used when the project has none."""
        from idemfuzz import config as config_module

        write_config(config_module.get_global_config_dir(), {"max_depth": 2})

        assert load_config(fuzz_project).max_depth == 2


class TestCorpusDir:
    """Tests for get_corpus_dir()."""

    def test_default(self, temp_dir: Path) -> None:
        """Test the corpus defaults to .idemfuzz in the working directory."""
        assert get_corpus_dir(FuzzConfig(), temp_dir) == temp_dir / ".idemfuzz"

    def test_relative(self, temp_dir: Path) -> None:
        """Test relative corpus paths resolve against the working directory."""
        config = FuzzConfig(corpus_dir="findings")

        assert get_corpus_dir(config, temp_dir) == temp_dir / "findings"

    def test_absolute(self, temp_dir: Path) -> None:
        """Test absolute corpus paths are used as-is."""
        config = FuzzConfig(corpus_dir=str(temp_dir / "abs"))

        assert get_corpus_dir(config, Path("/elsewhere")) == temp_dir / "abs"

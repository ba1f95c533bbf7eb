# Copyright (c) Syntropy Systems
"""Persistence of the most recent reportable run."""
from __future__ import annotations

import json
import logging
import os
import tempfile
from contextlib import suppress
from typing import TYPE_CHECKING

from pydantic import ValidationError

from idemfuzz.controller import Replay
from idemfuzz.errors import CorpusError, CorpusNotFoundError
from idemfuzz.models.run import ERROR_SENTINEL, FormatOptions

if TYPE_CHECKING:
    from pathlib import Path

    from idemfuzz.models.run import CorpusEntry, FormatOutcome

logger = logging.getLogger(__name__)

INPUT_FILE = "random.py"
BACKUP_FILE = "random.backup.py"
FIRST_OUTPUT_FILE = "formatted1.py"
SECOND_OUTPUT_FILE = "formatted2.py"
OPTIONS_FILE = "options.json"


def atomic_write(path: Path, text: str) -> None:
    """Write text so readers see either the old file or the complete new one."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            _ = f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        with suppress(FileNotFoundError):
            os.unlink(tmp_name)
        raise


class CorpusStore:
    """The corpus directory: one entry, overwritten by every run.

    Files are written in a fixed order (input, outputs, options) so a
    reader never finds options without the input they belong to.
    """

    directory: Path

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    @property
    def input_path(self) -> Path:
        return self.directory / INPUT_FILE

    @property
    def backup_path(self) -> Path:
        return self.directory / BACKUP_FILE

    @property
    def first_output_path(self) -> Path:
        return self.directory / FIRST_OUTPUT_FILE

    @property
    def second_output_path(self) -> Path:
        return self.directory / SECOND_OUTPUT_FILE

    @property
    def options_path(self) -> Path:
        return self.directory / OPTIONS_FILE

    def exists(self) -> bool:
        """Whether there is an entry that can be replayed."""
        return self.input_path.exists() and self.options_path.exists()

    def save(self, entry: CorpusEntry) -> None:
        """Persist an entry, replacing whatever was there."""
        atomic_write(self.input_path, entry.source)
        atomic_write(self.backup_path, entry.source)
        self._write_outputs(entry.first_output, entry.second_output)
        atomic_write(self.options_path, entry.options.to_json())
        logger.debug("Saved corpus entry to %s", self.directory)

    def save_outputs(
        self, first: FormatOutcome, second: FormatOutcome | None
    ) -> None:
        """Refresh only the output files, leaving input and options alone."""
        self._write_outputs(
            first.output if first.output is not None else ERROR_SENTINEL,
            second.output
            if second is not None and second.output is not None
            else ERROR_SENTINEL,
        )

    def _write_outputs(self, first: str, second: str) -> None:
        atomic_write(self.first_output_path, first)
        atomic_write(self.second_output_path, second)

    def load(self) -> Replay:
        """Read back the persisted program and options."""
        if not self.exists():
            msg = (
                f"No saved program in {self.directory}. "
                "Run without --reproduce first."
            )
            raise CorpusNotFoundError(msg)

        source = self.input_path.read_bytes().decode("utf-8")
        try:
            options = FormatOptions.model_validate(
                json.loads(self.options_path.read_text(encoding="utf-8"))
            )
        except (json.JSONDecodeError, ValidationError) as e:
            msg = f"Invalid options file {self.options_path}: {e}"
            raise CorpusError(msg) from e
        return Replay(source=source, options=options)

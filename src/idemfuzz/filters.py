# Copyright (c) Syntropy Systems
"""Boring-input filtering."""
from __future__ import annotations

import re

from idemfuzz.config import DEFAULT_BORING_PATTERN


class BoringFilter:
    """Rejects generated programs that are unlikely to tell us anything.

    The pattern is an empirical heuristic tuned against generator output,
    so it is configurable rather than fixed.
    """

    pattern: re.Pattern[str]

    def __init__(self, pattern: str = DEFAULT_BORING_PATTERN) -> None:
        self.pattern = re.compile(pattern)

    def is_boring(self, source: str) -> bool:
        """Return whether the program matches the boring predicate."""
        return self.pattern.search(source) is not None

    def should_discard(self, source: str, *, reproduce: bool = False) -> bool:
        """Return whether the controller should skip this program.

        Replayed programs are never discarded.
        """
        if reproduce:
            return False
        return self.is_boring(source)

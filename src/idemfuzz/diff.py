# Copyright (c) Syntropy Systems
"""Character-level diff rendering."""
from __future__ import annotations

import difflib
from dataclasses import dataclass
from typing import Literal

from rich.text import Text

DiffOp = Literal["equal", "insert", "delete"]

STYLES: dict[str, str] = {
    "insert": "on green",
    "delete": "on red",
    "equal": "grey50",
}


@dataclass(frozen=True)
class DiffSegment:
    """A run of characters that is unchanged, inserted, or deleted."""

    op: DiffOp
    text: str


def diff_chars(before: str, after: str) -> list[DiffSegment]:
    """Compute a character-level diff from before to after."""
    matcher = difflib.SequenceMatcher(None, before, after, autojunk=False)
    segments: list[DiffSegment] = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            segments.append(DiffSegment("equal", before[i1:i2]))
            continue
        # "replace" is a deletion followed by an insertion
        if tag in ("delete", "replace"):
            segments.append(DiffSegment("delete", before[i1:i2]))
        if tag in ("insert", "replace"):
            segments.append(DiffSegment("insert", after[j1:j2]))
    return segments


def render_diff(segments: list[DiffSegment]) -> Text:
    """Render segments with a background marking insertions and deletions.

    A newline inside a change becomes a highlighted space plus the real
    newline, so added or removed line breaks stay visible.
    """
    text = Text()
    for segment in segments:
        style = STYLES[segment.op]
        if segment.op == "equal":
            text.append(segment.text, style=style)
            continue
        lines = segment.text.split("\n")
        for i, line in enumerate(lines):
            if line:
                text.append(line, style=style)
            if i < len(lines) - 1:
                text.append(" ", style=style)
                text.append("\n")
    return text

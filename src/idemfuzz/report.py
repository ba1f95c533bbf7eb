# Copyright (c) Syntropy Systems
"""Report assembly for a finished fuzzing run."""
from __future__ import annotations

import io
from dataclasses import dataclass
from typing import TYPE_CHECKING

from rich.console import Console, Group
from rich.syntax import Syntax
from rich.text import Text

from idemfuzz.diff import render_diff
from idemfuzz.models.run import Classification

if TYPE_CHECKING:
    from rich.console import RenderableType

    from idemfuzz.models.run import RunResult

STATUS_STYLES: dict[Classification, str] = {
    Classification.SUCCESS: "green",
    Classification.ERROR: "red",
    Classification.DIFF: "red",
}


@dataclass(frozen=True)
class ReportSettings:
    """Terminal properties the report is laid out for."""

    width: int = 80
    color: bool = True


def highlight(source: str) -> Syntax:
    """Python source with line numbers and syntax colors."""
    return Syntax(
        source,
        "python",
        line_numbers=True,
        word_wrap=True,
        theme="ansi_dark",
        background_color="default",
    )


def format_error(num: int, detail: str) -> Text:
    return Text(f"formatter pass {num} error:\n{detail}")


def status_message(result: RunResult, *, reproduce: bool) -> Text:
    """The colored status line, e.g. "Diff after 12 tries."."""
    status = result.classification
    noun = "try" if result.tries == 1 else "tries"
    hint = (
        "Reproduced with `--reproduce`."
        if reproduce
        else "Add `--reproduce` to reproduce, or play with:"
    )
    return Text.assemble(
        (status.value, STATUS_STYLES[status]),
        f" after {result.tries} {noun}. {hint}",
    )


def build_report(
    result: RunResult,
    settings: ReportSettings,
    *,
    reproduce: bool = False,
    command: str | None = None,
) -> Group:
    """Lay out the full report as a rich renderable."""
    separator = Text("─" * settings.width, style="dim")
    parts: list[RenderableType] = [highlight(result.program.source), separator]

    if result.diff is not None:
        parts.append(render_diff(result.diff))
    elif (
        result.classification is Classification.SUCCESS
        and result.first.output is not None
    ):
        parts.append(highlight(result.first.output))

    for num, failure in result.failures:
        parts.append(format_error(num, failure.detail))

    parts.extend(
        [
            separator,
            Text(result.options.to_json()),
            separator,
            status_message(result, reproduce=reproduce),
        ]
    )
    if command is not None and not reproduce:
        parts.append(Text(command))
    return Group(*parts)


def render_report(
    result: RunResult,
    settings: ReportSettings,
    *,
    reproduce: bool = False,
    command: str | None = None,
) -> str:
    """Render the report to a string, ANSI-colored when settings.color is set."""
    buffer = io.StringIO()
    console = Console(
        file=buffer,
        width=settings.width,
        force_terminal=settings.color,
        no_color=not settings.color,
        color_system="standard" if settings.color else None,
        highlight=False,
        legacy_windows=False,
    )
    console.print(
        build_report(result, settings, reproduce=reproduce, command=command),
        soft_wrap=True,
    )
    return buffer.getvalue()

# Copyright (c) Syntropy Systems
"""idemfuzz run command."""
from __future__ import annotations

import logging
import random
import re
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from idemfuzz.checker import IdempotenceChecker
from idemfuzz.config import get_corpus_dir, load_config
from idemfuzz.controller import RunController, RunSettings
from idemfuzz.corpus import CorpusStore
from idemfuzz.errors import CorpusError, TriesExhaustedError, UnknownBackendError
from idemfuzz.filters import BoringFilter
from idemfuzz.generators import get_generator
from idemfuzz.models.run import Classification, CorpusEntry
from idemfuzz.oracle import format_command, get_oracle
from idemfuzz.report import ReportSettings, render_report
from idemfuzz.sampler import OptionSampler

console = Console()
err_console = Console(stderr=True)

EXIT_FOUND = 1
EXIT_USAGE = 2


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def run(  # noqa: PLR0913, PLR0915
    ctx: typer.Context,
    generator: Optional[str] = typer.Option(
        None,
        "--generator", "--fuzzer", "-g",
        help="Program generator backend (see `idemfuzz generators`)",
    ),
    max_depth: Optional[int] = typer.Option(
        None,
        "--max-depth", "-d",
        help="Maximum AST depth of generated programs [default: 7]",
    ),
    show_initial_parse_errors: bool = typer.Option(
        False,
        "--show-initial-parse-errors",
        help="Report first-pass syntax errors instead of retrying",
    ),
    show_successes: bool = typer.Option(
        False,
        "--show-successes",
        help="Stop after the first formatted program, even if it is stable",
    ),
    reproduce: bool = typer.Option(
        False,
        "--reproduce",
        help="Replay the saved program and options instead of generating",
    ),
    seed: Optional[int] = typer.Option(
        None,
        "--seed",
        help="Seed for program generation and option sampling",
    ),
    max_tries: Optional[int] = typer.Option(
        None,
        "--max-tries",
        min=1,
        help="Give up after this many tries (default: run until something is found)",
    ),
    corpus_dir: Optional[Path] = typer.Option(
        None,
        "--corpus-dir",
        help="Where the saved program lives (default: .idemfuzz)",
    ),
    oracle_name: Optional[str] = typer.Option(
        None,
        "--oracle",
        help="Formatter under test",
    ),
    width: Optional[int] = typer.Option(
        None,
        "--width",
        min=1,
        help="Report width in columns (default: terminal width)",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colors in the report",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Log every discarded try",
    ),
) -> None:
    """Fuzz the formatter until a run is worth reporting.

    Generates random programs, formats each one twice with random options,
    and stops on a crash or when the second pass changes the output.
    The triggering program is saved so it can be replayed:

        idemfuzz run --reproduce
    """
    _setup_logging(verbose)

    for arg in ctx.args:
        if arg.startswith("-"):
            err_console.print(f"[yellow]Ignored unknown option: {escape(arg)}[/yellow]")

    cwd = Path.cwd()
    config = load_config(cwd)
    if corpus_dir is not None:
        config.corpus_dir = str(corpus_dir)

    settings = RunSettings(
        max_depth=max_depth if max_depth is not None else config.max_depth,
        generator=generator or config.generator,
        show_initial_parse_errors=show_initial_parse_errors,
        show_successes=show_successes,
        reproduce=reproduce,
    )
    if settings.max_depth <= 0:
        console.print("[red]Error:[/red] --max-depth must be positive")
        raise typer.Exit(EXIT_USAGE)

    try:
        oracle = get_oracle(oracle_name or config.oracle)
        generate = get_generator(settings.generator)
    except UnknownBackendError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(EXIT_USAGE) from e

    store = CorpusStore(get_corpus_dir(config, cwd))
    rng = random.Random(seed)  # noqa: S311
    try:
        sampler = OptionSampler({**oracle.default_space(), **config.option_space}, rng)
        checker = IdempotenceChecker(oracle, config.syntax_error_pattern)
        boring_filter = BoringFilter(config.boring_pattern)
    except re.error as e:
        console.print(f"[red]Error:[/red] Invalid pattern in config: {escape(str(e))}")
        raise typer.Exit(EXIT_USAGE) from e
    except ValueError as e:
        console.print(f"[red]Error:[/red] Invalid option space: {escape(str(e))}")
        raise typer.Exit(EXIT_USAGE) from e

    replay = None
    if reproduce:
        try:
            replay = store.load()
        except CorpusError as e:
            console.print(f"[red]Error:[/red] {escape(str(e))}")
            raise typer.Exit(EXIT_USAGE) from e
        if not sampler.contains(replay.options):
            console.print(
                f"[red]Error:[/red] Invalid options file {escape(str(store.options_path))}: "
                f"options do not fit the {oracle.name} option space"
            )
            raise typer.Exit(EXIT_USAGE)

    controller = RunController(
        generator=generate,
        sampler=sampler,
        checker=checker,
        boring_filter=boring_filter,
        settings=settings,
        rng=rng,
        replay=replay,
    )
    try:
        result = controller.run(max_tries=max_tries)
    except TriesExhaustedError as e:
        console.print(f"[yellow]{escape(str(e))}[/yellow]")
        raise typer.Exit(EXIT_USAGE) from e

    command = format_command(
        oracle.reproduction_command(str(store.input_path), result.options)
    )
    report = render_report(
        result,
        ReportSettings(width=width or console.width, color=not no_color),
        reproduce=reproduce,
        command=command,
    )
    typer.echo(report, nl=False, color=False if no_color else None)

    if reproduce:
        store.save_outputs(result.first, result.second)
    else:
        store.save(CorpusEntry.from_result(result))

    if result.classification is not Classification.SUCCESS:
        raise typer.Exit(EXIT_FOUND)

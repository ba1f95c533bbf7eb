# Copyright (c) Syntropy Systems
"""Main CLI entry point for idemfuzz."""

import typer

from idemfuzz.cli.generators import generators
from idemfuzz.cli.init_cmd import init
from idemfuzz.cli.run import run

app = typer.Typer(
    name="idemfuzz",
    help=(
        "Fuzz a code formatter for idempotence. Format random programs twice, "
        "stop when the passes disagree or crash."
    ),
    no_args_is_help=True,
    add_completion=False,
)

# Register commands
_ = app.command(
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True}
)(run)
_ = app.command()(init)
_ = app.command()(generators)


if __name__ == "__main__":
    app()

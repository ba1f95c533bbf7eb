# Copyright (c) Syntropy Systems
"""idemfuzz generators command."""

from rich.console import Console
from rich.table import Table

from idemfuzz.generators import get_generator, list_generators

console = Console()


def generators() -> None:
    """List the available program generator backends."""
    table = Table(show_header=True, header_style="bold")
    table.add_column("Name", style="cyan")
    table.add_column("Description")

    for name in list_generators():
        doc = (get_generator(name).__doc__ or "").strip().splitlines()
        table.add_row(name, doc[0] if doc else "")

    console.print(table)

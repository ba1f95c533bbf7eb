# Copyright (c) Syntropy Systems
"""idemfuzz init command."""

from pathlib import Path

import typer
import yaml
from rich.console import Console

from idemfuzz.config import default_config_data, get_state_dir

console = Console()


def init(
    path: Path = typer.Argument(
        Path(),
        help="Directory to initialize (default: current directory)",
    ),
) -> None:
    """Create a .idemfuzz directory with a default config.yaml.

    The corpus files are written next to it by `idemfuzz run`.
    """
    state_dir = get_state_dir(path.resolve())
    config_path = state_dir / "config.yaml"

    if config_path.exists():
        console.print(f"[yellow]Already initialized:[/yellow] {state_dir}")
        return

    state_dir.mkdir(parents=True, exist_ok=True)
    with config_path.open("w") as f:
        yaml.safe_dump(default_config_data(), f, default_flow_style=False, sort_keys=False)

    console.print(f"[green]Initialized idemfuzz:[/green] {state_dir}")
    console.print(f"  [dim]config:[/dim] {config_path}")

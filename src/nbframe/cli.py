"""Command-line interface for nbframe."""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.text import Text

from nbframe import NbframeError, __version__
from nbframe.config import get_config
from nbframe.parsing.kernels import KernelSpecLookup
from nbframe.parsing.notebook import NotebookParser
from nbframe.preview.terminal import NotebookPreview

error_console = Console(stderr=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_path=False)],
    )


def _list_kernels(console: Console) -> None:
    listing = KernelSpecLookup().list_kernels()
    for directory, kernels in listing.items():
        console.print(Text(f"{directory}:"), soft_wrap=True)
        for name, spec in kernels:
            line = Text("   ")
            line.append(name, style="green")
            line.append(f" ({spec.display_name})")
            console.print(line, soft_wrap=True)


@click.command()
@click.version_option(version=__version__)
@click.argument("file", required=False, type=click.Path(path_type=Path))
@click.option(
    "--run",
    "-r",
    is_flag=True,
    help="Re-run the notebook instead of showing saved outputs (not supported)",
)
@click.option(
    "--kernel",
    "-k",
    type=str,
    default=None,
    help="Show this kernel instead of the detected one (see --list-kernels)",
)
@click.option(
    "--list-kernels",
    is_flag=True,
    help="Print the installed kernels and exit",
)
@click.option("--width", type=click.IntRange(min=10), default=None, help="Override terminal width")
@click.option("--height", type=click.IntRange(min=2), default=None, help="Override terminal height")
@click.option(
    "--image-protocol",
    type=click.Choice(["auto", "halfblock", "kitty", "iterm", "none"]),
    default=None,
    help="Graphics protocol for images (default: from config or auto)",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug information to stderr")
def main(
    file: Optional[Path],
    run: bool,
    kernel: Optional[str],
    list_kernels: bool,
    width: Optional[int],
    height: Optional[int],
    image_protocol: Optional[str],
    verbose: bool,
):
    """Display a Jupyter notebook in the terminal.

    FILE: Path to the .ipynb file to display
    """
    _configure_logging(verbose)

    if list_kernels:
        if file or kernel or run:
            raise click.UsageError("--list-kernels does not take other arguments")
        try:
            _list_kernels(Console())
        except NbframeError as e:
            error_console.print(f"[red]Error:[/red] {escape(str(e))}")
            sys.exit(1)
        return

    if file is None:
        raise click.UsageError("Please specify a notebook file or --list-kernels")

    if run:
        raise click.UsageError(
            "--run is not supported: notebooks are shown with their saved outputs and never executed"
        )

    try:
        config = get_config()
    except ValidationError as e:
        error_console.print(f"[red]Error loading config:[/red] {escape(str(e))}")
        sys.exit(1)

    # Override with CLI options
    overrides = {
        key: value
        for key, value in (("width", width), ("height", height), ("image_protocol", image_protocol))
        if value is not None
    }
    config = config.model_copy(update=overrides)

    try:
        notebook = NotebookParser().parse(file)

        kernel_display_name = None
        if kernel:
            kernel_display_name = KernelSpecLookup().find(kernel).display_name

        console = Console(width=config.width, height=config.height)
        previewer = NotebookPreview(console=console, config=config)
        previewer.show(notebook, file, kernel_display_name)

    except NbframeError as e:
        error_console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(1)


if __name__ == "__main__":
    main()

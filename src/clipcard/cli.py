"""Typer-based CLI for clipcard."""

import logging
from pathlib import Path

import typer
from rich.console import Console

from .cards import CardFileError, create_card_file
from .clipboard import ClipboardReader
from .config import ClipcardConfig
from .menu import CommandSession
from .monitor import ClipboardMonitor
from .sink import FileSink, JsonArrayWriter, timestamped_filename

app = typer.Typer(
    name="clipcard",
    help="clipcard - log clipboard copies and turn them into flashcards",
    add_completion=False,
)

console = Console()


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.callback(invoke_without_command=True)
def default(ctx: typer.Context):
    """Start watching the clipboard when no command is given."""
    if ctx.invoked_subcommand is None:
        watch(output_dir=None, interval=None, debug=False)


@app.command()
def watch(
    output_dir: str = typer.Option(
        None,
        "--output-dir",
        "-o",
        help="Directory for the capture file (default: CLIPCARD_OUTPUT_DIR env or current directory)",
    ),
    interval: float = typer.Option(
        None,
        "--interval",
        "-i",
        help="Seconds between clipboard checks (default: 1.0)",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug logging",
    ),
):
    """Log everything copied to the clipboard to a timestamped JSON file.

    Each item is written when the next one is copied, tagged with the
    current source/tag/note. Commands are read interactively.
    """
    _configure_logging(debug)

    try:
        config = ClipcardConfig.from_env(output_dir=output_dir, poll_interval=interval)
    except ValueError as e:
        console.print(f"[red]Error: Invalid configuration: {e}[/red]")
        raise typer.Exit(code=1)

    output_file = timestamped_filename(config.output_dir)
    writer = JsonArrayWriter(FileSink(output_file))
    monitor = ClipboardMonitor(
        writer=writer,
        read_clipboard=ClipboardReader(config.clipboard_command),
        poll_interval=config.poll_interval,
    )

    console.print(f"Logging to [cyan]{output_file}[/cyan]")
    monitor.start()
    try:
        CommandSession(monitor, console=console).run()
    finally:
        # No-op when the session already quit normally.
        monitor.shutdown()

    console.print(f"[green]Logged {writer.records_written} item(s) to[/green] {output_file}")


@app.command()
def cards(
    input_file: Path = typer.Argument(
        ...,
        help="Capture JSON file produced by 'clipcard watch'",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug logging",
    ),
):
    """Convert a capture JSON file into a tab-delimited flashcard import file.

    Writes <input_file>.txt next to the input.
    """
    _configure_logging(debug)

    try:
        output_file, count = create_card_file(input_file)
    except CardFileError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]Tab-delimited file for import created at[/green] {output_file} ({count} card(s))")


@app.command()
def version():
    """Show clipcard version."""
    from . import __version__
    console.print(f"clipcard v{__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()

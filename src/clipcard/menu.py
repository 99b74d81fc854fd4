"""Interactive command session for the clipboard monitor."""

from dataclasses import dataclass
from typing import Callable, Optional

from rich.console import Console
from rich.markup import escape

from .monitor import ClipboardMonitor


@dataclass(frozen=True)
class MenuItem:
    """One interactive command."""

    name: str
    abbrev: str
    description: str
    handler: Callable[[], None]

    @property
    def display_key(self) -> str:
        return f"{self.abbrev} | {self.name}"

    def matches(self, entry: str) -> bool:
        return entry in (self.name, self.abbrev)


def format_help(menu: list[MenuItem]) -> list[str]:
    """Help lines sorted by display key, aligned to the widest key."""
    items = sorted((item.display_key, item.description) for item in menu)
    width = max(len(key) for key, _ in items)
    return ["Available commands:"] + [f"  {key.ljust(width + 1)}: {desc}" for key, desc in items]


class CommandSession:
    """Read-evaluate loop that edits the monitor's metadata.

    Runs in the foreground until `quit` (or end of input), then shuts the
    monitor down.
    """

    QUIT = "quit"

    def __init__(
        self,
        monitor: ClipboardMonitor,
        console: Optional[Console] = None,
        read_line: Optional[Callable[[str], str]] = None,
    ):
        self.monitor = monitor
        self.console = console or Console()
        self.read_line = read_line or self.console.input
        self.menu = self.build_menu()
        self.finished = False

    def build_menu(self) -> list[MenuItem]:
        return [
            MenuItem("source", "s", "sets the source", self.prompt_source),
            MenuItem("tag", "t", "sets the tag", self.prompt_tag),
            MenuItem("note", "n", "adds a note", self.prompt_note),
            MenuItem("print", "p", "prints current clipboard entry", self.print_current),
            MenuItem("extract", "x", 'toggles the "extract" tag', self.toggle_extract),
            MenuItem(self.QUIT, "q", "quits", self.quit),
            MenuItem("help", "h", "prints available commands", self.print_help),
        ]

    # ---------- handlers ----------

    def prompt_source(self) -> None:
        self.monitor.set_source(self.read_line("Enter the source: ").rstrip("\r\n"))

    def prompt_tag(self) -> None:
        self.monitor.set_tag(self.read_line("Enter the tag: ").rstrip("\r\n"))

    def prompt_note(self) -> None:
        self.monitor.set_note(self.read_line("Enter a note: ").rstrip("\r\n"))

    def print_current(self) -> None:
        self.console.print(self.monitor.snapshot().to_json(), markup=False, highlight=False)

    def toggle_extract(self) -> None:
        state = "on" if self.monitor.toggle_extract() else "off"
        self.console.print(f"Tagging as an extract is now {state}")

    def print_help(self) -> None:
        for line in format_help(self.menu):
            self.console.print(line, markup=False, highlight=False)
        self.console.print()

    def quit(self) -> None:
        self.monitor.shutdown()
        self.finished = True

    # ---------- loop ----------

    def lookup(self, entry: str) -> Optional[MenuItem]:
        for item in self.menu:
            if item.matches(entry):
                return item
        return None

    def dispatch(self, entry: str) -> bool:
        """Run the command named by entry.

        Returns:
            False if the entry is not a known command
        """
        item = self.lookup(entry.strip())
        if item is None:
            self.console.print(f"[red]Unknown command {escape(entry)}[/red]")
            self.print_help()
            return False
        item.handler()
        return True

    def show_notices(self) -> None:
        for notice in self.monitor.drain_notices():
            self.console.print(f"[dim]\\[monitor: {escape(notice)}][/dim]")

    def run(self) -> None:
        """Prompt for commands until quit. End of input counts as quit."""
        self.console.print("Starting monitor.  Anything copied to the clipboard will be logged.")
        self.print_help()

        while not self.finished:
            self.show_notices()
            try:
                self.dispatch(self.read_line("> "))
            except (EOFError, KeyboardInterrupt):
                self.console.print()
                self.quit()
                break

        self.show_notices()
        self.console.print("Goodbye!")

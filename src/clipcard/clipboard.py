"""Clipboard reader backed by a system paste command."""

import subprocess
from typing import Sequence


class ClipboardReadError(Exception):
    """Raised when the clipboard command cannot be run or fails."""


class ClipboardReader:
    """Reads the current clipboard text on demand.

    Defaults to ``pbpaste`` (macOS). Any command that prints the clipboard
    to stdout works, e.g. ``xclip -selection clipboard -o``.
    """

    def __init__(self, command: Sequence[str] = ("pbpaste",), timeout: float = 3.0):
        self.command = list(command)
        self.timeout = timeout

    def read(self) -> str:
        """Return the clipboard text.

        Raises:
            ClipboardReadError: If the command is missing, times out or exits non-zero
        """
        try:
            result = subprocess.run(
                self.command,
                capture_output=True,
                timeout=self.timeout,
                check=True,
            )
        except FileNotFoundError as e:
            raise ClipboardReadError(f"Clipboard command not found: {self.command[0]}") from e
        except subprocess.TimeoutExpired as e:
            raise ClipboardReadError(f"Clipboard command timed out after {self.timeout}s") from e
        except subprocess.CalledProcessError as e:
            raise ClipboardReadError(
                f"Clipboard command exited with status {e.returncode}"
            ) from e

        return result.stdout.decode("utf-8", errors="replace")

    def __call__(self) -> str:
        return self.read()

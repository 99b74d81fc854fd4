"""Append-only output sinks and the incremental JSON array writer."""

import sys
from datetime import datetime
from pathlib import Path
from typing import Protocol, TextIO

from .models.record import CardRecord


class OutputClosedError(Exception):
    """Raised when writing to a JSON array that has already been closed."""


class OutputSink(Protocol):
    def write_line(self, text: str) -> None:
        ...


def timestamped_filename(directory: Path, now: datetime | None = None) -> Path:
    """Return <directory>/<YYYYmmdd_HHMMSS>.json."""
    stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    return directory / f"{stamp}.json"


class FileSink:
    """Appends lines to a file.

    Opens on each call rather than holding a long-running file handle, so
    everything up to the last completed write survives a crash.
    """

    def __init__(self, path: Path):
        self.path = path

    def write_line(self, text: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(text + "\n")
            f.flush()


class StreamSink:
    """Writes lines to an open text stream (stdout by default)."""

    def __init__(self, stream: TextIO | None = None):
        self.stream = stream or sys.stdout

    def write_line(self, text: str) -> None:
        self.stream.write(text + "\n")
        self.stream.flush()


class JsonArrayWriter:
    """Writes records one at a time as a single JSON array.

    Output layout:
        [
        {record}
        ,
        {record}
        ]

    Not thread-safe; callers serialize access.
    """

    def __init__(self, sink: OutputSink):
        self.sink = sink
        self.records_written = 0
        self.opened = False
        self.closed = False

    def open(self) -> None:
        """Write the opening bracket. Repeat calls are no-ops."""
        if self.opened:
            return
        self.sink.write_line("[")
        self.opened = True

    def write(self, record: CardRecord) -> None:
        """Append one record, preceded by a separator if it is not the first.

        Raises:
            OutputClosedError: If close() has already been called
        """
        if self.closed:
            raise OutputClosedError("Cannot write to a closed JSON array")
        self.open()
        text = record.to_json()
        if self.records_written > 0:
            # One write, so a failed record never leaves a dangling separator.
            text = ",\n" + text
        self.sink.write_line(text)
        self.records_written += 1

    def close(self) -> bool:
        """Write the closing bracket once.

        Returns:
            True if the bracket was written by this call, False if already closed
        """
        if self.closed:
            return False
        self.open()
        self.sink.write_line("]")
        self.closed = True
        return True

"""Pytest fixtures for clipcard tests."""

import json

import pytest

from clipcard.clipboard import ClipboardReadError
from clipcard.monitor import ClipboardMonitor
from clipcard.sink import FileSink, JsonArrayWriter


class FakeClipboard:
    """Clipboard stand-in; set `value` or `error` between polls."""

    def __init__(self, value: str = ""):
        self.value = value
        self.error: Exception | None = None
        self.reads = 0

    def copy(self, value: str) -> None:
        self.value = value

    def __call__(self) -> str:
        self.reads += 1
        if self.error is not None:
            raise self.error
        return self.value


@pytest.fixture
def load_records(output_file):
    """Return a callable that parses the closed capture file."""

    def _load() -> list[dict]:
        return json.loads(output_file.read_text(encoding="utf-8"))

    return _load


@pytest.fixture
def clipboard():
    return FakeClipboard("already on the clipboard")


@pytest.fixture
def output_file(tmp_path):
    return tmp_path / "capture.json"


@pytest.fixture
def writer(output_file):
    return JsonArrayWriter(FileSink(output_file))


@pytest.fixture
def monitor(writer, clipboard):
    """Monitor driven manually via poll_once(); baseline already read.

    Args:
        writer: JSON array writer on a temp file
        clipboard: FakeClipboard instance

    Returns:
        ClipboardMonitor instance
    """
    m = ClipboardMonitor(writer=writer, read_clipboard=clipboard, poll_interval=0.01)
    writer.open()
    m.poll_once()
    return m


@pytest.fixture
def read_error():
    return ClipboardReadError("pbpaste exited with status 1")

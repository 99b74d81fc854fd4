"""Tests for output sinks and the JSON array writer."""

import io
import json
from datetime import datetime

import pytest

from clipcard.models.record import CardRecord
from clipcard.sink import (
    FileSink,
    JsonArrayWriter,
    OutputClosedError,
    StreamSink,
    timestamped_filename,
)


def _record(content: str) -> CardRecord:
    return CardRecord(note="", content=content, source="", tag="")


def test_timestamped_filename(tmp_path):
    """Test that capture files are named after the start time."""
    path = timestamped_filename(tmp_path, datetime(2026, 1, 11, 9, 5, 3))
    assert path == tmp_path / "20260111_090503.json"


def test_file_sink_appends_lines(tmp_path):
    """Test that each write appends rather than truncates."""
    path = tmp_path / "out" / "capture.json"
    sink = FileSink(path)

    sink.write_line("first")
    sink.write_line("second")

    assert path.read_text() == "first\nsecond\n"


def test_stream_sink_writes_to_stream():
    stream = io.StringIO()
    StreamSink(stream).write_line("[")
    assert stream.getvalue() == "[\n"


@pytest.mark.parametrize("count", [0, 1, 2, 5])
def test_separators_between_records_only(output_file, writer, count):
    """Test that N records produce N-1 separators and valid JSON."""
    writer.open()
    for i in range(count):
        writer.write(_record(f"item {i}"))
    writer.close()

    lines = output_file.read_text().splitlines()
    assert lines[0] == "["
    assert lines[-1] == "]"
    assert lines.count(",") == max(count - 1, 0)
    assert lines[1] != ","
    assert lines[-2] != ","

    data = json.loads(output_file.read_text())
    assert [item["content"] for item in data] == [f"item {i}" for i in range(count)]


def test_close_is_idempotent(output_file, writer):
    """Test that closing twice writes exactly one closing bracket."""
    writer.open()
    writer.write(_record("a"))

    assert writer.close() is True
    assert writer.close() is False

    assert output_file.read_text().count("]") == 1
    assert json.loads(output_file.read_text()) == [
        {"note": "", "content": "a", "source": "", "tag": ""}
    ]


def test_write_after_close_raises(writer):
    writer.close()
    with pytest.raises(OutputClosedError):
        writer.write(_record("late"))
    assert writer.records_written == 0


def test_close_without_open_still_produces_valid_array(output_file, writer):
    writer.close()
    assert json.loads(output_file.read_text()) == []


def test_open_twice_writes_one_bracket():
    stream = io.StringIO()
    writer = JsonArrayWriter(StreamSink(stream))
    writer.open()
    writer.open()
    writer.close()
    assert stream.getvalue() == "[\n]\n"


class FlakySink(FileSink):
    """File sink that fails once on the first line containing `fail_on`."""

    def __init__(self, path, fail_on: str):
        super().__init__(path)
        self.fail_on = fail_on

    def write_line(self, text: str) -> None:
        if self.fail_on and self.fail_on in text:
            self.fail_on = ""
            raise OSError("disk full")
        super().write_line(text)


def test_failed_record_write_leaves_no_dangling_separator(output_file):
    """Test that a record write failing after the first keeps the array valid."""
    writer = JsonArrayWriter(FlakySink(output_file, fail_on='"two"'))
    writer.open()
    writer.write(_record("one"))

    with pytest.raises(OSError):
        writer.write(_record("two"))
    assert writer.records_written == 1

    writer.write(_record("two"))
    writer.write(_record("three"))
    writer.close()

    lines = output_file.read_text().splitlines()
    assert lines.count(",") == 2
    assert [item["content"] for item in json.loads(output_file.read_text())] == ["one", "two", "three"]


def test_failed_record_write_then_close_is_valid(output_file):
    writer = JsonArrayWriter(FlakySink(output_file, fail_on='"two"'))
    writer.open()
    writer.write(_record("one"))
    with pytest.raises(OSError):
        writer.write(_record("two"))
    writer.close()

    assert [item["content"] for item in json.loads(output_file.read_text())] == ["one"]

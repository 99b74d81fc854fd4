"""Convert capture JSON files into tab-delimited flashcard import files.

Expected input:

    [{"content": "...", "note": "optional", "source": "...", "tag": "..."}, ...]
"""

import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ValidationError

from .models.record import LINE_BREAK, normalize_content

logger = logging.getLogger(__name__)

PLACEHOLDER_FRONT = "todo"
SOURCE_SEPARATOR = f"{LINE_BREAK}{LINE_BREAK}source: "


class CardFileError(Exception):
    """Raised when a capture file is missing or malformed."""


class CaptureEntry(BaseModel):
    """One element of a capture file; only content is required."""

    content: str
    note: Optional[str] = None
    source: Optional[str] = None
    tag: Optional[str] = None


def make_line(entry: CaptureEntry) -> str:
    """Build the front/back/tag line for one entry."""
    back = normalize_content(entry.content)
    if entry.source:
        back = f"{back}{SOURCE_SEPARATOR}{entry.source}"
    front = entry.note or PLACEHOLDER_FRONT
    return "\t".join([front, back, entry.tag or ""])


def load_capture_file(json_input_file: Path) -> list[CaptureEntry]:
    """Parse a capture file.

    Raises:
        CardFileError: If the file is missing or unreadable, not JSON, or not an array of entries
    """
    if not json_input_file.exists():
        raise CardFileError(f"Missing file {json_input_file}")
    if not json_input_file.is_file():
        raise CardFileError(f"Not a file: {json_input_file}")

    try:
        text = json_input_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise CardFileError(f"Cannot read {json_input_file}: {e}") from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise CardFileError(f"Invalid JSON in {json_input_file}: {e}") from e

    if not isinstance(data, list):
        raise CardFileError(f"Expected a JSON array in {json_input_file}")

    try:
        return [CaptureEntry.model_validate(item) for item in data]
    except ValidationError as e:
        raise CardFileError(f"Invalid entry in {json_input_file}: {e}") from e


def card_file_path(json_input_file: Path) -> Path:
    """Output path: the input path with .txt appended."""
    return json_input_file.with_name(json_input_file.name + ".txt")


def create_card_file(json_input_file: Path, output_file: Optional[Path] = None) -> tuple[Path, int]:
    """Write one import line per entry with non-empty content.

    The input is fully parsed before the output file is opened, so a bad
    input never leaves a partial output file behind.

    Returns:
        Tuple of (output_file, lines_written)
    """
    entries = load_capture_file(json_input_file)
    output_file = output_file or card_file_path(json_input_file)

    lines = [make_line(entry) for entry in entries if entry.content != ""]
    skipped = len(entries) - len(lines)

    with open(output_file, "w", encoding="utf-8") as f:
        for line in lines:
            f.write(line + "\n")

    logger.info("Wrote %d card(s) to %s (skipped %d empty)", len(lines), output_file, skipped)
    return output_file, len(lines)

"""Pydantic models for capture metadata and output records."""

import json

from pydantic import BaseModel, Field

LINE_BREAK = "<br>"
TAB_SPACES = "&nbsp;" * 4
EXTRACT_TAG = "extract"


def normalize_content(text: str) -> str:
    """Flatten text for line-oriented consumers.

    Each CRLF, LF or CR becomes one <br>; each tab becomes four &nbsp;.
    """
    return (
        text.replace("\r\n", LINE_BREAK)
        .replace("\n", LINE_BREAK)
        .replace("\r", LINE_BREAK)
        .replace("\t", TAB_SPACES)
    )


class Metadata(BaseModel):
    """User-entered annotations applied to captured clipboard items.

    source, tag and is_extract stick until changed; note is consumed by
    the next record written.
    """

    source: str = Field(default="", description="Where the copied text came from")
    tag: str = Field(default="", description="Space separated tags")
    note: str = Field(default="", description="Single-use note for the next record")
    is_extract: bool = Field(default=False, description="Tag records as incremental reading extracts")

    def effective_tag(self) -> str:
        return " ".join([self.tag, EXTRACT_TAG if self.is_extract else ""]).strip()


class CardRecord(BaseModel):
    """One captured clipboard item, as written to the capture file.

    Never mutated once written.
    """

    note: str = Field(default="", description="Note for this item (card front)")
    content: str = Field(description="Normalized clipboard content")
    source: str = Field(default="", description="Source metadata")
    tag: str = Field(default="", description="Tags, including 'extract' when flagged")

    model_config = {"frozen": True}

    @classmethod
    def build(cls, content: str, metadata: Metadata) -> "CardRecord":
        """Build a record from raw clipboard content and a metadata snapshot."""
        return cls(
            note=metadata.note,
            content=normalize_content(content),
            source=metadata.source,
            tag=metadata.effective_tag(),
        )

    def to_json(self) -> str:
        """Pretty-printed JSON object in note/content/source/tag order."""
        return json.dumps(self.model_dump(mode="json"), indent=2, ensure_ascii=False)

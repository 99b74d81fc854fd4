"""Pydantic models for clipcard."""

from .record import CardRecord, Metadata, normalize_content

__all__ = [
    "CardRecord",
    "Metadata",
    "normalize_content",
]

"""clipcard - clipboard capture for flashcard decks."""

__version__ = "0.1.0"

"""studydeck - flashcard study service and client core."""

__version__ = "0.1.0"

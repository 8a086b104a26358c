"""
Models package.
"""
from studydeck.models.flashcard import Flashcard

__all__ = [
    'Flashcard',
]

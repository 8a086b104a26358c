"""
Custom exceptions for the application.
"""


class StudyDeckException(Exception):
    """Base exception for all StudyDeck application exceptions."""
    pass


class ValidationError(StudyDeckException):
    """Raised when a required field is missing or empty."""
    pass


class NotFoundError(StudyDeckException):
    """Raised when a referenced flashcard does not exist."""
    pass


class StorageError(StudyDeckException):
    """Raised when the underlying record store cannot be read or written."""
    pass

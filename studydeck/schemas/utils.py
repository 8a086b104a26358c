"""
Utility functions for schema validation.
"""
from typing import Optional
from studydeck.core.exceptions import ValidationError

MIN_MASTERY_LEVEL = 0
MAX_MASTERY_LEVEL = 5

# Minimum trimmed length the card form asks for on question and answer
MIN_FORM_TEXT_LENGTH = 3

REQUIRED_TEXT_FIELDS = ("question", "answer", "category")


def clamp_mastery(level: int) -> int:
    """Clamp a mastery level into [0, 5]."""
    return max(MIN_MASTERY_LEVEL, min(MAX_MASTERY_LEVEL, int(level)))


def normalize_required_text(field_name: str, value: Optional[str]) -> str:
    """
    Trim a required text field and reject it when empty.

    Args:
        field_name: Name used in the error message
        value: Raw value (may be None when the field was omitted)

    Returns:
        The trimmed value

    Raises:
        ValidationError: If the value is missing or blank
    """
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} cannot be missing or empty")
    return str(value).strip()


def validate_card_form(question: str, answer: str, category: str) -> dict:
    """
    Validate the create/edit card form the way the UI does before submitting.

    Returns:
        Mapping of field name to error message; empty when the form is valid
    """
    errors = {}

    question = (question or "").strip()
    if not question:
        errors["question"] = "Question is required"
    elif len(question) < MIN_FORM_TEXT_LENGTH:
        errors["question"] = f"Question must be at least {MIN_FORM_TEXT_LENGTH} characters"

    answer = (answer or "").strip()
    if not answer:
        errors["answer"] = "Answer is required"
    elif len(answer) < MIN_FORM_TEXT_LENGTH:
        errors["answer"] = f"Answer must be at least {MIN_FORM_TEXT_LENGTH} characters"

    if not (category or "").strip():
        errors["category"] = "Category is required"

    return errors

"""
Flashcard service for CRUD and mastery operations against the SQL store.
"""
import logging
from typing import List, Optional
from sqlmodel import Session, select
from sqlalchemy.exc import SQLAlchemyError

from studydeck.core.exceptions import NotFoundError, StorageError
from studydeck.models.flashcard import Flashcard, utc_now
from studydeck.schemas.flashcard import FlashcardPatch
from studydeck.schemas.utils import MAX_MASTERY_LEVEL, normalize_required_text

logger = logging.getLogger(__name__)


def list_flashcards(session: Session, category: Optional[str] = None) -> List[Flashcard]:
    """Get flashcards newest-first, optionally restricted to one category."""
    query = select(Flashcard)
    if category:
        query = query.where(Flashcard.category == category)
    query = query.order_by(Flashcard.created_at.desc())  # type: ignore
    return list(session.exec(query).all())


def get_flashcard(session: Session, flashcard_id: str) -> Optional[Flashcard]:
    """Get a single flashcard, or None when the id is unknown."""
    return session.get(Flashcard, flashcard_id)


def _require_flashcard(session: Session, flashcard_id: str) -> Flashcard:
    flashcard = session.get(Flashcard, flashcard_id)
    if not flashcard:
        raise NotFoundError(f"Flashcard with id {flashcard_id} not found")
    return flashcard


def _commit(session: Session, flashcard: Optional[Flashcard] = None) -> None:
    try:
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        raise StorageError(f"Failed to write flashcard: {exc}") from exc
    if flashcard is not None:
        session.refresh(flashcard)


def create_flashcard(
    session: Session,
    question: Optional[str],
    answer: Optional[str],
    category: Optional[str],
) -> Flashcard:
    """
    Create a new flashcard with mastery level 0.

    Args:
        session: Database session
        question: Question text (required, non-empty)
        answer: Answer text (required, non-empty)
        category: Category tag (required, non-empty)

    Returns:
        The persisted flashcard

    Raises:
        ValidationError: If any field is missing or empty; nothing is written
    """
    question = normalize_required_text("question", question)
    answer = normalize_required_text("answer", answer)
    category = normalize_required_text("category", category)

    now = utc_now()
    flashcard = Flashcard(
        question=question,
        answer=answer,
        category=category,
        mastery_level=0,
        created_at=now,
        updated_at=now,
    )
    session.add(flashcard)
    _commit(session, flashcard)

    logger.info(f"Created flashcard {flashcard.id} in category '{category}'")
    return flashcard


def update_flashcard(session: Session, flashcard_id: str, patch: FlashcardPatch) -> Flashcard:
    """
    Merge a field mask into a stored flashcard and refresh updated_at.

    Raises:
        ValidationError: If the mask is invalid (checked before the lookup)
        NotFoundError: If the flashcard does not exist
    """
    changes = patch.changes()
    flashcard = _require_flashcard(session, flashcard_id)

    for name, value in changes.items():
        setattr(flashcard, name, value)
    flashcard.updated_at = utc_now()

    session.add(flashcard)
    _commit(session, flashcard)

    logger.info(f"Updated flashcard {flashcard_id}: {sorted(changes)}")
    return flashcard


def delete_flashcard(session: Session, flashcard_id: str) -> None:
    """Delete a flashcard; raises NotFoundError when absent."""
    flashcard = _require_flashcard(session, flashcard_id)
    session.delete(flashcard)
    _commit(session)
    logger.info(f"Deleted flashcard {flashcard_id}")


def increment_mastery(session: Session, flashcard_id: str) -> Flashcard:
    """Raise the mastery level by one, capped at 5."""
    flashcard = _require_flashcard(session, flashcard_id)
    level = min(flashcard.mastery_level + 1, MAX_MASTERY_LEVEL)
    return update_flashcard(session, flashcard_id, FlashcardPatch(mastery_level=level))


def reset_mastery(session: Session, flashcard_id: str) -> Flashcard:
    """Set the mastery level back to 0."""
    return update_flashcard(session, flashcard_id, FlashcardPatch(mastery_level=0))

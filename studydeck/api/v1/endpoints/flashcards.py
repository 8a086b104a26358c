"""
Flashcard CRUD and mastery endpoints.
"""
# pyright: reportAttributeAccessIssue=false
# pyright: reportCallIssue=false
# pyright: reportArgumentType=false
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlmodel import Session
from typing import List, Optional
import logging
from studydeck.core.database import get_session
from studydeck.schemas.flashcard import (
    FlashcardResponse,
    CreateFlashcardRequest,
    FlashcardPatch,
)
from studydeck.services import flashcard_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/flashcards", tags=["flashcards"])


@router.get("", response_model=List[FlashcardResponse])
async def get_flashcards(
    category: Optional[str] = None,
    session: Session = Depends(get_session)
):
    """
    Get all flashcards, newest first.

    Args:
        category: Optional exact-match category filter
    """
    flashcards = flashcard_service.list_flashcards(session, category=category)
    return [FlashcardResponse.model_validate(card) for card in flashcards]


@router.get("/{flashcard_id}", response_model=FlashcardResponse)
async def get_flashcard(
    flashcard_id: str,
    session: Session = Depends(get_session)
):
    """Get a single flashcard by ID."""
    flashcard = flashcard_service.get_flashcard(session, flashcard_id)
    if not flashcard:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Flashcard not found")
    return FlashcardResponse.model_validate(flashcard)


@router.post("", response_model=FlashcardResponse, status_code=status.HTTP_201_CREATED)
async def create_flashcard(
    request: CreateFlashcardRequest,
    session: Session = Depends(get_session)
):
    """Create a new flashcard. Missing or empty fields are rejected with 400."""
    flashcard = flashcard_service.create_flashcard(
        session,
        question=request.question,
        answer=request.answer,
        category=request.category,
    )
    return FlashcardResponse.model_validate(flashcard)


@router.put("/{flashcard_id}", response_model=FlashcardResponse)
async def update_flashcard(
    flashcard_id: str,
    request: FlashcardPatch,
    session: Session = Depends(get_session)
):
    """Update the supplied fields of a flashcard."""
    flashcard = flashcard_service.update_flashcard(session, flashcard_id, request)
    return FlashcardResponse.model_validate(flashcard)


@router.delete("/{flashcard_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_flashcard(
    flashcard_id: str,
    session: Session = Depends(get_session)
):
    """Delete a flashcard."""
    flashcard_service.delete_flashcard(session, flashcard_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{flashcard_id}/increment", response_model=FlashcardResponse)
async def increment_mastery(
    flashcard_id: str,
    session: Session = Depends(get_session)
):
    """Raise the mastery level by one (capped at 5)."""
    flashcard = flashcard_service.increment_mastery(session, flashcard_id)
    return FlashcardResponse.model_validate(flashcard)


@router.post("/{flashcard_id}/reset", response_model=FlashcardResponse)
async def reset_mastery(
    flashcard_id: str,
    session: Session = Depends(get_session)
):
    """Reset the mastery level to 0."""
    flashcard = flashcard_service.reset_mastery(session, flashcard_id)
    return FlashcardResponse.model_validate(flashcard)

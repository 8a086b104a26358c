"""
Categories endpoint.
"""
from fastapi import APIRouter, Depends
from sqlmodel import Session
from typing import List
from studydeck.core.database import get_session
from studydeck.schemas.flashcard import CategoryCount
from studydeck.services import flashcard_service
from studydeck.services.filter_service import categories_with_counts

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=List[CategoryCount])
async def get_categories(session: Session = Depends(get_session)):
    """Get every category with its card count, sorted by name."""
    return categories_with_counts(flashcard_service.list_flashcards(session))

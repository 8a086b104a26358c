"""
Flashcard schemas.
"""
from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional
from datetime import datetime
from studydeck.core.exceptions import ValidationError
from studydeck.schemas.utils import (
    MIN_MASTERY_LEVEL,
    MAX_MASTERY_LEVEL,
    REQUIRED_TEXT_FIELDS,
    clamp_mastery,
    normalize_required_text,
)


class FlashcardResponse(BaseModel):
    """Flashcard record as served by the API and held by client caches."""
    id: str
    question: str
    answer: str
    category: str
    mastery_level: int = Field(0, ge=MIN_MASTERY_LEVEL, le=MAX_MASTERY_LEVEL)
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class CreateFlashcardRequest(BaseModel):
    """Request schema for creating a flashcard.

    Fields are optional at the schema level so a missing field is reported
    as a ValidationError (400) by the service instead of a 422.
    """
    question: Optional[str] = None
    answer: Optional[str] = None
    category: Optional[str] = None


class FlashcardPatch(BaseModel):
    """Field mask for a partial update.

    Only the fields explicitly supplied are part of the mask; omitted fields
    are left untouched by the merge.
    """
    question: Optional[str] = None
    answer: Optional[str] = None
    category: Optional[str] = None
    mastery_level: Optional[int] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = "forbid"

    @field_validator('mastery_level')
    @classmethod
    def clamp_mastery_level(cls, v):
        """Clamp mastery level into the valid range."""
        if v is None:
            return v
        return clamp_mastery(v)

    def changes(self) -> dict:
        """
        Validate the mask and return it as a dict of field name to new value.

        Raises:
            ValidationError: If a supplied text field is blank or any supplied
                field is null
        """
        result = {}
        for name in sorted(self.model_fields_set):
            value = getattr(self, name)
            if name in REQUIRED_TEXT_FIELDS:
                result[name] = normalize_required_text(name, value)
            elif value is None:
                raise ValidationError(f"{name} cannot be null")
            else:
                result[name] = value
        return result


def apply_patch(record: FlashcardResponse, patch: FlashcardPatch) -> FlashcardResponse:
    """Shallow-merge a field mask into a copy of the record."""
    return record.model_copy(update=patch.changes())


class CategoryCount(BaseModel):
    """Category name with the number of cards carrying it."""
    name: str
    count: int


class StudyStatistics(BaseModel):
    """Partition of a card list by mastery."""
    total: int = 0
    mastered: int = 0  # mastery_level == 5
    in_progress: int = 0  # 0 < mastery_level < 5
    not_started: int = 0  # mastery_level == 0

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class FlashcardFilters(BaseModel):
    """Client-side filter settings; an empty value disables its predicate."""
    categories: List[str] = Field(default_factory=list)
    hide_mastered: bool = False
    search_query: str = ""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        frozen = True
        extra = "forbid"


class HealthResponse(BaseModel):
    """Response schema for the health check."""
    status: str
    timestamp: datetime

"""
Flashcard model.
"""
from sqlmodel import SQLModel, Field
from sqlalchemy import CheckConstraint
from datetime import datetime, timezone
import uuid


def generate_flashcard_id() -> str:
    """Opaque, collision-resistant identifier assigned at creation time."""
    return uuid.uuid4().hex


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Flashcard(SQLModel, table=True):
    """Flashcard table - one row per question/answer card."""
    __tablename__ = "flashcard"
    __table_args__ = (
        CheckConstraint("mastery_level >= 0 AND mastery_level <= 5", name="ck_flashcard_mastery_level_range"),
    )

    id: str = Field(default_factory=generate_flashcard_id, primary_key=True)
    question: str
    answer: str
    category: str = Field(index=True)  # Free-form tag, grouped by string equality
    mastery_level: int = Field(default=0)  # 0 = not started, 5 = mastered
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

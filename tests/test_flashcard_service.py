"""Tests for the SQL-backed flashcard service."""

import pytest
from sqlmodel import select

from studydeck.core.exceptions import NotFoundError, ValidationError
from studydeck.models import Flashcard
from studydeck.schemas.flashcard import FlashcardPatch
from studydeck.services import flashcard_service


def _count(session):
    return len(session.exec(select(Flashcard)).all())


def test_create_sets_defaults(session):
    card = flashcard_service.create_flashcard(session, "2+2?", "4", "Math")
    assert card.id
    assert card.mastery_level == 0
    assert card.created_at == card.updated_at
    assert card.category == "Math"


def test_create_trims_text(session):
    card = flashcard_service.create_flashcard(session, "  2+2?  ", " 4 ", " Math ")
    assert (card.question, card.answer, card.category) == ("2+2?", "4", "Math")


def test_create_ids_are_unique(session):
    first = flashcard_service.create_flashcard(session, "Q one", "A one", "Misc")
    second = flashcard_service.create_flashcard(session, "Q two", "A two", "Misc")
    assert first.id != second.id


@pytest.mark.parametrize("question,answer,category", [
    ("", "4", "Math"),
    ("   ", "4", "Math"),
    ("2+2?", None, "Math"),
    ("2+2?", "4", ""),
])
def test_create_rejects_empty_fields(session, question, answer, category):
    with pytest.raises(ValidationError):
        flashcard_service.create_flashcard(session, question, answer, category)
    assert _count(session) == 0


def test_list_newest_first(seeded_session):
    ids = [card.id for card in flashcard_service.list_flashcards(seeded_session)]
    assert ids == ["c5", "c4", "c3", "c2", "c1"]


def test_list_category_exact_match(seeded_session):
    cards = flashcard_service.list_flashcards(seeded_session, category="Math")
    assert [card.id for card in cards] == ["c4", "c3", "c1"]
    assert flashcard_service.list_flashcards(seeded_session, category="math") == []


def test_get_missing_returns_none(seeded_session):
    assert flashcard_service.get_flashcard(seeded_session, "nope") is None


def test_update_merges_only_masked_fields(seeded_session):
    before = flashcard_service.get_flashcard(seeded_session, "c1")
    created_at = before.created_at
    updated_at = before.updated_at

    card = flashcard_service.update_flashcard(seeded_session, "c1", FlashcardPatch(answer="four"))

    assert card.answer == "four"
    assert card.question == "What is 2+2?"
    assert card.category == "Math"
    assert card.created_at == created_at
    assert card.updated_at > updated_at


def test_update_missing_raises(seeded_session):
    with pytest.raises(NotFoundError):
        flashcard_service.update_flashcard(seeded_session, "nope", FlashcardPatch(answer="x"))


def test_update_rejects_blank_field(seeded_session):
    with pytest.raises(ValidationError):
        flashcard_service.update_flashcard(seeded_session, "c1", FlashcardPatch(question=" "))
    assert flashcard_service.get_flashcard(seeded_session, "c1").question == "What is 2+2?"


def test_update_clamps_mastery(seeded_session):
    card = flashcard_service.update_flashcard(seeded_session, "c1", FlashcardPatch(mastery_level=9))
    assert card.mastery_level == 5
    card = flashcard_service.update_flashcard(seeded_session, "c1", FlashcardPatch(mastery_level=-2))
    assert card.mastery_level == 0


def test_delete_removes_record(seeded_session):
    flashcard_service.delete_flashcard(seeded_session, "c2")
    assert flashcard_service.get_flashcard(seeded_session, "c2") is None
    assert _count(seeded_session) == 4


def test_delete_missing_leaves_store_unchanged(seeded_session):
    with pytest.raises(NotFoundError):
        flashcard_service.delete_flashcard(seeded_session, "nope")
    assert _count(seeded_session) == 5


def test_increment_six_times_caps_at_five(session):
    card = flashcard_service.create_flashcard(session, "2+2?", "4", "Math")
    for _ in range(6):
        card = flashcard_service.increment_mastery(session, card.id)
    assert card.mastery_level == 5


def test_increment_missing_raises(session):
    with pytest.raises(NotFoundError):
        flashcard_service.increment_mastery(session, "nope")


@pytest.mark.parametrize("card_id", ["c1", "c3", "c4"])
def test_reset_always_zero(seeded_session, card_id):
    card = flashcard_service.reset_mastery(seeded_session, card_id)
    assert card.mastery_level == 0

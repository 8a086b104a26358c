"""
Pytest configuration and shared fixtures.
"""
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from studydeck.core.database import get_session, init_db
from studydeck.main import app
from studydeck.models import Flashcard
from studydeck.schemas.flashcard import FlashcardResponse

BASE_TIME = datetime(2024, 1, 1, 9, 0, 0, tzinfo=timezone.utc)


def make_card(card_id, question, answer, category, mastery_level=0, minutes=0) -> FlashcardResponse:
    """Build a record whose created_at is ``minutes`` after BASE_TIME."""
    stamp = BASE_TIME + timedelta(minutes=minutes)
    return FlashcardResponse(
        id=card_id,
        question=question,
        answer=answer,
        category=category,
        mastery_level=mastery_level,
        created_at=stamp,
        updated_at=stamp,
    )


@pytest.fixture
def mixed_cards():
    """Five cards over three categories, oldest first."""
    return [
        make_card("c1", "What is 2+2?", "4", "Math", mastery_level=0, minutes=0),
        make_card("c2", "Capital of France?", "Paris", "Geography", mastery_level=5, minutes=1),
        make_card("c3", "What is (2+2)*3?", "12", "Math", mastery_level=3, minutes=2),
        make_card("c4", "What is 3+3?", "6", "Math", mastery_level=5, minutes=3),
        make_card("c5", "2+2 in binary?", "100", "Computing", mastery_level=1, minutes=4),
    ]


@pytest.fixture
def engine():
    """In-memory SQLite engine shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def seeded_session(session, mixed_cards):
    """Session whose store holds ``mixed_cards``."""
    for card in mixed_cards:
        session.add(Flashcard(**card.model_dump()))
    session.commit()
    return session


@pytest.fixture
def api_client(engine):
    """TestClient with the session dependency bound to the test engine."""
    def override_get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    yield TestClient(app)
    app.dependency_overrides.clear()

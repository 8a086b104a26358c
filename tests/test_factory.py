"""Tests for settings-driven gateway selection."""

import pytest

from studydeck.client.factory import make_flashcard_gateway
from studydeck.client.gateway import HttpFlashcardGateway
from studydeck.client.local_store import FileKeyValueArea, LocalFlashcardGateway
from studydeck.core.config import Settings


def test_local_store_path_selects_local_gateway(tmp_path):
    settings = Settings(local_store_path=str(tmp_path / "cards.json"))
    gateway = make_flashcard_gateway(settings)
    assert isinstance(gateway, LocalFlashcardGateway)
    assert isinstance(gateway.storage, FileKeyValueArea)


@pytest.mark.asyncio
async def test_default_selects_http_gateway():
    settings = Settings(local_store_path="", client_base_url="http://cards.test", api_prefix="/v2")
    gateway = make_flashcard_gateway(settings)
    assert isinstance(gateway, HttpFlashcardGateway)
    assert gateway.api_prefix == "/v2"
    await gateway.aclose()


def test_bare_database_url_fallback(monkeypatch):
    monkeypatch.delenv("STUDYDECK_DATABASE_URL", raising=False)
    monkeypatch.setenv("DATABASE_URL", "postgresql://db/cards")
    assert Settings().database_url == "postgresql://db/cards"


def test_prefixed_env(monkeypatch):
    monkeypatch.setenv("STUDYDECK_ENVIRONMENT", "dev")
    settings = Settings()
    assert settings.is_development
    assert Settings(database_url="sqlite:///x.db").is_sqlite

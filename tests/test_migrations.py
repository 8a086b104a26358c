"""Tests for the alembic migration environment."""

from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from studydeck.core.config import settings

PROJECT_DIR = Path(__file__).resolve().parent.parent


def _alembic_config(db_url):
    config = Config(str(PROJECT_DIR / "alembic.ini"))
    config.set_main_option("script_location", str(PROJECT_DIR / "alembic"))
    config.set_main_option("sqlalchemy.url", db_url)
    return config


def test_upgrade_uses_configured_url(tmp_path):
    db_path = tmp_path / "migrated.db"
    db_url = f"sqlite:///{db_path}"
    assert db_url != settings.database_url

    command.upgrade(_alembic_config(db_url), "head")

    engine = create_engine(db_url)
    try:
        inspector = inspect(engine)
        assert "flashcard" in inspector.get_table_names()
        columns = {column["name"] for column in inspector.get_columns("flashcard")}
        assert {"id", "question", "answer", "category", "mastery_level", "created_at", "updated_at"} <= columns
        assert "ix_flashcard_category" in {index["name"] for index in inspector.get_indexes("flashcard")}
    finally:
        engine.dispose()


def test_downgrade_drops_table(tmp_path):
    db_url = f"sqlite:///{tmp_path / 'migrated.db'}"
    config = _alembic_config(db_url)
    command.upgrade(config, "head")
    command.downgrade(config, "base")

    engine = create_engine(db_url)
    try:
        assert "flashcard" not in inspect(engine).get_table_names()
    finally:
        engine.dispose()

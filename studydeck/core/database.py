from sqlmodel import SQLModel, create_engine, Session
from studydeck.core.config import settings
import logging

logger = logging.getLogger(__name__)


def make_engine(db_url: str):
    """Create a SQLAlchemy engine for the given URL."""
    # SQLAlchemy prefers postgresql:// over postgres://
    if db_url.startswith("postgres://"):
        db_url = db_url.replace("postgres://", "postgresql://", 1)

    logger.info(f"Connecting to database: {db_url[:20]}...")  # Log partial URL for debugging

    if db_url.startswith("sqlite"):
        # FastAPI runs sync dependencies in a threadpool
        return create_engine(
            db_url,
            echo=False,
            connect_args={"check_same_thread": False},
        )
    return create_engine(
        db_url,
        echo=False,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=5,
        max_overflow=10,
    )


engine = make_engine(settings.database_url)


def get_session():
    """Dependency for getting database sessions."""
    with Session(engine) as session:
        yield session


def init_db(bind=None):
    """Initialize database tables."""
    # Import models so they register with SQLModel.metadata
    from studydeck.models import Flashcard  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)

"""
Gateway factory: picks the backing store from settings.
"""
import logging
from typing import Optional

from studydeck.client.gateway import FlashcardGateway, HttpFlashcardGateway
from studydeck.client.local_store import FileKeyValueArea, LocalFlashcardGateway
from studydeck.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


def make_flashcard_gateway(settings: Optional[Settings] = None) -> FlashcardGateway:
    """Local JSON store when ``local_store_path`` is set, the REST API otherwise."""
    settings = settings or get_settings()
    if settings.local_store_path:
        logger.info(f"Using local flashcard store at {settings.local_store_path}")
        return LocalFlashcardGateway(FileKeyValueArea(settings.local_store_path))
    logger.info(f"Using flashcard API at {settings.client_base_url}")
    return HttpFlashcardGateway(
        base_url=settings.client_base_url,
        timeout=settings.client_timeout,
        retries=settings.client_retries,
        api_prefix=settings.api_prefix,
    )

"""
Client core: async gateways, optimistic query cache and UI state.
"""
from studydeck.client.cache import FlashcardCacheClient, QueryCache, flashcard_keys
from studydeck.client.factory import make_flashcard_gateway
from studydeck.client.gateway import FlashcardGateway, HttpFlashcardGateway
from studydeck.client.local_store import (
    FileKeyValueArea,
    LocalFlashcardGateway,
    MemoryKeyValueArea,
)
from studydeck.client.ui_state import UIState, UIStore

__all__ = [
    'FlashcardCacheClient',
    'QueryCache',
    'flashcard_keys',
    'make_flashcard_gateway',
    'FlashcardGateway',
    'HttpFlashcardGateway',
    'FileKeyValueArea',
    'LocalFlashcardGateway',
    'MemoryKeyValueArea',
    'UIState',
    'UIStore',
]

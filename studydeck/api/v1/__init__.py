"""
API v1 router aggregation.
"""
from fastapi import APIRouter
from studydeck.api.v1.endpoints import flashcards, categories

api_router = APIRouter()

# Each router already defines its own prefix
api_router.include_router(flashcards.router)
api_router.include_router(categories.router)

"""
Asynchronous mutation gateway: the contract every flashcard backend offers
to the cache layer, and its implementation over the REST API.
"""
import logging
from typing import List, Optional, Protocol

import httpx
from pydantic.alias_generators import to_camel

from studydeck.core.config import settings
from studydeck.core.exceptions import NotFoundError, StorageError, ValidationError
from studydeck.schemas.flashcard import FlashcardPatch, FlashcardResponse
from studydeck.schemas.utils import normalize_required_text

logger = logging.getLogger(__name__)


class FlashcardGateway(Protocol):
    """Create/read/update/delete operations against a record store."""

    async def list_flashcards(self, category: Optional[str] = None) -> List[FlashcardResponse]:
        ...

    async def get_flashcard(self, flashcard_id: str) -> FlashcardResponse:
        ...

    async def create_flashcard(self, question: str, answer: str, category: str) -> FlashcardResponse:
        ...

    async def update_flashcard(self, flashcard_id: str, patch: FlashcardPatch) -> FlashcardResponse:
        ...

    async def delete_flashcard(self, flashcard_id: str) -> None:
        ...

    async def increment_mastery(self, flashcard_id: str) -> FlashcardResponse:
        ...

    async def reset_mastery(self, flashcard_id: str) -> FlashcardResponse:
        ...


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and body.get("detail"):
        return str(body["detail"])
    return response.reason_phrase


class HttpFlashcardGateway:
    """
    Gateway backed by the StudyDeck REST API.

    Status 400 maps to ValidationError, 404 to NotFoundError and anything
    else (including transport failures) to StorageError. Connection errors
    are retried by the transport ``retries`` times.

    Usage:
        async with HttpFlashcardGateway("http://localhost:3001") as gateway:
            cards = await gateway.list_flashcards()

    For testing, pass an ``httpx.AsyncClient`` built on ``httpx.MockTransport``
    or ``httpx.ASGITransport``.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
        retries: Optional[int] = None,
        api_prefix: Optional[str] = None,
    ):
        self.api_prefix = settings.api_prefix if api_prefix is None else api_prefix
        self._owns_client = client is None
        if client is None:
            transport = httpx.AsyncHTTPTransport(
                retries=settings.client_retries if retries is None else retries
            )
            client = httpx.AsyncClient(
                base_url=base_url or settings.client_base_url,
                timeout=settings.client_timeout if timeout is None else timeout,
                transport=transport,
            )
        self._client = client

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        url = f"{self.api_prefix}{path}"
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning(f"{method} {url} failed: {exc}")
            raise StorageError(f"Request to {url} failed: {exc}") from exc

        if response.status_code == 400:
            raise ValidationError(_error_detail(response))
        if response.status_code == 404:
            raise NotFoundError(_error_detail(response))
        if response.status_code >= 400:
            logger.warning(f"{method} {url} returned {response.status_code}")
            raise StorageError(f"{method} {url} returned {response.status_code}: {_error_detail(response)}")
        return response

    async def list_flashcards(self, category: Optional[str] = None) -> List[FlashcardResponse]:
        params = {"category": category} if category else None
        response = await self._request("GET", "/flashcards", params=params)
        return [FlashcardResponse.model_validate(item) for item in response.json()]

    async def get_flashcard(self, flashcard_id: str) -> FlashcardResponse:
        response = await self._request("GET", f"/flashcards/{flashcard_id}")
        return FlashcardResponse.model_validate(response.json())

    async def create_flashcard(self, question: str, answer: str, category: str) -> FlashcardResponse:
        # Validate locally so nothing is sent for an invalid card
        payload = {
            "question": normalize_required_text("question", question),
            "answer": normalize_required_text("answer", answer),
            "category": normalize_required_text("category", category),
        }
        response = await self._request("POST", "/flashcards", json=payload)
        return FlashcardResponse.model_validate(response.json())

    async def update_flashcard(self, flashcard_id: str, patch: FlashcardPatch) -> FlashcardResponse:
        payload = {to_camel(name): value for name, value in patch.changes().items()}
        response = await self._request("PUT", f"/flashcards/{flashcard_id}", json=payload)
        return FlashcardResponse.model_validate(response.json())

    async def delete_flashcard(self, flashcard_id: str) -> None:
        await self._request("DELETE", f"/flashcards/{flashcard_id}")

    async def increment_mastery(self, flashcard_id: str) -> FlashcardResponse:
        response = await self._request("POST", f"/flashcards/{flashcard_id}/increment")
        return FlashcardResponse.model_validate(response.json())

    async def reset_mastery(self, flashcard_id: str) -> FlashcardResponse:
        response = await self._request("POST", f"/flashcards/{flashcard_id}/reset")
        return FlashcardResponse.model_validate(response.json())

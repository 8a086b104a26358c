"""
Offline record store: the whole flashcard collection serialized as one JSON
array under a well-known key of a key-value area, seeded from the bundled
dataset on first access.

Every write rewrites the full array, so two processes writing the same area
are not safe; the area is meant for a single user.
"""
import json
import logging
import os
import pathlib
from importlib.resources import files
from typing import Callable, Dict, List, Optional, Protocol

from pydantic import ValidationError as PydanticValidationError

from studydeck.core.exceptions import NotFoundError, StorageError
from studydeck.models.flashcard import generate_flashcard_id, utc_now
from studydeck.schemas.flashcard import FlashcardPatch, FlashcardResponse
from studydeck.schemas.utils import MAX_MASTERY_LEVEL, normalize_required_text

logger = logging.getLogger(__name__)

STORAGE_KEY = "flashcards"


class KeyValueArea(Protocol):
    """String key to string value persistence, shaped like browser local storage."""

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...


class MemoryKeyValueArea:
    """Key-value area that lives for the lifetime of the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class FileKeyValueArea:
    """Key-value area persisted as a single JSON object file."""

    def __init__(self, path: pathlib.Path | str):
        self.path = pathlib.Path(path)

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise StorageError(f"Cannot read key-value file {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StorageError(f"Key-value file {self.path} does not hold an object")
        return data

    def _dump(self, items: Dict[str, str]) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(items), encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as exc:
            raise StorageError(f"Cannot write key-value file {self.path}: {exc}") from exc

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._load()
        items[key] = value
        self._dump(items)

    def remove_item(self, key: str) -> None:
        items = self._load()
        if key in items:
            del items[key]
            self._dump(items)


def load_seed_flashcards() -> List[dict]:
    """Read the bundled starter deck."""
    text = files("studydeck").joinpath("data", "seed.json").read_text(encoding="utf-8")
    return json.loads(text)["flashcards"]


class LocalFlashcardGateway:
    """
    Gateway over a key-value area.

    Usage:
        gateway = LocalFlashcardGateway(FileKeyValueArea("~/.studydeck.json"))
        card = await gateway.create_flashcard("2+2?", "4", "Math")

    For testing:
        gateway = LocalFlashcardGateway(MemoryKeyValueArea(), seed=lambda: [])
    """

    def __init__(
        self,
        storage: Optional[KeyValueArea] = None,
        key: str = STORAGE_KEY,
        seed: Callable[[], List[dict]] = load_seed_flashcards,
        clock: Callable = utc_now,
        id_factory: Callable[[], str] = generate_flashcard_id,
    ):
        self.storage = storage if storage is not None else MemoryKeyValueArea()
        self.key = key
        self._seed = seed
        self._clock = clock
        self._id_factory = id_factory

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _initialize(self) -> None:
        if self.storage.get_item(self.key) is None:
            logger.info(f"Seeding key '{self.key}' from bundled data")
            self.storage.set_item(self.key, json.dumps(self._seed()))

    def _read(self) -> List[FlashcardResponse]:
        self._initialize()
        raw = self.storage.get_item(self.key)
        try:
            items = json.loads(raw or "[]")
            return [FlashcardResponse.model_validate(item) for item in items]
        except (ValueError, TypeError, PydanticValidationError) as exc:
            raise StorageError(f"Stored flashcards under '{self.key}' are corrupt: {exc}") from exc

    def _write(self, flashcards: List[FlashcardResponse]) -> None:
        payload = [card.model_dump(mode="json", by_alias=True) for card in flashcards]
        self.storage.set_item(self.key, json.dumps(payload))

    def _find(self, flashcards: List[FlashcardResponse], flashcard_id: str) -> int:
        for index, card in enumerate(flashcards):
            if card.id == flashcard_id:
                return index
        raise NotFoundError(f"Flashcard with id {flashcard_id} not found")

    # ------------------------------------------------------------------
    # Gateway operations
    # ------------------------------------------------------------------

    async def list_flashcards(self, category: Optional[str] = None) -> List[FlashcardResponse]:
        flashcards = self._read()
        if category:
            flashcards = [card for card in flashcards if card.category == category]
        return sorted(flashcards, key=lambda card: card.created_at, reverse=True)

    async def get_flashcard(self, flashcard_id: str) -> FlashcardResponse:
        flashcards = self._read()
        return flashcards[self._find(flashcards, flashcard_id)]

    async def create_flashcard(self, question: str, answer: str, category: str) -> FlashcardResponse:
        question = normalize_required_text("question", question)
        answer = normalize_required_text("answer", answer)
        category = normalize_required_text("category", category)

        now = self._clock()
        flashcard = FlashcardResponse(
            id=self._id_factory(),
            question=question,
            answer=answer,
            category=category,
            mastery_level=0,
            created_at=now,
            updated_at=now,
        )
        flashcards = self._read()
        flashcards.append(flashcard)
        self._write(flashcards)
        return flashcard

    async def update_flashcard(self, flashcard_id: str, patch: FlashcardPatch) -> FlashcardResponse:
        changes = patch.changes()
        flashcards = self._read()
        index = self._find(flashcards, flashcard_id)
        changes["updated_at"] = self._clock()
        flashcards[index] = flashcards[index].model_copy(update=changes)
        self._write(flashcards)
        return flashcards[index]

    async def delete_flashcard(self, flashcard_id: str) -> None:
        flashcards = self._read()
        del flashcards[self._find(flashcards, flashcard_id)]
        self._write(flashcards)

    async def increment_mastery(self, flashcard_id: str) -> FlashcardResponse:
        card = await self.get_flashcard(flashcard_id)
        level = min(card.mastery_level + 1, MAX_MASTERY_LEVEL)
        return await self.update_flashcard(flashcard_id, FlashcardPatch(mastery_level=level))

    async def reset_mastery(self, flashcard_id: str) -> FlashcardResponse:
        return await self.update_flashcard(flashcard_id, FlashcardPatch(mastery_level=0))

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    async def clear_all(self) -> None:
        """Drop the stored collection; the next read re-seeds it."""
        self.storage.remove_item(self.key)

    async def reset_to_initial_data(self) -> None:
        """Overwrite the stored collection with the bundled starter deck."""
        self.storage.set_item(self.key, json.dumps(self._seed()))

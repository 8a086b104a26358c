"""
Client-side query cache with optimistic mutations.

The cache is a copy of the record store, never the source of truth. It keeps
two independent kinds of entries, the full list and one entry per card, and
keeps them in lockstep whenever an optimistic write or a rollback touches a
card. Every confirmed write is followed by a refetch so the cache converges
on what the store actually holds (server-side timestamps included).
"""
import copy
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, Set, Tuple

from studydeck.client.gateway import FlashcardGateway
from studydeck.core.exceptions import NotFoundError, StudyDeckException
from studydeck.schemas.flashcard import FlashcardPatch, FlashcardResponse, apply_patch
from studydeck.schemas.utils import MAX_MASTERY_LEVEL

logger = logging.getLogger(__name__)

CacheKey = Tuple[str, ...]


class FlashcardKeys:
    """Cache keys for flashcard queries."""
    all: CacheKey = ("flashcards",)

    def list(self) -> CacheKey:
        return self.all + ("list",)

    def detail(self, flashcard_id: str) -> CacheKey:
        return self.all + ("detail", flashcard_id)


flashcard_keys = FlashcardKeys()


@dataclass
class CacheEntry:
    data: Any
    is_stale: bool = False
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class QueryCache:
    """Keyed store of query results with staleness tracking."""

    def __init__(self):
        self._entries: Dict[CacheKey, CacheEntry] = {}

    def get_entry(self, key: CacheKey) -> Optional[CacheEntry]:
        return self._entries.get(key)

    def get(self, key: CacheKey) -> Any:
        entry = self._entries.get(key)
        return entry.data if entry else None

    def set_data(self, key: CacheKey, data: Any) -> None:
        self._entries[key] = CacheEntry(data=data)

    def remove(self, key: CacheKey) -> None:
        self._entries.pop(key, None)

    def invalidate(self, key: CacheKey) -> None:
        entry = self._entries.get(key)
        if entry:
            entry.is_stale = True

    def is_stale(self, key: CacheKey) -> bool:
        entry = self._entries.get(key)
        return entry is None or entry.is_stale

    def keys(self) -> List[CacheKey]:
        return list(self._entries)

    def snapshot(self, key: CacheKey) -> Optional[CacheEntry]:
        """Deep copy of an entry, independent of later in-place changes."""
        entry = self._entries.get(key)
        return copy.deepcopy(entry) if entry else None

    def restore(self, key: CacheKey, snapshot: Optional[CacheEntry]) -> None:
        if snapshot is None:
            self._entries.pop(key, None)
        else:
            self._entries[key] = copy.deepcopy(snapshot)


class Notifier(Protocol):
    """User-visible transient notices."""

    def success(self, message: str) -> None:
        ...

    def error(self, message: str) -> None:
        ...


class LoggingNotifier:
    """Notifier that writes notices to the log."""

    def success(self, message: str) -> None:
        logger.info(message)

    def error(self, message: str) -> None:
        logger.warning(message)


@dataclass
class _Snapshot:
    list_entry: Optional[CacheEntry]
    detail_entry: Optional[CacheEntry]


def _restore_card(
    current: List[FlashcardResponse],
    previous: List[FlashcardResponse],
    flashcard_id: str,
) -> List[FlashcardResponse]:
    """Put one card back the way ``previous`` had it, at its old position."""
    original_index = next(
        (index for index, card in enumerate(previous) if card.id == flashcard_id), None
    )
    restored = [card for card in current if card.id != flashcard_id]
    if original_index is None:
        return restored
    insert_at = next(
        (index for index, card in enumerate(current) if card.id == flashcard_id),
        min(original_index, len(restored)),
    )
    restored.insert(insert_at, previous[original_index])
    return restored


class FlashcardCacheClient:
    """
    Cached view of the flashcard list with optimistic mutations.

    Usage:
        client = FlashcardCacheClient(LocalFlashcardGateway())
        cards = await client.fetch_list()
        await client.increment_mastery(cards[0].id)

    Failed mutations roll the cache back, call ``notifier.error`` and re-raise
    the gateway's exception.
    """

    def __init__(
        self,
        gateway: FlashcardGateway,
        cache: Optional[QueryCache] = None,
        notifier: Optional[Notifier] = None,
    ):
        self.gateway = gateway
        self.cache = cache if cache is not None else QueryCache()
        self.notifier = notifier if notifier is not None else LoggingNotifier()
        # In-flight snapshots per id, oldest first
        self._pending: Dict[str, List[_Snapshot]] = {}
        self._overlapped: Set[str] = set()

    def pending_ids(self) -> Set[str]:
        """Ids with an optimistic write that has not settled yet."""
        return set(self._pending)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def fetch_list(self, force: bool = False) -> List[FlashcardResponse]:
        key = flashcard_keys.list()
        if not force and not self.cache.is_stale(key):
            return self.cache.get(key)
        flashcards = await self.gateway.list_flashcards()
        self.cache.set_data(key, flashcards)
        return flashcards

    async def fetch_detail(self, flashcard_id: str, force: bool = False) -> FlashcardResponse:
        key = flashcard_keys.detail(flashcard_id)
        if not force and not self.cache.is_stale(key):
            return self.cache.get(key)
        flashcard = await self.gateway.get_flashcard(flashcard_id)
        self.cache.set_data(key, flashcard)
        return flashcard

    async def invalidate(self, key: CacheKey) -> None:
        """Mark a query stale and refetch it. Queries never fetched are left alone."""
        if self.cache.get_entry(key) is None:
            return
        self.cache.invalidate(key)
        try:
            if key == flashcard_keys.list():
                await self.fetch_list(force=True)
            else:
                await self.fetch_detail(key[-1], force=True)
        except NotFoundError:
            self.cache.remove(key)
        except StudyDeckException as exc:
            # Stale data stays visible until the next successful refetch
            logger.warning(f"Refetch of {key} failed: {exc}")

    async def refetch_list(self) -> List[FlashcardResponse]:
        return await self.fetch_list(force=True)

    # ------------------------------------------------------------------
    # Optimistic bookkeeping
    # ------------------------------------------------------------------

    def _apply_optimistic(
        self,
        flashcard_id: str,
        transform: Callable[[FlashcardResponse], FlashcardResponse],
    ) -> _Snapshot:
        list_key = flashcard_keys.list()
        detail_key = flashcard_keys.detail(flashcard_id)
        snapshot = _Snapshot(
            list_entry=self.cache.snapshot(list_key),
            detail_entry=self.cache.snapshot(detail_key),
        )

        cached_list = self.cache.get(list_key)
        if cached_list is not None:
            self.cache.set_data(
                list_key,
                [transform(card) if card.id == flashcard_id else card for card in cached_list],
            )
        cached_detail = self.cache.get(detail_key)
        if cached_detail is not None:
            self.cache.set_data(detail_key, transform(cached_detail))

        self._begin(flashcard_id, snapshot)
        return snapshot

    def _apply_optimistic_removal(self, flashcard_id: str) -> _Snapshot:
        list_key = flashcard_keys.list()
        detail_key = flashcard_keys.detail(flashcard_id)
        snapshot = _Snapshot(
            list_entry=self.cache.snapshot(list_key),
            detail_entry=self.cache.snapshot(detail_key),
        )

        cached_list = self.cache.get(list_key)
        if cached_list is not None:
            self.cache.set_data(list_key, [card for card in cached_list if card.id != flashcard_id])
        self.cache.remove(detail_key)

        self._begin(flashcard_id, snapshot)
        return snapshot

    def _rollback(self, flashcard_id: str, snapshot: _Snapshot) -> None:
        list_key = flashcard_keys.list()
        current = self.cache.get(list_key)
        if snapshot.list_entry is None or current is None:
            self.cache.restore(list_key, snapshot.list_entry)
        else:
            # Only this card is rolled back; other cards may carry their own
            # in-flight optimistic writes
            restored = copy.deepcopy(snapshot.list_entry)
            restored.data = _restore_card(current, snapshot.list_entry.data, flashcard_id)
            self.cache.restore(list_key, restored)
        self.cache.restore(flashcard_keys.detail(flashcard_id), snapshot.detail_entry)

    def _begin(self, flashcard_id: str, snapshot: _Snapshot) -> None:
        in_flight = self._pending.setdefault(flashcard_id, [])
        if in_flight:
            self._overlapped.add(flashcard_id)
        in_flight.append(snapshot)

    def _settle(self, flashcard_id: str, snapshot: _Snapshot) -> bool:
        """Drop a settled snapshot; True when it was the last one for the id."""
        in_flight = self._pending.get(flashcard_id, [])
        for index, pending in enumerate(in_flight):
            if pending is snapshot:
                del in_flight[index]
                break
        if in_flight:
            return False
        self._pending.pop(flashcard_id, None)
        return True

    def _fail(self, flashcard_id: str, snapshot: _Snapshot) -> bool:
        """
        Settle a failed write and roll back once no write to the id is in flight.

        A failed oldest write hands its snapshot to the next one, so the final
        rollback restores the state from before the first unsettled write.
        Returns True when the id saw overlapping writes and needs a refetch.
        """
        in_flight = self._pending.get(flashcard_id, [])
        if len(in_flight) > 1 and in_flight[0] is snapshot:
            in_flight[1].list_entry = snapshot.list_entry
            in_flight[1].detail_entry = snapshot.detail_entry
        if not self._settle(flashcard_id, snapshot):
            return False
        self._rollback(flashcard_id, snapshot)
        if flashcard_id in self._overlapped:
            self._overlapped.discard(flashcard_id)
            return True
        return False

    async def _run_optimistic(
        self,
        flashcard_id: str,
        snapshot: _Snapshot,
        call: Awaitable[Any],
        success_message: Optional[str],
        failure_message: str,
        refetch_detail: bool = True,
    ):
        try:
            result = await call
        except Exception as exc:
            needs_refetch = self._fail(flashcard_id, snapshot)
            logger.warning(f"{failure_message} ({flashcard_id}): {exc}")
            self.notifier.error(str(exc) or failure_message)
            if needs_refetch:
                # Writes to this id overlapped; the restored snapshot may hold
                # a value the store never accepted
                await self.invalidate(flashcard_keys.list())
                await self.invalidate(flashcard_keys.detail(flashcard_id))
            raise
        if self._settle(flashcard_id, snapshot):
            self._overlapped.discard(flashcard_id)

        if success_message:
            self.notifier.success(success_message)
        await self.invalidate(flashcard_keys.list())
        if refetch_detail:
            await self.invalidate(flashcard_keys.detail(flashcard_id))
        return result

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def create(self, question: str, answer: str, category: str) -> FlashcardResponse:
        """Create a card; the list is only touched once the store confirms."""
        try:
            flashcard = await self.gateway.create_flashcard(question, answer, category)
        except Exception as exc:
            logger.warning(f"Failed to create flashcard: {exc}")
            self.notifier.error(str(exc) or "Failed to create flashcard")
            raise

        list_key = flashcard_keys.list()
        cached_list = self.cache.get(list_key)
        if cached_list is not None:
            merged = [flashcard] + [card for card in cached_list if card.id != flashcard.id]
            self.cache.set_data(list_key, merged)
        self.notifier.success("Flashcard created successfully!")
        await self.invalidate(list_key)
        return flashcard

    async def update(self, flashcard_id: str, patch: FlashcardPatch) -> FlashcardResponse:
        """Optimistically merge a field mask, then confirm with the store."""
        try:
            patch.changes()
        except StudyDeckException as exc:
            self.notifier.error(str(exc))
            raise
        snapshot = self._apply_optimistic(flashcard_id, lambda card: apply_patch(card, patch))
        return await self._run_optimistic(
            flashcard_id,
            snapshot,
            self.gateway.update_flashcard(flashcard_id, patch),
            "Flashcard updated successfully!",
            "Failed to update flashcard",
        )

    async def increment_mastery(self, flashcard_id: str) -> FlashcardResponse:
        def bump(card: FlashcardResponse) -> FlashcardResponse:
            level = min(card.mastery_level + 1, MAX_MASTERY_LEVEL)
            return card.model_copy(update={"mastery_level": level})

        snapshot = self._apply_optimistic(flashcard_id, bump)
        return await self._run_optimistic(
            flashcard_id,
            snapshot,
            self.gateway.increment_mastery(flashcard_id),
            None,
            "Failed to update mastery level",
        )

    async def reset_mastery(self, flashcard_id: str) -> FlashcardResponse:
        snapshot = self._apply_optimistic(
            flashcard_id, lambda card: card.model_copy(update={"mastery_level": 0})
        )
        return await self._run_optimistic(
            flashcard_id,
            snapshot,
            self.gateway.reset_mastery(flashcard_id),
            "Progress reset successfully!",
            "Failed to reset progress",
        )

    async def delete(self, flashcard_id: str) -> None:
        """Optimistically drop a card from the list, then confirm with the store."""
        snapshot = self._apply_optimistic_removal(flashcard_id)
        await self._run_optimistic(
            flashcard_id,
            snapshot,
            self.gateway.delete_flashcard(flashcard_id),
            "Flashcard deleted successfully!",
            "Failed to delete flashcard",
            refetch_detail=False,
        )

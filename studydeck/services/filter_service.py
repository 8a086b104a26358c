"""
Filter service: pure functions deriving category counts, statistics,
filtered/sorted subsets and shuffles from a list of flashcards.

None of these functions perform I/O or mutate their input. They accept any
objects exposing ``category``, ``question``, ``answer``, ``mastery_level``
and ``created_at`` (API schemas and SQL rows alike).
"""
import random
from typing import Iterable, List, Optional, Sequence, TypeVar
from studydeck.models.enums import MasteryStatus, SortOption
from studydeck.schemas.flashcard import CategoryCount, FlashcardFilters, StudyStatistics
from studydeck.schemas.utils import MIN_MASTERY_LEVEL, MAX_MASTERY_LEVEL

T = TypeVar("T")


# ============================================================================
# Aggregates
# ============================================================================

def categories_with_counts(flashcards: Iterable) -> List[CategoryCount]:
    """Group by exact category string, sorted by name ascending."""
    counts = {}
    for card in flashcards:
        counts[card.category] = counts.get(card.category, 0) + 1
    return [CategoryCount(name=name, count=count) for name, count in sorted(counts.items())]


def calculate_statistics(flashcards: Iterable) -> StudyStatistics:
    """Single pass partition into mastered / in progress / not started."""
    total = mastered = not_started = 0
    for card in flashcards:
        total += 1
        if card.mastery_level >= MAX_MASTERY_LEVEL:
            mastered += 1
        elif card.mastery_level <= MIN_MASTERY_LEVEL:
            not_started += 1
    return StudyStatistics(
        total=total,
        mastered=mastered,
        in_progress=total - mastered - not_started,
        not_started=not_started,
    )


# ============================================================================
# Filtering and ordering
# ============================================================================

def _matches(card, categories: set, hide_mastered: bool, query: str) -> bool:
    if categories and card.category not in categories:
        return False
    if hide_mastered and card.mastery_level >= MAX_MASTERY_LEVEL:
        return False
    if query and query not in card.question.lower() and query not in card.answer.lower():
        return False
    return True


def filter_flashcards(flashcards: Sequence[T], filters: Optional[FlashcardFilters] = None) -> List[T]:
    """
    Keep the cards matching every active predicate, in input order.

    Args:
        flashcards: Cards to filter
        filters: Category set, hide-mastered flag and search query; empty
            values disable their predicate

    Returns:
        New list of the matching cards
    """
    if filters is None:
        return list(flashcards)
    categories = set(filters.categories or [])
    query = (filters.search_query or "").lower()
    return [
        card for card in flashcards
        if _matches(card, categories, filters.hide_mastered, query)
    ]


def sort_flashcards(flashcards: Sequence[T], sort_by: SortOption = SortOption.NEWEST) -> List[T]:
    """Stable sort into a new list."""
    sort_by = SortOption(sort_by)
    if sort_by == SortOption.NEWEST:
        return sorted(flashcards, key=lambda card: card.created_at, reverse=True)
    if sort_by == SortOption.OLDEST:
        return sorted(flashcards, key=lambda card: card.created_at)
    if sort_by == SortOption.CATEGORY:
        return sorted(flashcards, key=lambda card: card.category)
    # Mastery: least known first
    return sorted(flashcards, key=lambda card: card.mastery_level)


def shuffle_flashcards(flashcards: Sequence[T], rng: Optional[random.Random] = None) -> List[T]:
    """Fisher-Yates shuffle of a copy; every permutation equally likely."""
    rng = rng or random.Random()
    shuffled = list(flashcards)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def paginate(flashcards: Sequence[T], page: int, page_size: int) -> List[T]:
    """Cards visible after ``page`` rounds of "load more" (1-indexed)."""
    if page < 1 or page_size < 1:
        return []
    return list(flashcards[: page * page_size])


# ============================================================================
# Display helpers
# ============================================================================

def mastery_status(mastery_level: int) -> MasteryStatus:
    if mastery_level <= MIN_MASTERY_LEVEL:
        return MasteryStatus.NOT_STARTED
    if mastery_level >= MAX_MASTERY_LEVEL:
        return MasteryStatus.MASTERED
    return MasteryStatus.IN_PROGRESS


def progress_percentage(mastery_level: int) -> float:
    return mastery_level / MAX_MASTERY_LEVEL * 100

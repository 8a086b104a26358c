"""
Presentation state for the study UI: view mode, filters, study cursor, card
form modal and pagination.

State values are immutable; every transition is a pure function returning a
new ``UIState``. ``UIStore`` is the container a UI holds and injects where it
is needed.
"""
import random
from dataclasses import dataclass, field, replace
from typing import Callable, List, Optional, Sequence, TypeVar

from studydeck.models.enums import ViewMode
from studydeck.schemas.flashcard import FlashcardFilters

T = TypeVar("T")

DEFAULT_CARDS_PER_PAGE = 12


@dataclass(frozen=True)
class StudyCursor:
    current_index: int = 0
    is_flipped: bool = False
    is_shuffled: bool = False


@dataclass(frozen=True)
class ModalState:
    is_open: bool = False
    editing_card_id: Optional[str] = None


@dataclass(frozen=True)
class Pagination:
    current_page: int = 1
    cards_per_page: int = DEFAULT_CARDS_PER_PAGE


@dataclass(frozen=True)
class UIState:
    view_mode: ViewMode = ViewMode.ALL
    filters: FlashcardFilters = field(default_factory=FlashcardFilters)
    study: StudyCursor = field(default_factory=StudyCursor)
    modal: ModalState = field(default_factory=ModalState)
    pagination: Pagination = field(default_factory=Pagination)


# ============================================================================
# View mode and filters
# ============================================================================

def set_view_mode(state: UIState, mode: ViewMode) -> UIState:
    return replace(state, view_mode=ViewMode(mode))


def set_filters(state: UIState, **changes) -> UIState:
    """
    Merge filter changes into the active filters.

    The filtered deck changes shape, so the study cursor goes back to the
    first card and the list back to page 1.
    """
    filters = FlashcardFilters.model_validate({**state.filters.model_dump(), **changes})
    return replace(
        state,
        filters=filters,
        study=replace(state.study, current_index=0, is_flipped=False),
        pagination=replace(state.pagination, current_page=1),
    )


def reset_filters(state: UIState) -> UIState:
    return replace(
        state,
        filters=FlashcardFilters(),
        study=replace(state.study, current_index=0, is_flipped=False),
        pagination=replace(state.pagination, current_page=1),
    )


# ============================================================================
# Study mode
# ============================================================================

def _clamp_index(index: int, total: int) -> int:
    if total <= 0:
        return 0
    return max(0, min(index, total - 1))


def flip_card(state: UIState) -> UIState:
    return replace(state, study=replace(state.study, is_flipped=not state.study.is_flipped))


def next_card(state: UIState, total_cards: int) -> UIState:
    """Advance one card; stays on the last card instead of wrapping."""
    index = _clamp_index(state.study.current_index + 1, total_cards)
    return replace(state, study=replace(state.study, current_index=index, is_flipped=False))


def previous_card(state: UIState, total_cards: int) -> UIState:
    """Go back one card; stays on the first card instead of wrapping."""
    index = _clamp_index(state.study.current_index - 1, total_cards)
    return replace(state, study=replace(state.study, current_index=index, is_flipped=False))


def jump_to(state: UIState, index: int, total_cards: int) -> UIState:
    index = _clamp_index(index, total_cards)
    return replace(state, study=replace(state.study, current_index=index, is_flipped=False))


def jump_to_random(state: UIState, total_cards: int, rng: Optional[random.Random] = None) -> UIState:
    if total_cards <= 0:
        return jump_to(state, 0, total_cards)
    rng = rng or random.Random()
    return jump_to(state, rng.randrange(total_cards), total_cards)


def set_shuffled(state: UIState, shuffled: bool) -> UIState:
    return replace(
        state,
        study=replace(state.study, is_shuffled=shuffled, current_index=0, is_flipped=False),
    )


def reset_study_mode(state: UIState) -> UIState:
    return replace(state, study=StudyCursor())


def current_card(state: UIState, cards: Sequence[T]) -> Optional[T]:
    """Card under the study cursor, or None for an empty deck."""
    if not cards:
        return None
    return cards[_clamp_index(state.study.current_index, len(cards))]


# ============================================================================
# Card form modal
# ============================================================================

def open_card_form(state: UIState, card_id: Optional[str] = None) -> UIState:
    return replace(state, modal=ModalState(is_open=True, editing_card_id=card_id))


def close_card_form(state: UIState) -> UIState:
    return replace(state, modal=ModalState())


# ============================================================================
# Pagination
# ============================================================================

def set_current_page(state: UIState, page: int) -> UIState:
    return replace(state, pagination=replace(state.pagination, current_page=max(1, page)))


def load_more(state: UIState) -> UIState:
    return set_current_page(state, state.pagination.current_page + 1)


def reset_pagination(state: UIState) -> UIState:
    return set_current_page(state, 1)


# ============================================================================
# Container
# ============================================================================

class UIStore:
    """
    Holds the current UIState and applies transitions to it.

    Usage:
        store = UIStore()
        store.dispatch(set_filters, categories=["Math"])
        store.dispatch(next_card, len(deck))
    """

    def __init__(self, initial: Optional[UIState] = None):
        self._state = initial if initial is not None else UIState()
        self._listeners: List[Callable[[UIState], None]] = []

    @property
    def state(self) -> UIState:
        return self._state

    def dispatch(self, transition: Callable[..., UIState], *args, **kwargs) -> UIState:
        self._state = transition(self._state, *args, **kwargs)
        for listener in list(self._listeners):
            listener(self._state)
        return self._state

    def subscribe(self, listener: Callable[[UIState], None]) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

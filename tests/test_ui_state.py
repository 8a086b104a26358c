"""Tests for UI state transitions and the store container."""

import random

import pytest

from studydeck.client import ui_state
from studydeck.client.ui_state import UIState, UIStore
from studydeck.models.enums import ViewMode


def test_defaults():
    state = UIState()
    assert state.view_mode == ViewMode.ALL
    assert state.study.current_index == 0
    assert not state.study.is_flipped
    assert not state.modal.is_open
    assert state.pagination.current_page == 1
    assert state.pagination.cards_per_page == 12


def test_next_card_clamps_at_last_and_unflips():
    state = ui_state.flip_card(UIState())
    state = ui_state.next_card(state, 3)
    assert state.study.current_index == 1
    assert not state.study.is_flipped

    state = ui_state.next_card(ui_state.next_card(state, 3), 3)
    assert state.study.current_index == 2


def test_previous_card_clamps_at_first():
    state = ui_state.previous_card(UIState(), 3)
    assert state.study.current_index == 0


@pytest.mark.parametrize("total", [0, -1])
def test_empty_deck_pins_cursor(total):
    state = ui_state.next_card(UIState(), total)
    assert state.study.current_index == 0
    assert ui_state.current_card(state, []) is None


def test_jump_to_clamps():
    assert ui_state.jump_to(UIState(), 10, 4).study.current_index == 3
    assert ui_state.jump_to(UIState(), -2, 4).study.current_index == 0


def test_jump_to_random_stays_in_range():
    rng = random.Random(7)
    state = UIState()
    for _ in range(50):
        state = ui_state.jump_to_random(state, 5, rng=rng)
        assert 0 <= state.study.current_index < 5


def test_current_card():
    state = ui_state.jump_to(UIState(), 1, 3)
    assert ui_state.current_card(state, ["a", "b", "c"]) == "b"
    # Deck shrank under the cursor
    assert ui_state.current_card(ui_state.jump_to(UIState(), 2, 3), ["a"]) == "a"


def test_set_filters_resets_cursor_and_page():
    state = ui_state.jump_to(UIState(), 2, 5)
    state = ui_state.flip_card(ui_state.load_more(state))

    state = ui_state.set_filters(state, categories=["Math"], hide_mastered=True)

    assert state.filters.categories == ["Math"]
    assert state.filters.hide_mastered
    assert state.filters.search_query == ""
    assert state.study.current_index == 0
    assert not state.study.is_flipped
    assert state.pagination.current_page == 1


def test_set_filters_merges():
    state = ui_state.set_filters(UIState(), search_query="2+2")
    state = ui_state.set_filters(state, categories=["Math"])
    assert state.filters.search_query == "2+2"
    assert state.filters.categories == ["Math"]


def test_reset_filters():
    state = ui_state.set_filters(UIState(), search_query="x", hide_mastered=True)
    state = ui_state.reset_filters(state)
    assert state.filters == UIState().filters


def test_shuffle_toggle_restarts_deck():
    state = ui_state.jump_to(UIState(), 3, 5)
    state = ui_state.set_shuffled(state, True)
    assert state.study.is_shuffled
    assert state.study.current_index == 0
    assert ui_state.reset_study_mode(state).study == UIState().study


def test_view_mode():
    assert ui_state.set_view_mode(UIState(), "study").view_mode == ViewMode.STUDY


def test_card_form_modal():
    state = ui_state.open_card_form(UIState(), "c1")
    assert state.modal.is_open
    assert state.modal.editing_card_id == "c1"
    assert ui_state.open_card_form(UIState()).modal.editing_card_id is None
    assert not ui_state.close_card_form(state).modal.is_open


def test_pagination():
    state = ui_state.load_more(ui_state.load_more(UIState()))
    assert state.pagination.current_page == 3
    assert ui_state.set_current_page(state, 0).pagination.current_page == 1
    assert ui_state.reset_pagination(state).pagination.current_page == 1


def test_transitions_do_not_mutate_input():
    state = UIState()
    ui_state.next_card(state, 5)
    ui_state.set_filters(state, categories=["Math"])
    assert state == UIState()


def test_store_dispatch_and_subscribe():
    store = UIStore()
    seen = []
    unsubscribe = store.subscribe(seen.append)

    store.dispatch(ui_state.next_card, 4)
    store.dispatch(ui_state.set_filters, search_query="paris")
    assert store.state.filters.search_query == "paris"
    assert [s.study.current_index for s in seen] == [1, 0]

    unsubscribe()
    store.dispatch(ui_state.flip_card)
    assert len(seen) == 2
    assert store.state.study.is_flipped

from pathlib import Path

from conftest import Deck, deck_of
from deck_core.models import DeckConfig, Page, Profile
from deck_core.nav_state import NavigationState, NavigationStateStore
from deck_core.navigation import NavigationEngine
from runtime_bus import RuntimeBus, topics


def _three_pages() -> DeckConfig:
    return deck_of(Page(name="One"), Page(name="Two"), Page(name="Three"), profiles=2)


def test_next_page_at_last_page_returns_none_and_keeps_index() -> None:
    deck = Deck(_three_pages())
    nav = deck.navigation
    assert nav.switch_to_page(2) is not None
    before = len(deck.messages)
    assert nav.next_page() is None
    assert nav.current_page_index == 2
    assert len(deck.messages) == before


def test_previous_page_at_first_page_returns_none() -> None:
    deck = Deck(_three_pages())
    assert deck.navigation.previous_page() is None
    assert deck.navigation.current_page_index == 0
    assert deck.topics() == []


def test_next_then_previous_returns_to_start() -> None:
    deck = Deck(_three_pages())
    nav = deck.navigation
    nav.switch_to_page(1)
    assert nav.next_page().name == "Three"
    assert nav.previous_page().name == "Two"
    assert nav.current_page_index == 1


def test_invalid_targets_warn_and_keep_position() -> None:
    deck = Deck(_three_pages())
    nav = deck.navigation
    assert nav.switch_to_page(7) is None
    assert nav.switch_to_page(-1) is None
    assert nav.switch_to_page(True) is None
    assert nav.switch_to_profile(5) is None
    assert nav.switch_to_profile_by_name("nope") is None
    assert deck.topics() == [topics.WARNING] * 5
    assert (nav.current_profile_index, nav.current_page_index) == (0, 0)


def test_switch_publishes_full_context() -> None:
    deck = Deck(_three_pages())
    deck.navigation.switch_to_page(1)
    topic, payload = deck.messages[-1]
    assert topic == topics.NAVIGATION_CHANGED
    assert payload == {
        "profile_name": "P0",
        "profile_index": 0,
        "page_name": "Two",
        "page_index": 1,
        "total_profiles": 2,
        "total_pages": 3,
        "has_previous_page": True,
        "has_next_page": True,
    }


def test_context_is_sticky_for_late_subscribers() -> None:
    bus = RuntimeBus()
    nav = NavigationEngine(_three_pages(), bus=bus)
    nav.switch_to_profile(1)
    seen = []
    bus.subscribe(topics.NAVIGATION_CHANGED, lambda env: seen.append(env.get("profile_name")), replay=True)
    assert seen == ["P1"]


def test_profile_switch_restores_last_active_page() -> None:
    nav = NavigationEngine(_three_pages())
    nav.switch_to_page(2)
    nav.switch_to_profile(1)
    assert nav.current_page_index == 0
    nav.switch_to_page(1)
    info = nav.switch_to_profile_by_name("P0")
    assert info.current_page_index == 2
    assert nav.current_page_index == 2
    assert nav.get_profiles()[1].current_page_index == 1


def test_state_is_persisted_on_switch(tmp_path: Path) -> None:
    store = NavigationStateStore(tmp_path / "profile_state.json")
    nav = NavigationEngine(_three_pages(), store.load(), state_store=store)
    nav.switch_to_profile(1)
    nav.switch_to_page(2)
    state = store.load()
    assert (state.current_profile_index, state.current_page_index) == (1, 2)
    assert state.last_active_pages["P1"] == 2


def test_out_of_bounds_state_is_clamped_on_attach() -> None:
    state = NavigationState(current_profile_index=4, current_page_index=9, last_active_pages={"gone": 1})
    nav = NavigationEngine(_three_pages(), state)
    assert (nav.current_profile_index, nav.current_page_index) == (0, 0)
    assert "gone" not in nav.state.last_active_pages


def test_page_index_clamped_when_page_disappears() -> None:
    nav = NavigationEngine(_three_pages())
    nav.switch_to_page(2)
    nav.attach(DeckConfig(profiles=(Profile(name="P0", pages=(Page(name="Only"),)),)))
    assert nav.current_page_index == 0
    assert nav.get_current_page().name == "Only"

from conftest import Deck, deck_of
from deck_core.models import Button, Page, Position
from deck_core.structure import ProfileEditor


def _editor(deck: Deck) -> ProfileEditor:
    return ProfileEditor(deck.session, deck.navigation)


def test_add_profile_and_switch_to_it() -> None:
    deck = Deck(deck_of(Page()))
    editor = _editor(deck)
    assert editor.add_profile("Gaming", hotkey="Ctrl+2", rows=2, cols=4).ok
    info = deck.navigation.switch_to_profile_by_name("Gaming")
    assert info.hotkey == "Ctrl+2"
    assert deck.navigation.current_page().capacity == 8


def test_duplicate_profile_name_is_rejected() -> None:
    deck = Deck(deck_of(Page()))
    result = _editor(deck).add_profile("P0")
    assert not result.ok
    assert "duplicate profile name" in result.error
    assert len(deck.session.config.profiles) == 1


def test_cannot_remove_last_profile_or_page() -> None:
    deck = Deck(deck_of(Page()))
    editor = _editor(deck)
    assert not editor.remove_profile(0).ok
    assert not editor.remove_page(0).ok
    assert deck.store.saves == []


def test_remove_page_before_current_keeps_pointer_on_same_page() -> None:
    deck = Deck(deck_of(Page(name="A"), Page(name="B"), Page(name="C")))
    deck.navigation.switch_to_page(2)
    assert _editor(deck).remove_page(0).ok
    assert deck.navigation.current_page_index == 1
    assert deck.navigation.get_current_page().name == "C"


def test_remove_current_profile_moves_to_neighbour() -> None:
    deck = Deck(deck_of(Page(), profiles=3))
    deck.navigation.switch_to_profile(2)
    assert _editor(deck).remove_profile(2).ok
    assert deck.navigation.get_current_profile().name == "P1"


def test_rename_profile_carries_last_active_page() -> None:
    deck = Deck(deck_of(Page(name="A"), Page(name="B"), profiles=2))
    deck.navigation.switch_to_page(1)
    deck.navigation.switch_to_profile(1)
    assert _editor(deck).rename_profile(0, "Main").ok
    deck.navigation.switch_to_profile_by_name("Main")
    assert deck.navigation.current_page_index == 1


def test_add_and_rename_page() -> None:
    deck = Deck(deck_of(Page()))
    editor = _editor(deck)
    assert editor.add_page("Tools", rows=2, cols=2).ok
    assert editor.rename_page(1, "Utilities").ok
    pages = deck.navigation.get_current_profile_pages()
    assert [p.name for p in pages] == ["Main", "Utilities"]
    assert not editor.rename_page(5, "x").ok


def test_structural_edit_clears_pending_undo() -> None:
    deck = Deck(deck_of(Page(name="A"), Page(name="B"), Page(name="C")))
    grid = deck.grid
    deck.navigation.switch_to_page(2)
    grid.add(Position(1, 1), Button(position=Position(1, 1), action_type="Open", label="keepC", config={"target": "/c"}))
    deck.navigation.switch_to_page(1)
    grid.add(Position(1, 1), Button(position=Position(1, 1), action_type="Open", label="dropB", config={"target": "/b"}))
    editor = ProfileEditor(deck.session, deck.navigation, grid.operation_log)

    assert editor.remove_page(0).ok
    assert len(grid.operation_log) == 0
    assert not grid.undo().ok
    pages = deck.session.config.profiles[0].pages
    assert [b.label for b in pages[0].buttons] == ["dropB"]
    assert [b.label for b in pages[1].buttons] == ["keepC"]

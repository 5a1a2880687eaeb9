import json
from pathlib import Path

from conftest import MemoryStore, deck_of
from deck_core.coordinator import DeckCoordinator
from deck_core.models import Button, Page, Position
from diagnostics.logging_setup import shutdown_logging
from runtime_bus import topics


def _coordinator(**kwargs) -> DeckCoordinator:
    store = MemoryStore(deck_of(Page(name="A", rows=2, cols=2), Page(name="B", rows=2, cols=2)))
    return DeckCoordinator(store, cell_resolver=lambda x, y: Position(int(y), int(x)), **kwargs)


def test_system_navigation_actions_drive_the_engine() -> None:
    deck = _coordinator()
    assert deck.execute({"action_type": "System", "system_action": "next_page"}).success
    assert deck.navigation.current_page_index == 1
    again = deck.execute({"action_type": "System", "system_action": "next_page"})
    assert not again.success
    assert deck.execute({"action_type": "System", "system_action": "previous_page"}).success
    assert deck.navigation.current_page_index == 0


def test_press_runs_button_on_current_page(tmp_path: Path) -> None:
    opened = []
    deck = _coordinator(opener=lambda url: opened.append(url.toLocalFile()) or True)
    deck.grid.add(Position(1, 1), Button(Position(1, 1), "Open", "tmp", {"target": str(tmp_path)}))
    assert deck.press(Position(1, 1)).success
    assert opened == [str(tmp_path)]
    assert not deck.press(Position(2, 2)).success


def test_bus_endpoints_serve_drops_and_actions() -> None:
    deck = _coordinator()
    reply = deck.bus.request(topics.DROP_REQUEST, {"paths": ["/a/b.txt"], "x": 1, "y": 1}, source="test")
    assert reply["accepted"] is True
    reply = deck.bus.request(
        topics.ACTION_EXECUTE_REQUEST, {"action": {"action_type": "Nope"}}, source="test"
    )
    assert reply["ok"] is False
    deck.close()
    assert deck.bus.request(topics.DROP_REQUEST, {}, source="test")["error"] == "no_handler"


def test_import_replaces_tree_and_clears_undo(tmp_path: Path) -> None:
    deck = _coordinator()
    deck.grid.add(Position(1, 1), Button(Position(1, 1), "Open", "x", {"target": "/x"}))
    exported = tmp_path / "deck.json"
    deck.export_config(exported)
    data = json.loads(exported.read_text(encoding="utf-8"))
    data["profiles"][0]["name"] = "Imported"
    exported.write_text(json.dumps(data), encoding="utf-8")
    assert deck.import_config(exported).ok
    assert deck.navigation.get_current_profile().name == "Imported"
    assert len(deck.operation_log) == 0


def test_import_of_invalid_file_keeps_tree(tmp_path: Path) -> None:
    deck = _coordinator()
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"version": "1.0", "profiles": []}), encoding="utf-8")
    before = deck.config
    assert not deck.import_config(bad).ok
    assert deck.config is before


def test_from_settings_uses_data_root(data_dir: Path) -> None:
    (data_dir / "settings.json").write_text(json.dumps({"icon_cache_max_bytes": 2048}), encoding="utf-8")
    try:
        deck = DeckCoordinator.from_settings(data_dir, qt_icons=False)
        assert (data_dir / "config.json").exists()
        assert deck.icon_cache.max_bytes == 2048
        deck.navigation.switch_to_page(0)
        assert (data_dir / "profile_state.json").exists()
        assert (data_dir / "logs" / "quickdeck.log").exists()
    finally:
        shutdown_logging()


def test_corrupt_config_falls_back_to_defaults_and_is_backed_up_on_first_save(data_dir: Path) -> None:
    (data_dir / "config.json").write_text("{broken", encoding="utf-8")
    try:
        deck = DeckCoordinator.from_settings(data_dir, qt_icons=False)
        assert deck.config.profiles[0].name == "Default"
        assert (data_dir / "config.json").read_text(encoding="utf-8") == "{broken"

        button = Button(position=Position(1, 1), action_type="Open", label="docs", config={"target": "/docs"})
        assert deck.grid.add(Position(1, 1), button).ok
        backups = list(data_dir.glob("config.json.corrupt-*"))
        assert len(backups) == 1
        assert backups[0].read_text(encoding="utf-8") == "{broken"
        saved = json.loads((data_dir / "config.json").read_text(encoding="utf-8"))
        assert saved["profiles"][0]["name"] == "Default"
    finally:
        shutdown_logging()

import pytest

from deck_core.errors import ConfigValidationError
from deck_core.models import Button, DeckConfig, Page, Position, Profile
from deck_core.validation import collect_issues, validate_config


def _button(row: int, col: int, label: str = "x") -> Button:
    return Button(position=Position(row, col), action_type="Open", label=label, config={"target": "/tmp"})


def test_config_dict_round_trip_keeps_buttons_and_hotkey() -> None:
    page = Page(name="Main", rows=2, cols=2, buttons=(_button(1, 2, "docs"),))
    config = DeckConfig(profiles=(Profile(name="Work", hotkey="Ctrl+1", pages=(page,)),))
    restored = DeckConfig.from_dict(config.to_dict())
    assert restored == config
    assert restored.profiles[0].pages[0].button_at(Position(1, 2)).label == "docs"


def test_from_dict_fills_missing_ui_defaults() -> None:
    config = DeckConfig.from_dict({"version": "1.0", "profiles": [Profile().to_dict()]})
    assert config.ui["window"]["cell_size_px"] == 96
    assert config.ui["summon"]["hotkeys"] == ["F11"]


def test_with_buttons_orders_row_major() -> None:
    page = Page(rows=2, cols=2).with_buttons([_button(2, 1), _button(1, 2), _button(1, 1)])
    assert [b.position for b in page.buttons] == [Position(1, 1), Position(1, 2), Position(2, 1)]


def test_default_config_is_valid() -> None:
    assert collect_issues(DeckConfig()) == []


def test_validation_reports_structural_problems() -> None:
    page = Page(rows=2, cols=2, buttons=(_button(3, 1), _button(1, 1), _button(1, 1, label=" ")))
    config = DeckConfig(profiles=(Profile(name="A", pages=(page,)), Profile(name="A")))
    messages = [issue.message for issue in collect_issues(config)]
    assert any("exceeds page dimensions" in m for m in messages)
    assert any("already occupied" in m for m in messages)
    assert any("label cannot be empty" in m for m in messages)
    assert any("duplicate profile name" in m for m in messages)


def test_validate_config_raises_on_empty_profiles() -> None:
    with pytest.raises(ConfigValidationError):
        validate_config(DeckConfig(profiles=()))

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

CONFIG_VERSION = "1.0"

DEFAULT_UI_SETTINGS: Dict[str, Any] = {
    "summon": {
        "hotkeys": ["F11"],
        "edge_trigger": {"enabled": False, "edges": ["top"], "dwell_ms": 300, "margin_px": 5},
    },
    "window": {
        "placement": "dropdown-top",
        "width_px": 1000,
        "height_px": 600,
        "cell_size_px": 96,
        "gap_px": 8,
        "opacity": 0.92,
        "theme": "dark",
        "animation": {"enabled": True, "duration_ms": 150},
    },
}


class ActionType(str, Enum):
    LAUNCH_APP = "LaunchApp"
    OPEN = "Open"
    TERMINAL = "Terminal"
    SYSTEM = "System"


@dataclass(frozen=True, order=True)
class Position:
    row: int
    col: int

    def to_dict(self) -> Dict[str, int]:
        return {"row": self.row, "col": self.col}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Position":
        return cls(row=int(data.get("row", 0)), col=int(data.get("col", 0)))

    def __str__(self) -> str:
        return f"({self.row}, {self.col})"


@dataclass(frozen=True)
class Button:
    position: Position
    action_type: str
    label: str
    config: Dict[str, Any] = field(default_factory=dict)
    icon: Optional[str] = None
    style: Optional[Dict[str, Any]] = None

    def at(self, position: Position) -> "Button":
        return replace(self, position=position)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "position": self.position.to_dict(),
            "action_type": _tag(self.action_type),
            "label": self.label,
            "config": deepcopy(dict(self.config)),
        }
        if self.icon is not None:
            data["icon"] = self.icon
        if self.style is not None:
            data["style"] = deepcopy(dict(self.style))
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Button":
        style = data.get("style")
        return cls(
            position=Position.from_dict(data.get("position") or {}),
            action_type=str(data.get("action_type") or ""),
            label=str(data.get("label") or ""),
            config=deepcopy(dict(data.get("config") or {})),
            icon=data.get("icon") or None,
            style=deepcopy(dict(style)) if isinstance(style, Mapping) else None,
        )


@dataclass(frozen=True)
class Page:
    name: str = "Main"
    rows: int = 3
    cols: int = 6
    buttons: Tuple[Button, ...] = ()

    @property
    def capacity(self) -> int:
        return self.rows * self.cols

    def contains(self, position: Position) -> bool:
        return 1 <= position.row <= self.rows and 1 <= position.col <= self.cols

    def button_at(self, position: Position) -> Optional[Button]:
        for button in self.buttons:
            if button.position == position:
                return button
        return None

    def with_buttons(self, buttons: Iterable[Button]) -> "Page":
        ordered = sorted(buttons, key=lambda b: (b.position.row, b.position.col))
        return replace(self, buttons=tuple(ordered))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "rows": self.rows,
            "cols": self.cols,
            "buttons": [button.to_dict() for button in self.buttons],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Page":
        return cls(
            name=str(data.get("name") or ""),
            rows=int(data.get("rows", 0)),
            cols=int(data.get("cols", 0)),
            buttons=tuple(Button.from_dict(b) for b in data.get("buttons") or []),
        )


@dataclass(frozen=True)
class Profile:
    name: str = "Default"
    hotkey: Optional[str] = None
    pages: Tuple[Page, ...] = (Page(),)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name, "pages": [page.to_dict() for page in self.pages]}
        if self.hotkey:
            data["hotkey"] = self.hotkey
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Profile":
        return cls(
            name=str(data.get("name") or ""),
            hotkey=data.get("hotkey") or None,
            pages=tuple(Page.from_dict(p) for p in data.get("pages") or []),
        )


@dataclass(frozen=True)
class DeckConfig:
    version: str = CONFIG_VERSION
    ui: Dict[str, Any] = field(default_factory=lambda: deepcopy(DEFAULT_UI_SETTINGS))
    profiles: Tuple[Profile, ...] = (Profile(),)

    def page(self, profile_index: int, page_index: int) -> Page:
        return self.profiles[profile_index].pages[page_index]

    def find_profile(self, name: str) -> int:
        for index, profile in enumerate(self.profiles):
            if profile.name == name:
                return index
        return -1

    def with_profiles(self, profiles: Iterable[Profile]) -> "DeckConfig":
        return replace(self, profiles=tuple(profiles))

    def with_profile(self, profile_index: int, profile: Profile) -> "DeckConfig":
        profiles = list(self.profiles)
        profiles[profile_index] = profile
        return self.with_profiles(profiles)

    def with_page(self, profile_index: int, page_index: int, page: Page) -> "DeckConfig":
        profile = self.profiles[profile_index]
        pages = list(profile.pages)
        pages[page_index] = page
        return self.with_profile(profile_index, replace(profile, pages=tuple(pages)))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "ui": deepcopy(dict(self.ui)),
            "profiles": [profile.to_dict() for profile in self.profiles],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DeckConfig":
        ui = data.get("ui")
        merged = deepcopy(DEFAULT_UI_SETTINGS)
        if isinstance(ui, Mapping):
            merged.update(deepcopy(dict(ui)))
        return cls(
            version=str(data.get("version") or ""),
            ui=merged,
            profiles=tuple(Profile.from_dict(p) for p in data.get("profiles") or []),
        )


def _tag(value: Any) -> str:
    if isinstance(value, ActionType):
        return value.value
    return str(value)

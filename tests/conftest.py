from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Iterator, List, Optional

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from deck_core.config_store import ConfigSession  # noqa: E402
from deck_core.errors import ConfigStoreError  # noqa: E402
from deck_core.grid import GridAddressSpace  # noqa: E402
from deck_core.models import DeckConfig, Page, Profile  # noqa: E402
from deck_core.navigation import NavigationEngine  # noqa: E402
from runtime_bus import RuntimeBus  # noqa: E402


class MemoryStore:
    """In-memory ConfigStore that counts writes and can be told to fail."""

    def __init__(self, config: Optional[DeckConfig] = None) -> None:
        self.config = config if config is not None else DeckConfig()
        self.saves: List[DeckConfig] = []
        self.fail_with: Optional[str] = None

    def load(self) -> DeckConfig:
        return self.config

    def save(self, config: DeckConfig) -> None:
        if self.fail_with:
            raise ConfigStoreError(self.fail_with)
        self.saves.append(config)
        self.config = config


class Clock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float = 1.0) -> float:
        self.now += seconds
        return self.now


def deck_of(*pages: Page, profiles: int = 1) -> DeckConfig:
    pages = pages or (Page(),)
    return DeckConfig(
        profiles=tuple(Profile(name=f"P{i}", pages=tuple(pages)) for i in range(profiles))
    )


class Deck:
    """Session, navigation and grid over a MemoryStore, sharing one bus."""

    def __init__(self, config: DeckConfig) -> None:
        self.bus = RuntimeBus()
        self.store = MemoryStore(config)
        self.session = ConfigSession(self.store)
        self.navigation = NavigationEngine(self.session.config, bus=self.bus)
        self.grid = GridAddressSpace(self.session, self.navigation)
        self.messages: List[tuple] = []
        for topic in ("deck.warning", "deck.config.committed", "deck.config.commit_failed",
                      "deck.navigation.changed", "deck.drop.accepted", "deck.drop.rejected"):
            self.bus.subscribe(topic, lambda env: self.messages.append((env.type, env.payload)))

    def topics(self) -> List[str]:
        return [topic for topic, _payload in self.messages]


@pytest.fixture()
def clock() -> Clock:
    return Clock()


@pytest.fixture()
def data_dir(tmp_path: Path) -> Iterator[Path]:
    root = tmp_path / "data"
    root.mkdir()
    yield root

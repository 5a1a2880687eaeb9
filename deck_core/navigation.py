from __future__ import annotations

import operator
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

from diagnostics.logging_setup import get_logger
from runtime_bus import RuntimeBus, topics

from .models import DeckConfig, Page, Profile
from .nav_state import NavigationState, NavigationStateStore

logger = get_logger(__name__)

SOURCE = "deck_core.navigation"


@dataclass(frozen=True)
class ProfileInfo:
    index: int
    name: str
    page_count: int
    current_page_index: int
    hotkey: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PageInfo:
    index: int
    name: str
    rows: int
    cols: int
    button_count: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class NavigationContext:
    profile_name: str
    profile_index: int
    page_name: str
    page_index: int
    total_profiles: int
    total_pages: int
    has_previous_page: bool
    has_next_page: bool

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class NavigationEngine:
    """Profile/page pointer over a loaded configuration tree.

    All lookups are index math over the attached tree. Invalid targets return
    ``None`` and publish a warning; reaching the first/last page with
    ``previous_page``/``next_page`` returns ``None`` silently.
    """

    def __init__(
        self,
        config: DeckConfig,
        state: Optional[NavigationState] = None,
        *,
        bus: Optional[RuntimeBus] = None,
        state_store: Optional[NavigationStateStore] = None,
    ) -> None:
        self._bus = bus if bus is not None else RuntimeBus()
        self._store = state_store
        self._state = state if state is not None else NavigationState()
        self._config = config
        self.attach(config)

    @property
    def bus(self) -> RuntimeBus:
        return self._bus

    @property
    def state(self) -> NavigationState:
        return self._state

    @property
    def config(self) -> DeckConfig:
        return self._config

    @property
    def current_profile_index(self) -> int:
        return self._state.current_profile_index

    @property
    def current_page_index(self) -> int:
        return self._state.current_page_index

    def attach(self, config: DeckConfig) -> None:
        """Bind to a (new) tree and clamp the pointer pair into its bounds."""
        self._config = config
        state = self._state
        if not config.profiles:
            state.current_profile_index = 0
            state.current_page_index = 0
            return
        if state.current_profile_index >= len(config.profiles):
            logger.warning(
                "profile index %s out of bounds, resetting to 0", state.current_profile_index
            )
            state.current_profile_index = 0
            state.current_page_index = 0
        profile = config.profiles[state.current_profile_index]
        if state.current_page_index >= len(profile.pages):
            logger.warning(
                "page index %s out of bounds for profile '%s', resetting to 0",
                state.current_page_index,
                profile.name,
            )
            state.current_page_index = 0
        known = {p.name for p in config.profiles}
        for name in list(state.last_active_pages):
            if name not in known:
                state.last_active_pages.pop(name, None)
        for p in config.profiles:
            state.last_active_pages.setdefault(p.name, 0)

    # -- queries -------------------------------------------------------------

    def get_profiles(self) -> List[ProfileInfo]:
        return [self._profile_info(index) for index in range(len(self._config.profiles))]

    def get_current_profile(self) -> ProfileInfo:
        return self._profile_info(self._state.current_profile_index)

    def get_current_profile_pages(self) -> List[PageInfo]:
        profile = self._current_profile()
        return [_page_info(index, page) for index, page in enumerate(profile.pages)]

    def get_current_page(self) -> PageInfo:
        index = self._state.current_page_index
        return _page_info(index, self._current_profile().pages[index])

    def current_page(self) -> Page:
        return self._current_profile().pages[self._state.current_page_index]

    def get_navigation_context(self) -> NavigationContext:
        profile = self._current_profile()
        page_index = self._state.current_page_index
        total_pages = len(profile.pages)
        return NavigationContext(
            profile_name=profile.name,
            profile_index=self._state.current_profile_index,
            page_name=profile.pages[page_index].name if page_index < total_pages else "",
            page_index=page_index,
            total_profiles=len(self._config.profiles),
            total_pages=total_pages,
            has_previous_page=page_index > 0,
            has_next_page=page_index < total_pages - 1,
        )

    # -- switching -----------------------------------------------------------

    def switch_to_profile(self, index: Any) -> Optional[ProfileInfo]:
        target = _as_index(index)
        if target is None or not 0 <= target < len(self._config.profiles):
            self._reject(f"invalid profile index: {index!r}")
            return None
        self._remember_current_page()
        profile = self._config.profiles[target]
        self._state.current_profile_index = target
        self._state.current_page_index = self._remembered_page(profile)
        logger.info("switched to profile '%s' (index %s)", profile.name, target)
        self._after_switch()
        return self._profile_info(target)

    def switch_to_profile_by_name(self, name: str) -> Optional[ProfileInfo]:
        index = self._config.find_profile(str(name))
        if index < 0:
            self._reject(f"profile not found: {name!r}")
            return None
        return self.switch_to_profile(index)

    def switch_to_page(self, index: Any) -> Optional[PageInfo]:
        target = _as_index(index)
        profile = self._current_profile()
        if target is None or not 0 <= target < len(profile.pages):
            self._reject(f"invalid page index: {index!r}")
            return None
        self._state.current_page_index = target
        self._remember_current_page()
        logger.info("switched to page '%s' (index %s)", profile.pages[target].name, target)
        self._after_switch()
        return _page_info(target, profile.pages[target])

    def next_page(self) -> Optional[PageInfo]:
        next_index = self._state.current_page_index + 1
        if next_index >= len(self._current_profile().pages):
            logger.debug("already at last page")
            return None
        return self.switch_to_page(next_index)

    def previous_page(self) -> Optional[PageInfo]:
        prev_index = self._state.current_page_index - 1
        if prev_index < 0:
            logger.debug("already at first page")
            return None
        return self.switch_to_page(prev_index)

    def reposition(self, profile_index: int, page_index: int) -> NavigationContext:
        """Move the pointer after a structural edit and announce it."""
        self._state.current_profile_index = profile_index
        self._state.current_page_index = page_index
        self.attach(self._config)
        self._remember_current_page()
        self._after_switch()
        return self.get_navigation_context()

    # -- internals -----------------------------------------------------------

    def _current_profile(self) -> Profile:
        return self._config.profiles[self._state.current_profile_index]

    def _profile_info(self, index: int) -> ProfileInfo:
        profile = self._config.profiles[index]
        page_index = (
            self._state.current_page_index
            if index == self._state.current_profile_index
            else self._remembered_page(profile)
        )
        return ProfileInfo(
            index=index,
            name=profile.name,
            page_count=len(profile.pages),
            current_page_index=page_index,
            hotkey=profile.hotkey,
        )

    def _remembered_page(self, profile: Profile) -> int:
        remembered = self._state.last_active_pages.get(profile.name, 0)
        return min(max(0, remembered), max(0, len(profile.pages) - 1))

    def _remember_current_page(self) -> None:
        profile = self._current_profile()
        self._state.last_active_pages[profile.name] = self._state.current_page_index

    def _after_switch(self) -> None:
        if self._store is not None:
            self._store.save(self._state)
        self._bus.publish(
            topics.NAVIGATION_CHANGED,
            self.get_navigation_context().to_dict(),
            source=SOURCE,
            sticky=True,
        )

    def _reject(self, message: str) -> None:
        logger.warning(message)
        self._bus.publish(
            topics.WARNING,
            {"source": "navigation", "error": message},
            source=SOURCE,
        )


def _page_info(index: int, page: Page) -> PageInfo:
    return PageInfo(
        index=index,
        name=page.name,
        rows=page.rows,
        cols=page.cols,
        button_count=len(page.buttons),
    )


def _as_index(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        return operator.index(value)
    except TypeError:
        return None

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from diagnostics.logging_setup import get_logger
from runtime_bus import topics

from .config_store import ConfigSession
from .errors import ConfigStoreError, ConfigValidationError
from .grid import MutationResult
from .models import DeckConfig, Page, Profile
from .navigation import NavigationEngine
from .operation_log import OperationLog

logger = get_logger(__name__)

SOURCE = "deck_core.structure"


class ProfileEditor:
    """Adds, removes and renames profiles and pages through the commit path."""

    def __init__(
        self,
        session: ConfigSession,
        navigation: NavigationEngine,
        operation_log: Optional[OperationLog] = None,
    ) -> None:
        self._session = session
        self._navigation = navigation
        self._log = operation_log
        session.add_listener(navigation.attach)

    def add_profile(self, name: str, hotkey: Optional[str] = None, *, rows: int = 3, cols: int = 6) -> MutationResult:
        profile = Profile(name=name.strip(), hotkey=hotkey or None, pages=(Page(name="Main", rows=rows, cols=cols),))
        config = self._session.config
        return self._commit(config.with_profiles(config.profiles + (profile,)))

    def rename_profile(self, index: int, name: str) -> MutationResult:
        config = self._session.config
        if not 0 <= index < len(config.profiles):
            return self._fail(f"invalid profile index: {index!r}")
        old_name = config.profiles[index].name
        pages = self._navigation.state.last_active_pages
        remembered = pages.get(old_name)
        result = self._commit(config.with_profile(index, replace(config.profiles[index], name=name.strip())))
        if result.ok and remembered is not None:
            # attach() already pruned the old name
            pages.pop(old_name, None)
            pages[name.strip()] = remembered
        return result

    def remove_profile(self, index: int) -> MutationResult:
        config = self._session.config
        if not 0 <= index < len(config.profiles):
            return self._fail(f"invalid profile index: {index!r}")
        if len(config.profiles) == 1:
            return self._fail("cannot remove the only profile")
        current = self._navigation.current_profile_index
        current_page = self._navigation.current_page_index
        remaining = config.profiles[:index] + config.profiles[index + 1:]
        result = self._commit(config.with_profiles(remaining))
        if not result.ok:
            return result
        if index < current:
            self._navigation.reposition(current - 1, current_page)
        elif index == current:
            target = min(index, len(remaining) - 1)
            remembered = self._navigation.state.last_active_pages.get(remaining[target].name, 0)
            self._navigation.reposition(target, remembered)
        return result

    def add_page(self, name: str, rows: int = 3, cols: int = 6, profile_index: Optional[int] = None) -> MutationResult:
        config = self._session.config
        p_index = self._navigation.current_profile_index if profile_index is None else profile_index
        if not 0 <= p_index < len(config.profiles):
            return self._fail(f"invalid profile index: {profile_index!r}")
        profile = config.profiles[p_index]
        page = Page(name=name.strip(), rows=int(rows), cols=int(cols))
        return self._commit(config.with_profile(p_index, replace(profile, pages=profile.pages + (page,))))

    def rename_page(self, index: int, name: str) -> MutationResult:
        config = self._session.config
        p_index = self._navigation.current_profile_index
        pages = config.profiles[p_index].pages
        if not 0 <= index < len(pages):
            return self._fail(f"invalid page index: {index!r}")
        return self._commit(config.with_page(p_index, index, replace(pages[index], name=name.strip())))

    def remove_page(self, index: int) -> MutationResult:
        config = self._session.config
        p_index = self._navigation.current_profile_index
        profile = config.profiles[p_index]
        if not 0 <= index < len(profile.pages):
            return self._fail(f"invalid page index: {index!r}")
        if len(profile.pages) == 1:
            return self._fail("cannot remove the only page of a profile")
        current_page = self._navigation.current_page_index
        pages = profile.pages[:index] + profile.pages[index + 1:]
        result = self._commit(config.with_profile(p_index, replace(profile, pages=pages)))
        if not result.ok:
            return result
        if index < current_page:
            self._navigation.reposition(p_index, current_page - 1)
        elif index == current_page:
            self._navigation.reposition(p_index, min(index, len(pages) - 1))
        return result

    def _commit(self, candidate: DeckConfig) -> MutationResult:
        try:
            self._session.commit(candidate)
        except (ConfigStoreError, ConfigValidationError) as exc:
            logger.error("structural edit aborted: %s", exc)
            self._navigation.bus.publish(topics.CONFIG_COMMIT_FAILED, {"error": str(exc)}, source=SOURCE)
            return MutationResult(ok=False, error=str(exc))
        if self._log is not None:
            # page indices recorded for undo no longer line up
            self._log.clear()
        self._navigation.bus.publish(topics.CONFIG_COMMITTED, {"structural": True}, source=SOURCE)
        return MutationResult(ok=True, written=True)

    def _fail(self, message: str) -> MutationResult:
        logger.warning(message)
        self._navigation.bus.publish(topics.WARNING, {"source": "structure", "error": message}, source=SOURCE)
        return MutationResult(ok=False, error=message)

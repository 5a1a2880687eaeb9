"""Wires the deck components around one config session and one bus."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from deck_actions import ActionDispatcher, ActionResult, SystemHandler, create_default_dispatcher
from deck_actions.open_target import UrlOpener
from deck_actions.spawn import Spawner
from diagnostics.logging_setup import configure_logging, get_logger
from drop_ingest import DropIngestService, make_cell_resolver
from drop_ingest.service import CellResolver
from runtime_bus import RuntimeBus, topics
from runtime_bus.messages import MessageEnvelope

from . import settings as deck_settings
from .config_store import ConfigSession, ConfigStore, JsonConfigStore
from .config_store import export_config as write_config_export
from .config_store import import_config as read_config_import
from .errors import ConfigStoreError, ConfigValidationError
from .grid import GridAddressSpace, MutationResult
from .icon_cache import IconCache
from .models import Button, DeckConfig, Position
from .nav_state import NavigationStateStore
from .navigation import NavigationEngine
from .operation_log import OperationLog
from .structure import ProfileEditor

logger = get_logger(__name__)

SOURCE = "deck_core.coordinator"


class DeckCoordinator:
    def __init__(
        self,
        store: ConfigStore,
        *,
        state_store: Optional[NavigationStateStore] = None,
        bus: Optional[RuntimeBus] = None,
        icon_cache: Optional[IconCache] = None,
        spawner: Optional[Spawner] = None,
        opener: Optional[UrlOpener] = None,
        cell_resolver: Optional[CellResolver] = None,
        action_log_size: int = 100,
    ) -> None:
        self.settings: Dict[str, Any] = {}
        self.bus = bus if bus is not None else RuntimeBus()
        self.session = ConfigSession(store, _load_or_default(store))
        state = state_store.load() if state_store is not None else None
        self.navigation = NavigationEngine(
            self.session.config, state, bus=self.bus, state_store=state_store
        )
        self.operation_log = OperationLog()
        self.grid = GridAddressSpace(self.session, self.navigation, self.operation_log)
        self.editor = ProfileEditor(self.session, self.navigation, self.operation_log)

        self.system = SystemHandler()
        self.system.register("next_page", lambda: self.navigation.next_page() is not None)
        self.system.register("previous_page", lambda: self.navigation.previous_page() is not None)
        self.dispatcher: ActionDispatcher = create_default_dispatcher(
            bus=self.bus,
            spawner=spawner,
            opener=opener,
            system=self.system,
            log_size=action_log_size,
        )

        self.icon_cache = icon_cache
        if cell_resolver is None:
            window = self.session.config.ui.get("window") or {}
            cell_resolver = make_cell_resolver(
                window.get("cell_size_px", 96), window.get("gap_px", 8)
            )
        self.drops = DropIngestService(
            self.grid, cell_resolver=cell_resolver, icon_cache=icon_cache, bus=self.bus
        )
        self.bus.register_handler(topics.DROP_REQUEST, self.drops.handle_envelope)
        self.bus.register_handler(topics.ACTION_EXECUTE_REQUEST, self._handle_action_request)

    @classmethod
    def from_settings(
        cls,
        base_dir: Optional[Path] = None,
        *,
        qt_icons: bool = True,
        **kwargs: Any,
    ) -> "DeckCoordinator":
        """Build from ``settings.json`` under the data root, with file logging."""
        resolved = deck_settings.resolve_settings(base_dir)
        level = logging.getLevelName(str(resolved.get("log_level", "INFO")).upper())
        configure_logging(
            Path(resolved["data_root"]), level=level if isinstance(level, int) else logging.INFO
        )
        resolver = None
        if qt_icons:
            from .icon_resolver import QtIconResolver

            resolver = QtIconResolver(resolved["icon_size_px"])
        kwargs.setdefault(
            "icon_cache",
            IconCache(
                deck_settings.icon_cache_dir(resolved),
                max_bytes=resolved["icon_cache_max_bytes"],
                resolver=resolver,
            ),
        )
        kwargs.setdefault("action_log_size", resolved["action_log_size"])
        coordinator = cls(
            JsonConfigStore(deck_settings.config_path(resolved)),
            state_store=NavigationStateStore(deck_settings.state_path(resolved)),
            **kwargs,
        )
        coordinator.settings = resolved
        return coordinator

    @property
    def config(self) -> DeckConfig:
        return self.session.config

    # -- actions -------------------------------------------------------------

    def execute(self, action: Union[Mapping[str, Any], Button]) -> ActionResult:
        return self.dispatcher.execute(action)

    def press(self, position: Position) -> ActionResult:
        """Run the button at ``position`` on the current page."""
        button = self.grid.button_at(position)
        if button is None:
            return ActionResult.fail(f"no button at {position}")
        return self.dispatcher.execute(button)

    # -- config import/export ------------------------------------------------

    def export_config(self, path: Path) -> None:
        write_config_export(self.session.config, path)

    def import_config(self, path: Path) -> MutationResult:
        try:
            candidate = read_config_import(path)
            self.session.commit(candidate)
        except (ConfigStoreError, ConfigValidationError) as exc:
            logger.error("config import failed: %s", exc)
            self.bus.publish(topics.CONFIG_COMMIT_FAILED, {"error": str(exc)}, source=SOURCE)
            return MutationResult(ok=False, error=str(exc))
        self.operation_log.clear()
        self.navigation.reposition(self.navigation.current_profile_index, self.navigation.current_page_index)
        self.bus.publish(topics.CONFIG_COMMITTED, {"imported": str(path)}, source=SOURCE)
        return MutationResult(ok=True, written=True)

    # -- icon cache ----------------------------------------------------------

    def create_icon_janitor(self, parent: Any = None):
        """Qt timer running cache cleanup on the GUI thread. Not started."""
        if self.icon_cache is None:
            return None
        from .icon_janitor import IconCacheJanitor

        interval = self.settings.get(
            "icon_cache_cleanup_interval_ms",
            deck_settings.DEFAULT_SETTINGS["icon_cache_cleanup_interval_ms"],
        )
        return IconCacheJanitor(self.icon_cache, interval_ms=interval, bus=self.bus, parent=parent)

    def close(self) -> None:
        self.bus.unregister_handler(topics.DROP_REQUEST)
        self.bus.unregister_handler(topics.ACTION_EXECUTE_REQUEST)

    def _handle_action_request(self, envelope: MessageEnvelope) -> Dict[str, object]:
        action = envelope.get("action")
        if not isinstance(action, Mapping):
            action = envelope.payload
        result = self.dispatcher.execute(action)
        payload = result.to_dict()
        payload["ok"] = result.success
        return payload


def _load_or_default(store: ConfigStore) -> DeckConfig:
    try:
        return store.load()
    except ConfigStoreError as exc:
        logger.error("config could not be loaded, running on defaults: %s", exc)
        return DeckConfig()

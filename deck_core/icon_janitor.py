from __future__ import annotations

from typing import Optional

from PyQt6 import QtCore

from diagnostics.logging_setup import get_logger
from runtime_bus import RuntimeBus, topics

from .icon_cache import IconCache

logger = get_logger(__name__)

DEFAULT_INTERVAL_MS = 10 * 60 * 1000


class IconCacheJanitor(QtCore.QObject):
    """Runs ``IconCache.cleanup`` periodically on the owning thread's event loop."""

    cleanup_completed = QtCore.pyqtSignal(dict)

    def __init__(
        self,
        cache: IconCache,
        *,
        interval_ms: int = DEFAULT_INTERVAL_MS,
        bus: Optional[RuntimeBus] = None,
        parent: Optional[QtCore.QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._cache = cache
        self._bus = bus
        self._timer = QtCore.QTimer(self)
        self._timer.setInterval(max(1000, int(interval_ms)))
        self._timer.timeout.connect(self.run_once)

    @property
    def interval_ms(self) -> int:
        return self._timer.interval()

    def is_active(self) -> bool:
        return self._timer.isActive()

    def start(self) -> None:
        self._timer.start()
        logger.info("icon cache janitor started (every %s ms)", self._timer.interval())

    def stop(self) -> None:
        self._timer.stop()

    def run_once(self) -> dict:
        try:
            report = self._cache.cleanup()
        except OSError as exc:
            logger.error("icon cache cleanup failed: %s", exc)
            return {"removed": [], "bytes_freed": 0, "error": str(exc)}
        if report.get("removed"):
            logger.info("icon cache cleanup removed %s entries", len(report["removed"]))
        if self._bus is not None:
            self._bus.publish(topics.ICON_CACHE_CLEANUP_COMPLETED, report, source="deck_core.icon_janitor")
        self.cleanup_completed.emit(report)
        return report

from __future__ import annotations

import time
from typing import Any, Callable, Dict, List, Mapping

from diagnostics.logging_setup import get_logger

from .types import ActionResult, elapsed_ms

logger = get_logger(__name__)

SystemCallback = Callable[[], Any]


class SystemHandler:
    """In-process actions supplied by the host (overlay control, navigation)."""

    def __init__(self) -> None:
        self._callbacks: Dict[str, SystemCallback] = {}

    def register(self, name: str, callback: SystemCallback) -> None:
        self._callbacks[name] = callback

    def unregister(self, name: str) -> None:
        self._callbacks.pop(name, None)

    def actions(self) -> List[str]:
        return sorted(self._callbacks)

    def execute(self, config: Mapping[str, Any]) -> ActionResult:
        started = time.perf_counter()
        name = str(config.get("system_action") or config.get("action") or "").strip()
        callback = self._callbacks.get(name)
        if callback is None:
            return ActionResult.fail(f"unknown system action: {name or '<empty>'}", execution_time_ms=elapsed_ms(started))
        try:
            outcome = callback()
        except Exception as exc:
            logger.exception("system action %s failed", name)
            return ActionResult.fail(f"system action {name} failed: {exc}", execution_time_ms=elapsed_ms(started))
        if outcome is False:
            return ActionResult.fail(f"system action {name} had no effect", execution_time_ms=elapsed_ms(started))
        return ActionResult.ok(f"system action {name} done", execution_time_ms=elapsed_ms(started))

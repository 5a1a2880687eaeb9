"""Action registry and execution entry point.

Handlers are looked up by ``action_type``; a later registration for the same
type replaces the earlier one. Whatever a handler does, ``execute`` returns an
``ActionResult`` and never raises.
"""

from __future__ import annotations

import time
from collections import deque
from dataclasses import replace
from typing import Any, Deque, Dict, List, Mapping, Optional, Union

from diagnostics.logging_setup import get_logger
from deck_core.models import ActionType, Button
from runtime_bus import RuntimeBus, topics

from .launch_app import LaunchAppHandler
from .open_target import OpenHandler, UrlOpener
from .spawn import Spawner
from .system import SystemHandler
from .terminal import TerminalHandler
from .types import ActionHandler, ActionLogEntry, ActionResult, elapsed_ms

logger = get_logger(__name__)

SOURCE = "deck_actions.dispatcher"
DEFAULT_LOG_SIZE = 100

Action = Union[Mapping[str, Any], Button]


class ActionDispatcher:
    def __init__(self, *, bus: Optional[RuntimeBus] = None, log_size: int = DEFAULT_LOG_SIZE) -> None:
        self._bus = bus
        self._handlers: Dict[str, ActionHandler] = {}
        self._log: Deque[ActionLogEntry] = deque(maxlen=max(1, int(log_size)))

    def register_handler(self, action_type: Union[str, ActionType], handler: ActionHandler) -> None:
        if not callable(getattr(handler, "execute", None)):
            raise TypeError(f"handler for {action_type!s} has no callable execute()")
        key = _type_key(action_type)
        if key in self._handlers:
            logger.info("replacing handler for action type %s", key)
        self._handlers[key] = handler

    def unregister_handler(self, action_type: Union[str, ActionType]) -> None:
        self._handlers.pop(_type_key(action_type), None)

    def handler_for(self, action_type: Union[str, ActionType]) -> Optional[ActionHandler]:
        return self._handlers.get(_type_key(action_type))

    def registered_types(self) -> List[str]:
        return sorted(self._handlers)

    def execute(self, action: Action) -> ActionResult:
        started = time.perf_counter()
        action_type, config = _split_action(action)
        handler = self._handlers.get(action_type)
        if handler is None:
            result = ActionResult.fail(f"no handler registered for action type {action_type or '<empty>'}")
        else:
            try:
                result = handler.execute(config)
            except Exception as exc:
                logger.exception("action handler for %s raised", action_type)
                result = ActionResult.fail(f"{action_type} failed: {exc}")
            if not isinstance(result, ActionResult):
                result = ActionResult.fail(f"{action_type} handler returned {type(result).__name__}")
        result = replace(result, action_type=action_type, execution_time_ms=elapsed_ms(started))
        self._record(result)
        return result

    def recent_actions(self, limit: Optional[int] = None) -> List[ActionLogEntry]:
        entries = list(self._log)
        if limit is not None:
            entries = entries[-max(0, int(limit)):] if limit > 0 else []
        return entries

    def clear_log(self) -> None:
        self._log.clear()

    def _record(self, result: ActionResult) -> None:
        self._log.append(
            ActionLogEntry(
                timestamp=time.time(),
                action_type=result.action_type,
                success=result.success,
                execution_time_ms=result.execution_time_ms,
                message=result.message,
            )
        )
        if result.success:
            logger.info("action %s ok in %sms: %s", result.action_type, result.execution_time_ms, result.message)
        else:
            logger.warning("action %s failed: %s", result.action_type, result.message)
        if self._bus is not None:
            self._bus.publish(topics.ACTION_EXECUTED, result.to_dict(), source=SOURCE)


def create_default_dispatcher(
    *,
    bus: Optional[RuntimeBus] = None,
    spawner: Optional[Spawner] = None,
    opener: Optional[UrlOpener] = None,
    system: Optional[SystemHandler] = None,
    log_size: int = DEFAULT_LOG_SIZE,
) -> ActionDispatcher:
    """Dispatcher with the four built-in action types registered."""
    dispatcher = ActionDispatcher(bus=bus, log_size=log_size)
    dispatcher.register_handler(ActionType.LAUNCH_APP, LaunchAppHandler(spawner))
    dispatcher.register_handler(ActionType.OPEN, OpenHandler(opener))
    dispatcher.register_handler(ActionType.TERMINAL, TerminalHandler(spawner))
    dispatcher.register_handler(ActionType.SYSTEM, system if system is not None else SystemHandler())
    return dispatcher


def _type_key(action_type: Union[str, ActionType]) -> str:
    if isinstance(action_type, ActionType):
        return action_type.value
    return str(action_type).strip()


def _split_action(action: Action) -> tuple[str, Mapping[str, Any]]:
    if isinstance(action, Button):
        return _type_key(action.action_type), dict(action.config)
    if not isinstance(action, Mapping):
        return "", {}
    config = {key: value for key, value in action.items() if key != "action_type"}
    return _type_key(action.get("action_type") or ""), config

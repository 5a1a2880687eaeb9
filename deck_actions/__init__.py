from .dispatcher import ActionDispatcher, create_default_dispatcher
from .launch_app import LaunchAppHandler
from .open_target import OpenHandler
from .system import SystemHandler
from .terminal import TerminalHandler, build_terminal_command
from .types import ActionHandler, ActionLogEntry, ActionResult

__all__ = [
    "ActionDispatcher",
    "ActionHandler",
    "ActionLogEntry",
    "ActionResult",
    "LaunchAppHandler",
    "OpenHandler",
    "SystemHandler",
    "TerminalHandler",
    "build_terminal_command",
    "create_default_dispatcher",
]

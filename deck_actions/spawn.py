"""Detached process spawning shared by the LaunchApp and Terminal handlers."""

from __future__ import annotations

import os
import re
import shlex
import subprocess
import sys
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

from diagnostics.logging_setup import get_logger

logger = get_logger(__name__)

Spawner = Callable[[Sequence[str], Optional[str], Optional[Dict[str, str]]], int]

_PERCENT_VAR = re.compile(r"%([A-Za-z_][A-Za-z0-9_]*)%")


def expand_env_vars(value: str) -> str:
    """Expand ``%VAR%``, ``$VAR`` and ``${VAR}``. Unknown names are left as-is."""
    expanded = _PERCENT_VAR.sub(lambda m: os.environ.get(m.group(1), m.group(0)), str(value))
    return os.path.expandvars(expanded)


def build_env(overrides: Optional[Mapping[str, Any]]) -> Optional[Dict[str, str]]:
    """Parent environment overlaid by ``overrides``; ``None`` means inherit as-is."""
    if not overrides:
        return None
    env = dict(os.environ)
    for key, value in overrides.items():
        env[str(key)] = expand_env_vars(str(value))
    return env


def spawn_detached(
    argv: Sequence[str],
    cwd: Optional[str] = None,
    env: Optional[Dict[str, str]] = None,
) -> int:
    """Start ``argv`` without waiting for it. Raises ``OSError`` if it cannot start."""
    kwargs: Dict[str, Any] = {
        "cwd": cwd or None,
        "env": env,
        "stdin": subprocess.DEVNULL,
        "stdout": subprocess.DEVNULL,
        "stderr": subprocess.DEVNULL,
        "close_fds": True,
    }
    if sys.platform == "win32":
        kwargs["creationflags"] = (
            subprocess.DETACHED_PROCESS | subprocess.CREATE_NEW_PROCESS_GROUP
        )
    else:
        kwargs["start_new_session"] = True
    process = subprocess.Popen(list(argv), **kwargs)
    logger.debug("spawned pid=%s argv=%s", process.pid, list(argv))
    return process.pid


def as_arg_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return shlex.split(value, posix=sys.platform != "win32")
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    return [str(value)]

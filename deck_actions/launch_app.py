from __future__ import annotations

import os
import time
from typing import Any, Mapping, Optional

from diagnostics.logging_setup import get_logger

from .spawn import Spawner, as_arg_list, build_env, expand_env_vars, spawn_detached
from .types import ActionResult, elapsed_ms

logger = get_logger(__name__)


class LaunchAppHandler:
    """Starts an executable detached from the deck process."""

    def __init__(self, spawner: Optional[Spawner] = None) -> None:
        self._spawn = spawner or spawn_detached

    def execute(self, config: Mapping[str, Any]) -> ActionResult:
        started = time.perf_counter()
        raw_path = str(config.get("path") or "").strip()
        if not raw_path:
            return ActionResult.fail("LaunchApp requires a path", execution_time_ms=elapsed_ms(started))
        path = expand_env_vars(raw_path)
        if _looks_like_path(path) and not os.path.exists(path):
            logger.warning("executable not found: %s", path)
            return ActionResult.fail(f"executable not found: {path}", execution_time_ms=elapsed_ms(started))

        workdir = config.get("workdir")
        cwd = expand_env_vars(str(workdir)) if workdir else None
        if cwd and not os.path.isdir(cwd):
            return ActionResult.fail(f"working directory not found: {cwd}", execution_time_ms=elapsed_ms(started))

        argv = [path, *as_arg_list(config.get("args"))]
        try:
            pid = self._spawn(argv, cwd, build_env(config.get("env")))
        except (OSError, ValueError) as exc:
            logger.warning("failed to launch %s: %s", path, exc)
            return ActionResult.fail(f"failed to launch {path}: {exc}", execution_time_ms=elapsed_ms(started))
        logger.info("launched %s (pid %s)", path, pid)
        return ActionResult.ok(f"launched {os.path.basename(path) or path}", execution_time_ms=elapsed_ms(started))


def _looks_like_path(value: str) -> bool:
    return "/" in value or "\\" in value or (len(value) > 1 and value[1] == ":")

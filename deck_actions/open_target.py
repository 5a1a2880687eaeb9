from __future__ import annotations

import os
import re
import time
from typing import Any, Callable, Mapping, Optional

from PyQt6 import QtCore, QtGui

from diagnostics.logging_setup import get_logger

from .spawn import expand_env_vars
from .types import ActionResult, elapsed_ms

logger = get_logger(__name__)

UrlOpener = Callable[[QtCore.QUrl], bool]

# Two or more letters so that "C:\..." is treated as a drive, not a scheme.
_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]+:")


def is_url(target: str) -> bool:
    return bool(_SCHEME.match(target))


def to_qurl(target: str) -> QtCore.QUrl:
    if is_url(target):
        return QtCore.QUrl(target)
    return QtCore.QUrl.fromLocalFile(os.path.abspath(target))


class OpenHandler:
    """Opens a URL, file or folder with the desktop's default handler."""

    def __init__(self, opener: Optional[UrlOpener] = None) -> None:
        self._open = opener or QtGui.QDesktopServices.openUrl

    def execute(self, config: Mapping[str, Any]) -> ActionResult:
        started = time.perf_counter()
        target = str(config.get("target") or "").strip()
        if not target:
            return ActionResult.fail("Open requires a target", execution_time_ms=elapsed_ms(started))
        if not is_url(target):
            target = expand_env_vars(target)
            if not os.path.exists(target):
                logger.warning("open target not found: %s", target)
                return ActionResult.fail(f"path not found: {target}", execution_time_ms=elapsed_ms(started))

        url = to_qurl(target)
        if not url.isValid():
            return ActionResult.fail(f"invalid target: {target}", execution_time_ms=elapsed_ms(started))
        if not self._open(url):
            logger.warning("desktop refused to open %s", target)
            return ActionResult.fail(f"failed to open {target}", execution_time_ms=elapsed_ms(started))
        logger.info("opened %s", target)
        return ActionResult.ok(f"opened {target}", execution_time_ms=elapsed_ms(started))

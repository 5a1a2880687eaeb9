from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional

APP_LOGGER_NAME = "quickdeck"
LOG_FILENAME = "quickdeck.log"
_FORMAT = "ts=%(asctime)s level=%(levelname)s logger=%(name)s msg=%(message)s"

_CONFIGURED = False
_HANDLER: Optional[logging.Handler] = None


def configure_logging(base_dir: Optional[Path] = None, level: int = logging.INFO) -> Dict[str, str]:
    """Attach the file handler to the application logger (once per process)."""
    global _CONFIGURED, _HANDLER
    root = Path(base_dir) if base_dir is not None else Path("data")
    log_dir = root / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / LOG_FILENAME

    logger = logging.getLogger(APP_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    if not _CONFIGURED:
        handler = logging.FileHandler(log_path, encoding="utf-8")
        handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(handler)
        _HANDLER = handler
        _CONFIGURED = True

    return {
        "log_path": str(log_path),
        "format": "kv",
        "handlers": "file",
        "logger_name": APP_LOGGER_NAME,
    }


def shutdown_logging() -> None:
    global _CONFIGURED, _HANDLER
    if _HANDLER is None:
        return
    logger = logging.getLogger(APP_LOGGER_NAME)
    logger.removeHandler(_HANDLER)
    _HANDLER.close()
    _HANDLER = None
    _CONFIGURED = False


def get_logger(name: Optional[str] = None) -> logging.Logger:
    if not name:
        return logging.getLogger(APP_LOGGER_NAME)
    return logging.getLogger(f"{APP_LOGGER_NAME}.{name}")

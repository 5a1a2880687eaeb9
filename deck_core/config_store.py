"""Whole-tree persistence of the deck configuration.

``ConfigStore`` is the external contract: ``load()`` and ``save()`` operate on
the entire tree and raise ``ConfigStoreError`` on failure. ``ConfigSession``
owns the live in-memory tree and only swaps it in after ``save`` succeeded.
"""

from __future__ import annotations

import json
import os
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, Protocol

from diagnostics.fs_ops import atomic_write_text
from diagnostics.logging_setup import get_logger

from .errors import ConfigStoreError, ConfigValidationError
from .models import DeckConfig
from .validation import validate_config

logger = get_logger(__name__)

CommitListener = Callable[[DeckConfig], None]


class ConfigStore(Protocol):
    def load(self) -> DeckConfig:
        ...

    def save(self, config: DeckConfig) -> None:
        ...


class JsonConfigStore:
    """Stores the tree as one JSON document, written atomically."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.backup_path: Optional[Path] = None
        self._unreadable = False

    def load(self) -> DeckConfig:
        if not self.path.exists():
            logger.info("config not found at %s, writing defaults", self.path)
            config = DeckConfig()
            self.save(config)
            return config
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise ConfigStoreError(f"failed to read config: {exc}", str(self.path)) from exc
        except ValueError as exc:
            self._unreadable = True
            raise ConfigStoreError(f"failed to parse config: {exc}", str(self.path)) from exc
        try:
            if not isinstance(data, dict):
                raise ConfigValidationError("config root must be an object")
            config = validate_config(DeckConfig.from_dict(data))
        except (ConfigValidationError, TypeError, ValueError) as exc:
            self._unreadable = True
            raise ConfigStoreError(f"invalid config: {exc}", str(self.path)) from exc
        self._unreadable = False
        return config

    def save(self, config: DeckConfig) -> None:
        if self._unreadable:
            self._backup_unreadable()
        text = json.dumps(config.to_dict(), indent=2, ensure_ascii=False)
        try:
            atomic_write_text(self.path, text)
        except OSError as exc:
            raise ConfigStoreError(f"failed to write config: {exc}", str(self.path)) from exc

    def _backup_unreadable(self) -> None:
        """Move a config that failed to load aside before it is overwritten."""
        stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        backup = self.path.with_name(f"{self.path.name}.corrupt-{stamp}")
        try:
            if self.path.exists():
                os.replace(self.path, backup)
        except OSError as exc:
            raise ConfigStoreError(f"failed to back up unreadable config: {exc}", str(self.path)) from exc
        self._unreadable = False
        self.backup_path = backup
        logger.warning("unreadable config moved to %s", backup)


class ConfigSession:
    """Holds the live configuration tree and commits replacements atomically."""

    def __init__(self, store: ConfigStore, config: Optional[DeckConfig] = None) -> None:
        self._store = store
        self._config = config if config is not None else store.load()
        self._listeners: List[CommitListener] = []

    @property
    def config(self) -> DeckConfig:
        return self._config

    @property
    def store(self) -> ConfigStore:
        return self._store

    def add_listener(self, listener: CommitListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def commit(self, candidate: DeckConfig) -> DeckConfig:
        """Validate, persist, then swap. Raises and keeps the old tree on failure."""
        validate_config(candidate)
        try:
            self._store.save(candidate)
        except OSError as exc:
            raise ConfigStoreError(f"failed to write config: {exc}") from exc
        self._config = candidate
        for listener in list(self._listeners):
            listener(candidate)
        return candidate


def export_config(config: DeckConfig, export_path: Path) -> None:
    try:
        atomic_write_text(Path(export_path), json.dumps(config.to_dict(), indent=2, ensure_ascii=False))
    except OSError as exc:
        raise ConfigStoreError(f"failed to export config: {exc}", str(export_path)) from exc


def import_config(import_path: Path) -> DeckConfig:
    """Read and validate a config file without committing it."""
    try:
        data = json.loads(Path(import_path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ConfigStoreError(f"failed to read import file: {exc}", str(import_path)) from exc
    if not isinstance(data, dict):
        raise ConfigStoreError("imported config root must be an object", str(import_path))
    return validate_config(DeckConfig.from_dict(data))

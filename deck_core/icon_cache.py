"""Byte-quota LRU cache for extracted icons.

Entries are keyed by the absolute path of the file the icon was extracted
from. Icon bytes live as PNG files in the cache directory, the index of keys
and access times lives in ``index.json`` next to them. When usage goes over
the quota the least recently accessed entries are evicted until usage is at
or below ``target_ratio`` of the quota.
"""

from __future__ import annotations

import hashlib
import json
import ntpath
import os
import posixpath
import time
from collections import OrderedDict
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional

from diagnostics.fs_ops import atomic_write_bytes, atomic_write_text, safe_unlink
from diagnostics.logging_setup import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_BYTES = 50 * 1024 * 1024
DEFAULT_TARGET_RATIO = 0.8
INDEX_FILENAME = "index.json"

IconResolver = Callable[[str], Optional[bytes]]


@dataclass
class CacheEntry:
    key: str
    size_bytes: int
    last_access: float
    file_path: Path

    def to_dict(self) -> Dict[str, object]:
        return {
            "key": self.key,
            "size_bytes": self.size_bytes,
            "last_access": self.last_access,
            "file": self.file_path.name,
        }


def normalize_key(source_path: str) -> str:
    value = str(source_path).strip()
    if ntpath.isabs(value) or posixpath.isabs(value):
        return value
    return os.path.abspath(value)


class IconCache:
    def __init__(
        self,
        cache_dir: Path,
        *,
        max_bytes: int = DEFAULT_MAX_BYTES,
        resolver: Optional[IconResolver] = None,
        target_ratio: float = DEFAULT_TARGET_RATIO,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.cache_dir = Path(cache_dir)
        self.max_bytes = max(1, int(max_bytes))
        self.target_ratio = min(1.0, max(0.0, float(target_ratio)))
        self._resolver = resolver
        self._clock = clock or time.time
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._usage = 0
        self._load_index()

    @property
    def usage_bytes(self) -> int:
        return self._usage

    @property
    def target_bytes(self) -> int:
        return int(self.max_bytes * self.target_ratio)

    def keys(self) -> List[str]:
        """Keys in eviction order, least recently accessed first."""
        return list(self._entries)

    def __contains__(self, source_path: object) -> bool:
        return isinstance(source_path, str) and normalize_key(source_path) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    # -- lookups -------------------------------------------------------------

    def get(self, source_path: str) -> Optional[CacheEntry]:
        key = normalize_key(source_path)
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not entry.file_path.exists():
            self._forget(key)
            return None
        self._touch(entry)
        return entry

    def get_or_extract(self, source_path: str) -> Optional[CacheEntry]:
        entry = self.get(source_path)
        if entry is not None:
            return entry
        if self._resolver is None:
            return None
        try:
            data = self._resolver(normalize_key(source_path))
        except Exception as exc:
            logger.warning("icon extraction failed for %s: %s", source_path, exc)
            return None
        if not data:
            logger.debug("no icon available for %s", source_path)
            return None
        return self.put(source_path, data)

    def read_bytes(self, source_path: str) -> Optional[bytes]:
        entry = self.get(source_path)
        if entry is None:
            return None
        try:
            return entry.file_path.read_bytes()
        except OSError as exc:
            logger.warning("failed to read cached icon %s: %s", entry.file_path, exc)
            self._forget(entry.key)
            return None

    # -- mutation ------------------------------------------------------------

    def put(self, source_path: str, data: bytes) -> Optional[CacheEntry]:
        key = normalize_key(source_path)
        size = len(data)
        if size > self.target_bytes:
            # could never be kept under the eviction target
            logger.warning("icon for %s (%s bytes) exceeds cache target, not cached", key, size)
            return None
        file_path = self.cache_dir / _file_name(key)
        try:
            atomic_write_bytes(file_path, data)
        except OSError as exc:
            logger.warning("failed to write icon cache file %s: %s", file_path, exc)
            return None
        previous = self._entries.pop(key, None)
        if previous is not None:
            self._usage -= previous.size_bytes
        entry = CacheEntry(key=key, size_bytes=size, last_access=self._clock(), file_path=file_path)
        self._entries[key] = entry
        self._usage += size
        if self._usage > self.max_bytes:
            self._evict(protect=key)
        self._save_index()
        return entry

    def invalidate(self, source_path: str) -> bool:
        key = normalize_key(source_path)
        entry = self._entries.get(key)
        if entry is None:
            return False
        self._remove(entry)
        self._save_index()
        return True

    def cleanup(self) -> Dict[str, object]:
        """Evict down to the target if usage is over quota."""
        if self._usage <= self.max_bytes:
            return {"removed": [], "bytes_freed": 0, "usage_bytes": self._usage}
        logger.info(
            "icon cache usage %.2fMB exceeds limit %.2fMB, cleaning up",
            self._usage / 1024 / 1024,
            self.max_bytes / 1024 / 1024,
        )
        removed, freed = self._evict()
        self._save_index()
        return {"removed": removed, "bytes_freed": freed, "usage_bytes": self._usage}

    def clear(self) -> Dict[str, object]:
        removed: List[str] = []
        freed = 0
        for entry in list(self._entries.values()):
            freed += entry.size_bytes
            removed.append(entry.key)
            self._remove(entry)
        self._save_index()
        logger.info("icon cache cleared: removed %s files, freed %s bytes", len(removed), freed)
        return {"removed": removed, "bytes_freed": freed, "usage_bytes": self._usage}

    def stats(self) -> Dict[str, object]:
        return {
            "cached_icons": len(self._entries),
            "cache_size_bytes": self._usage,
            "cache_directory": str(self.cache_dir),
            "quota_bytes": self.max_bytes,
        }

    # -- internals -----------------------------------------------------------

    def _touch(self, entry: CacheEntry) -> None:
        entry.last_access = self._clock()
        self._entries.move_to_end(entry.key)

    def _evict(self, protect: Optional[str] = None) -> tuple[List[str], int]:
        removed: List[str] = []
        freed = 0
        target = self.target_bytes
        for key in list(self._entries):
            if self._usage <= target:
                break
            if key == protect:
                continue
            entry = self._entries[key]
            freed += entry.size_bytes
            removed.append(key)
            self._remove(entry)
        if removed:
            logger.info("icon cache evicted %s entries, freed %s bytes", len(removed), freed)
        return removed, freed

    def _remove(self, entry: CacheEntry) -> None:
        try:
            safe_unlink(entry.file_path)
        except OSError as exc:
            logger.warning("failed to delete icon file %s: %s", entry.file_path, exc)
        self._forget(entry.key)

    def _forget(self, key: str) -> None:
        entry = self._entries.pop(key, None)
        if entry is not None:
            self._usage -= entry.size_bytes

    def _index_path(self) -> Path:
        return self.cache_dir / INDEX_FILENAME

    def _load_index(self) -> None:
        path = self._index_path()
        if not path.exists():
            return
        try:
            records = json.loads(path.read_text(encoding="utf-8")).get("entries", [])
        except (OSError, ValueError, AttributeError) as exc:
            logger.warning("icon cache index unreadable, starting empty: %s", exc)
            return
        loaded: List[CacheEntry] = []
        for record in records if isinstance(records, list) else []:
            if not isinstance(record, dict) or not record.get("key"):
                continue
            key = str(record["key"])
            file_path = self.cache_dir / _file_name(key)
            try:
                stat = file_path.stat()
            except OSError:
                continue
            last_access = record.get("last_access")
            loaded.append(
                CacheEntry(
                    key=key,
                    size_bytes=int(stat.st_size),
                    last_access=float(last_access) if last_access is not None else stat.st_mtime,
                    file_path=file_path,
                )
            )
        loaded.sort(key=lambda entry: entry.last_access)
        for entry in loaded:
            self._entries[entry.key] = entry
            self._usage += entry.size_bytes

    def _save_index(self) -> None:
        payload = {"entries": [entry.to_dict() for entry in self._entries.values()]}
        try:
            atomic_write_text(self._index_path(), json.dumps(payload, indent=2))
        except OSError as exc:
            logger.warning("failed to write icon cache index: %s", exc)


def _file_name(key: str) -> str:
    return hashlib.sha1(key.encode("utf-8")).hexdigest() + ".png"

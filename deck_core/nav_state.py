from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from diagnostics.fs_ops import atomic_write_text
from diagnostics.logging_setup import get_logger

logger = get_logger(__name__)


@dataclass
class NavigationState:
    """The current profile/page pointer pair plus per-profile last pages."""

    current_profile_index: int = 0
    current_page_index: int = 0
    last_active_pages: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current_profile_index": self.current_profile_index,
            "current_page_index": self.current_page_index,
            "last_active_pages": dict(self.last_active_pages),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "NavigationState":
        pages = data.get("last_active_pages")
        last_pages: Dict[str, int] = {}
        if isinstance(pages, Mapping):
            for name, index in pages.items():
                try:
                    last_pages[str(name)] = max(0, int(index))
                except (TypeError, ValueError):
                    continue
        return cls(
            current_profile_index=_non_negative(data.get("current_profile_index")),
            current_page_index=_non_negative(data.get("current_page_index")),
            last_active_pages=last_pages,
        )


class NavigationStateStore:
    """Persists the "last active" pointer separately from the config tree."""

    def __init__(self, path: Optional[Path]) -> None:
        self.path = Path(path) if path is not None else None

    def load(self) -> NavigationState:
        if self.path is None or not self.path.exists():
            logger.debug("no navigation state file, using defaults")
            return NavigationState()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("failed to load navigation state from %s: %s", self.path, exc)
            return NavigationState()
        if not isinstance(data, dict):
            return NavigationState()
        return NavigationState.from_dict(data)

    def save(self, state: NavigationState) -> bool:
        if self.path is None:
            return True
        payload = state.to_dict()
        payload["last_updated"] = datetime.now(timezone.utc).isoformat()
        try:
            atomic_write_text(self.path, json.dumps(payload, indent=2))
        except OSError as exc:
            logger.warning("failed to save navigation state to %s: %s", self.path, exc)
            return False
        return True


def _non_negative(value: Any) -> int:
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0

# =============================================================================
# NAV INDEX (search these tags)
# [NAV-00] Imports / constants
# [NAV-10] Settings loading (defaults/overrides)
# [NAV-20] Path helpers
# [NAV-99] End
# =============================================================================

# === [NAV-00] Imports / constants ============================================
from __future__ import annotations

import json
import os
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Optional

DATA_DIR_ENV = "QUICKDECK_DATA_DIR"
SETTINGS_FILENAME = "settings.json"

DEFAULT_SETTINGS: Dict[str, Any] = {
    "config_file": "config.json",
    "state_file": "profile_state.json",
    "icon_cache_dir": "icon_cache",
    "icon_cache_max_bytes": 50 * 1024 * 1024,
    "icon_cache_cleanup_interval_ms": 10 * 60 * 1000,
    "icon_size_px": 48,
    "action_log_size": 100,
    "log_level": "INFO",
}


# === [NAV-10] Settings loading (defaults/overrides) ==========================
def get_data_root(base_dir: Optional[Path] = None) -> Path:
    if base_dir is not None:
        return Path(base_dir)
    env_value = os.environ.get(DATA_DIR_ENV, "").strip()
    return Path(env_value) if env_value else Path("data")


def get_default_settings() -> Dict[str, Any]:
    return deepcopy(DEFAULT_SETTINGS)


def load_overrides(base_dir: Optional[Path] = None) -> Dict[str, Any]:
    path = get_data_root(base_dir) / SETTINGS_FILENAME
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except Exception:
        return {}
    return data if isinstance(data, dict) else {}


def resolve_settings(base_dir: Optional[Path] = None) -> Dict[str, Any]:
    settings = get_default_settings()
    for key, value in load_overrides(base_dir).items():
        if key not in settings:
            continue
        default = settings[key]
        if isinstance(default, int) and not isinstance(default, bool):
            try:
                settings[key] = max(1, int(value))
            except (TypeError, ValueError):
                continue
        elif isinstance(value, str) and value.strip():
            settings[key] = value.strip()
    settings["data_root"] = str(get_data_root(base_dir))
    return settings


# === [NAV-20] Path helpers ====================================================
def config_path(settings: Dict[str, Any]) -> Path:
    return _under_root(settings, "config_file")


def state_path(settings: Dict[str, Any]) -> Path:
    return _under_root(settings, "state_file")


def icon_cache_dir(settings: Dict[str, Any]) -> Path:
    return _under_root(settings, "icon_cache_dir")


def _under_root(settings: Dict[str, Any], key: str) -> Path:
    value = Path(str(settings.get(key) or DEFAULT_SETTINGS[key]))
    if value.is_absolute():
        return value
    return Path(str(settings.get("data_root") or "data")) / value


# === [NAV-99] End =============================================================
__all__ = [
    "DATA_DIR_ENV",
    "DEFAULT_SETTINGS",
    "get_data_root",
    "get_default_settings",
    "load_overrides",
    "resolve_settings",
    "config_path",
    "state_path",
    "icon_cache_dir",
]

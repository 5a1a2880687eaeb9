from __future__ import annotations

import os
import re
from typing import Any, Dict, Tuple

from deck_core.models import ActionType

EXECUTABLE_SUFFIXES = frozenset({".exe", ".com", ".bat", ".cmd", ".msi"})

_SEPARATORS = re.compile(r"[\\/]+")


def base_name(path: str) -> str:
    """Last path component, splitting on both ``\\`` and ``/``."""
    parts = [part for part in _SEPARATORS.split(str(path).strip()) if part]
    return parts[-1] if parts else ""


def suffix_of(path: str) -> str:
    name = base_name(path)
    stem, ext = os.path.splitext(name)
    return ext.lower() if stem else ""


def label_for(path: str) -> str:
    name = base_name(path)
    stem, _ext = os.path.splitext(name)
    label = stem or name
    # "C:\" has no base name; fall back to the drive
    return label or str(path).strip().rstrip("\\/") or str(path)


def classify(path: str) -> Tuple[ActionType, Dict[str, Any]]:
    """Action type and config for a dropped path."""
    if suffix_of(path) in EXECUTABLE_SUFFIXES:
        return ActionType.LAUNCH_APP, {"path": path}
    return ActionType.OPEN, {"target": path}

from __future__ import annotations

import time
from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional, Protocol


@dataclass(frozen=True)
class ActionResult:
    success: bool
    message: str
    execution_time_ms: int = 0
    action_type: str = ""
    output: Optional[str] = None

    @classmethod
    def ok(cls, message: str, **extra: Any) -> "ActionResult":
        return cls(success=True, message=message, **extra)

    @classmethod
    def fail(cls, message: str, **extra: Any) -> "ActionResult":
        return cls(success=False, message=message, **extra)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ActionLogEntry:
    timestamp: float
    action_type: str
    success: bool
    execution_time_ms: int
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ActionHandler(Protocol):
    def execute(self, config: Mapping[str, Any]) -> ActionResult:
        ...


def elapsed_ms(started: float) -> int:
    """Milliseconds since a ``time.perf_counter()`` reading."""
    return int((time.perf_counter() - started) * 1000)

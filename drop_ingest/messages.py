from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from deck_core.models import Button, Position


@dataclass(frozen=True)
class DropRequest:
    paths: Tuple[str, ...]
    x: float
    y: float

    def to_dict(self) -> Dict[str, Any]:
        return {"paths": list(self.paths), "x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DropRequest":
        paths = data.get("paths") or []
        if isinstance(paths, str):
            paths = [paths]
        return cls(
            paths=tuple(str(p) for p in paths if str(p).strip()),
            x=float(data.get("x", 0) or 0),
            y=float(data.get("y", 0) or 0),
        )


@dataclass(frozen=True)
class DropResponse:
    accepted: bool
    reason: Optional[str] = None
    cell: Optional[Position] = None
    positions: Tuple[Position, ...] = ()
    buttons: Tuple[Button, ...] = ()
    discarded: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.accepted,
            "accepted": self.accepted,
            "reason": self.reason,
            "cell": self.cell.to_dict() if self.cell is not None else None,
            "positions": [p.to_dict() for p in self.positions],
            "buttons": [b.to_dict() for b in self.buttons],
            "discarded": self.discarded,
        }

from __future__ import annotations

from enum import Enum
from typing import Optional

from deck_core.models import Position


class DragState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    HOVERING = "hovering"
    DROPPED = "dropped"


class DragGesture:
    """Tracks one external drag over the grid surface."""

    def __init__(self) -> None:
        self.state = DragState.IDLE
        self.hover_cell: Optional[Position] = None

    @property
    def active(self) -> bool:
        return self.state in (DragState.DRAGGING, DragState.HOVERING)

    def enter(self) -> bool:
        if self.state is not DragState.IDLE:
            return False
        self.state = DragState.DRAGGING
        self.hover_cell = None
        return True

    def hover(self, cell: Optional[Position]) -> bool:
        if not self.active:
            return False
        self.state = DragState.HOVERING
        self.hover_cell = cell
        return True

    def drop(self) -> bool:
        if not self.active:
            return False
        self.state = DragState.DROPPED
        return True

    def reset(self) -> None:
        self.state = DragState.IDLE
        self.hover_cell = None

from __future__ import annotations

import uuid
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Deque, Dict, List, Optional, Tuple

from .models import Button, Position


class OperationType(str, Enum):
    ADD_BUTTONS = "AddButtons"
    REMOVE_BUTTONS = "RemoveButtons"
    MODIFY_BUTTONS = "ModifyButtons"


@dataclass(frozen=True)
class UndoEntry:
    operation_type: OperationType
    affected_positions: Tuple[Position, ...]
    timestamp: float
    profile_name: str
    page_index: int
    previous_buttons: Tuple[Optional[Button], ...] = ()
    operation_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "operation_id": self.operation_id,
            "operation_type": self.operation_type.value,
            "affected_positions": [p.to_dict() for p in self.affected_positions],
            "timestamp": self.timestamp,
            "profile_name": self.profile_name,
            "page_index": self.page_index,
            "previous_buttons": [b.to_dict() if b else None for b in self.previous_buttons],
        }


class OperationLog:
    """Bounded log of undoable grid batches; depth 1 keeps only the latest."""

    def __init__(self, depth: int = 1) -> None:
        self._entries: Deque[UndoEntry] = deque(maxlen=max(1, int(depth)))

    @property
    def depth(self) -> int:
        return self._entries.maxlen or 1

    def record(self, entry: UndoEntry) -> None:
        self._entries.append(entry)

    def peek(self) -> Optional[UndoEntry]:
        return self._entries[-1] if self._entries else None

    def pop(self) -> Optional[UndoEntry]:
        return self._entries.pop() if self._entries else None

    def clear(self) -> None:
        self._entries.clear()

    def entries(self) -> List[UndoEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

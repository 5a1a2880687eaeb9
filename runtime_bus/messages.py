from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional


@dataclass(slots=True)
class MessageEnvelope:
    """Standard envelope for everything travelling over the runtime bus."""

    msg_id: str
    type: str
    timestamp: str
    source: str
    payload: Dict[str, object] = field(default_factory=dict)
    trace_id: str = ""
    target: Optional[str] = None

    def get(self, key: str, default: Any = None) -> Any:
        return self.payload.get(key, default)

    def to_dict(self) -> Dict[str, object]:
        return {
            "msg_id": self.msg_id,
            "type": self.type,
            "timestamp": self.timestamp,
            "source": self.source,
            "payload": dict(self.payload),
            "trace_id": self.trace_id,
            "target": self.target,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MessageEnvelope":
        payload = data.get("payload")
        return cls(
            msg_id=str(data.get("msg_id") or ""),
            type=str(data.get("type") or ""),
            timestamp=str(data.get("timestamp") or ""),
            source=str(data.get("source") or ""),
            payload=dict(payload) if isinstance(payload, Mapping) else {},
            trace_id=str(data.get("trace_id") or ""),
            target=data.get("target"),
        )

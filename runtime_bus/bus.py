from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from diagnostics.logging_setup import get_logger

from .messages import MessageEnvelope

logger = get_logger(__name__)

Subscriber = Callable[[MessageEnvelope], None]
RequestHandler = Callable[[MessageEnvelope], Dict[str, object]]


def _iso_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class RuntimeBus:
    """In-process pub/sub and request-reply bus.

    Everything runs on the caller's thread: ``publish`` fans out to
    subscribers in subscription order and ``request`` calls the registered
    handler directly. A subscriber or handler that raises is logged and
    isolated, it never propagates into the publisher.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[str, tuple[str, Subscriber]] = {}
        self._topic_index: Dict[str, List[str]] = {}
        self._request_handlers: Dict[str, RequestHandler] = {}
        self._sticky: Dict[str, MessageEnvelope] = {}

    def subscribe(self, topic: str, handler: Subscriber, *, replay: bool = False) -> str:
        sub_id = str(uuid.uuid4())
        self._subscribers[sub_id] = (topic, handler)
        self._topic_index.setdefault(topic, []).append(sub_id)
        if replay and topic in self._sticky:
            self._deliver(topic, handler, self._sticky[topic])
        return sub_id

    def unsubscribe(self, sub_id: str) -> None:
        topic, _ = self._subscribers.pop(sub_id, (None, None))
        if topic and topic in self._topic_index:
            ids = self._topic_index[topic]
            if sub_id in ids:
                ids.remove(sub_id)
            if not ids:
                self._topic_index.pop(topic, None)

    def register_handler(self, topic: str, handler: RequestHandler) -> None:
        self._request_handlers[topic] = handler

    def unregister_handler(self, topic: str) -> None:
        self._request_handlers.pop(topic, None)

    def publish(
        self,
        topic: str,
        payload: Optional[Dict[str, object]],
        source: str,
        trace_id: Optional[str] = None,
        sticky: bool = False,
    ) -> MessageEnvelope:
        envelope = self._build_envelope(topic, payload, source, trace_id)
        if sticky:
            self._sticky[topic] = envelope
        for handler in self._copy_handlers(topic):
            self._deliver(topic, handler, envelope)
        return envelope

    def request(
        self,
        topic: str,
        payload: Optional[Dict[str, object]],
        source: str,
        trace_id: Optional[str] = None,
    ) -> Dict[str, object]:
        handler = self._request_handlers.get(topic)
        if handler is None:
            return {"ok": False, "error": "no_handler"}

        envelope = self._build_envelope(topic, payload, source, trace_id, target="request")
        try:
            result = handler(envelope)
        except Exception as exc:
            logger.error("runtime_bus request handler error on %s: %s", topic, exc)
            return {"ok": False, "error": "handler_error"}
        if result is None:
            return {}
        if not isinstance(result, dict):
            return {"ok": False, "error": "invalid_response"}
        return result

    def last_message(self, topic: str) -> Optional[MessageEnvelope]:
        return self._sticky.get(topic)

    def _deliver(self, topic: str, handler: Subscriber, envelope: MessageEnvelope) -> None:
        try:
            handler(envelope)
        except Exception as exc:
            logger.error("runtime_bus publish handler error on %s: %s", topic, exc)

    def _build_envelope(
        self,
        topic: str,
        payload: Optional[Dict[str, object]],
        source: str,
        trace_id: Optional[str],
        target: Optional[str] = None,
    ) -> MessageEnvelope:
        trace = trace_id or str(uuid.uuid4())
        body = payload if isinstance(payload, dict) else {}
        return MessageEnvelope(
            msg_id=str(uuid.uuid4()),
            type=topic,
            timestamp=_iso_timestamp(),
            source=source,
            payload=dict(body),
            trace_id=trace,
            target=target,
        )

    def _copy_handlers(self, topic: str) -> List[Subscriber]:
        sub_ids = list(self._topic_index.get(topic, ()))
        return [self._subscribers[sid][1] for sid in sub_ids if sid in self._subscribers]

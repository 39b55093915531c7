"""
Event-driven notifications for the interview session.
"""
import logging
import time
from typing import Dict, Any, List, Callable, Optional
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger("events")


class EventType(str, Enum):
    """Types of session events."""
    SESSION_OPENED = "session_opened"
    SESSION_CLOSED = "session_closed"
    QUESTION_CHANGED = "question_changed"
    CAPTURE_STARTED = "capture_started"
    PARTIAL_TRANSCRIPT = "partial_transcript"
    DRAFT_READY = "draft_ready"
    CAPTURE_EMPTY = "capture_empty"
    CAPTURE_ABANDONED = "capture_abandoned"
    ANSWER_CONFIRMED = "answer_confirmed"
    CAPTURE_RETRIED = "capture_retried"
    ANSWER_EDITED = "answer_edited"
    STREAM_FAILED = "stream_failed"
    CAPABILITY_UNAVAILABLE = "capability_unavailable"
    ANSWER_SAVED = "answer_saved"
    INTERVIEW_STARTED = "interview_started"
    INTERVIEW_COMPLETED = "interview_completed"
    ERROR_OCCURRED = "error_occurred"


@dataclass
class SessionEvent:
    """A notification raised by the capture state machine or progress tracker."""
    event_type: EventType
    interview_id: str
    question_index: Optional[int] = None
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)


EventHandler = Callable[[SessionEvent], None]


class SessionEventBus:
    """
    Synchronous publish/subscribe between session components and front-ends.

    Handlers run on the thread that emits, which is always the control
    thread. A handler that raises is logged and skipped so that a broken
    listener never aborts a state transition.
    """

    def __init__(self):
        self._by_type: Dict[EventType, List[EventHandler]] = {}
        self._wildcard: List[EventHandler] = []

    def subscribe(self, event_type: EventType, handler: EventHandler) -> None:
        self._by_type.setdefault(event_type, []).append(handler)
        logger.debug("Handler %r listening for %s", handler, event_type.value)

    def subscribe_all(self, handler: EventHandler) -> None:
        """Receive every event, after the type-specific handlers."""
        self._wildcard.append(handler)

    def unsubscribe(self, event_type: EventType, handler: EventHandler) -> None:
        handlers = self._by_type.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)
        else:
            logger.warning("No such handler for %s", event_type.value)

    def emit(self, event: SessionEvent) -> None:
        logger.debug("%s (interview %s, question %s)",
                     event.event_type.value, event.interview_id, event.question_index)
        for handler in self._by_type.get(event.event_type, []) + self._wildcard:
            try:
                handler(event)
            except Exception:
                logger.exception("Handler %r failed on %s", handler, event.event_type.value)

    def clear_handlers(self) -> None:
        self._by_type.clear()
        self._wildcard.clear()


class EventLogger:
    """Writes one log line per session event; transcript text only at DEBUG."""

    def __init__(self, log_level: int = logging.INFO):
        self.logger = logging.getLogger("session_events")
        self.logger.setLevel(log_level)

    def handle_event(self, event: SessionEvent) -> None:
        if event.event_type == EventType.PARTIAL_TRANSCRIPT:
            self.logger.debug("%s interview=%s data=%s", event.event_type.value, event.interview_id, event.data)
            return
        self.logger.info("%s interview=%s question=%s keys=%s", event.event_type.value,
                         event.interview_id, event.question_index, sorted(event.data))


class SessionMetrics:
    """Collects counters from session events."""

    _COUNTED = {
        EventType.CAPTURE_STARTED: "captures_started",
        EventType.ANSWER_CONFIRMED: "answers_confirmed",
        EventType.CAPTURE_RETRIED: "captures_retried",
        EventType.CAPTURE_EMPTY: "captures_empty",
        EventType.CAPTURE_ABANDONED: "captures_abandoned",
        EventType.STREAM_FAILED: "stream_failures",
        EventType.ANSWER_SAVED: "answers_saved",
        EventType.ERROR_OCCURRED: "errors_occurred",
    }

    def __init__(self):
        self.reset()

    def handle_event(self, event: SessionEvent) -> None:
        name = self._COUNTED.get(event.event_type)
        if name:
            self.counts[name] += 1

    def get_metrics(self) -> Dict[str, int]:
        """Get current metrics snapshot."""
        return dict(self.counts)

    def reset(self) -> None:
        self.counts: Dict[str, int] = {name: 0 for name in self._COUNTED.values()}

import logging

from mockinterview.interview.events import (
    EventLogger, EventType, SessionEvent, SessionEventBus, SessionMetrics,
)


def test_bus_delivers_to_typed_and_global_handlers() -> None:
    bus = SessionEventBus()
    typed, everything = [], []
    bus.subscribe(EventType.ANSWER_SAVED, typed.append)
    bus.subscribe_all(everything.append)

    bus.emit(SessionEvent(EventType.ANSWER_SAVED, "i1", 0))
    bus.emit(SessionEvent(EventType.QUESTION_CHANGED, "i1", 1))

    assert [e.event_type for e in typed] == [EventType.ANSWER_SAVED]
    assert len(everything) == 2


def test_failing_handler_does_not_stop_others() -> None:
    bus = SessionEventBus()
    seen = []

    def broken(event: SessionEvent) -> None:
        raise RuntimeError("handler bug")

    bus.subscribe(EventType.DRAFT_READY, broken)
    bus.subscribe(EventType.DRAFT_READY, seen.append)
    bus.emit(SessionEvent(EventType.DRAFT_READY, "i1", 0))
    assert len(seen) == 1


def test_unsubscribe_and_clear() -> None:
    bus = SessionEventBus()
    seen = []
    bus.subscribe(EventType.CAPTURE_STARTED, seen.append)
    bus.unsubscribe(EventType.CAPTURE_STARTED, seen.append)
    bus.emit(SessionEvent(EventType.CAPTURE_STARTED, "i1", 0))
    assert seen == []

    bus.subscribe_all(seen.append)
    bus.clear_handlers()
    bus.emit(SessionEvent(EventType.CAPTURE_STARTED, "i1", 0))
    assert seen == []


def test_metrics_count_only_tracked_events() -> None:
    metrics = SessionMetrics()
    for event_type in (EventType.CAPTURE_STARTED, EventType.CAPTURE_STARTED,
                       EventType.STREAM_FAILED, EventType.QUESTION_CHANGED):
        metrics.handle_event(SessionEvent(event_type, "i1"))

    counts = metrics.get_metrics()
    assert counts["captures_started"] == 2
    assert counts["stream_failures"] == 1
    assert "question_changed" not in counts

    metrics.reset()
    assert metrics.get_metrics()["captures_started"] == 0


def test_event_logger_keeps_transcript_text_out_of_info(caplog) -> None:
    event_logger = EventLogger()
    with caplog.at_level(logging.INFO, logger="session_events"):
        event_logger.handle_event(SessionEvent(EventType.PARTIAL_TRANSCRIPT, "i1", 0, {"text": "secret words"}))
        event_logger.handle_event(SessionEvent(EventType.ANSWER_CONFIRMED, "i1", 0, {"length": 12}))
    assert "secret words" not in caplog.text
    assert "answer_confirmed" in caplog.text

"""
Interview session controller: wires the capture state machine, the progress
tracker and the timers together behind one set of user intents.
"""
import logging
import queue
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional, Tuple

from .models import CapturePhase, Interview, Response
from .capture import AnswerCaptureStateMachine
from .progress import SessionProgressTracker
from .services import InterviewDirectoryService, ResponsePersistenceService
from .timers import TimerService, TickDriver
from .transcript import TranscriptEvent, TranscriptStreamAdapter
from .events import SessionEventBus, SessionEvent, EventType, EventLogger, SessionMetrics
from .errors import ActionNotAllowed, InterviewSessionError
from ..config import TICK_SECONDS

logger = logging.getLogger("orchestrator")

_TICK = "tick"
_TRANSCRIPT = "transcript"


@dataclass
class SessionView:
    """Everything a front-end needs to draw the current question."""
    title: str
    status: str
    index: int
    count: int
    question_text: str
    difficulty: str
    phase: CapturePhase
    draft_text: str
    live_partial: str
    local_answer: str
    saved_answer: str
    answer_elapsed: int
    session_elapsed: int
    voice_status: str
    submitting: bool
    capture_available: bool
    editing_enabled: bool
    all_answered: bool
    can_complete: bool
    is_last_question: bool
    unsaved: List[int] = field(default_factory=list)


class InterviewSession:
    """
    One open interview.

    Transcript adapters and the tick driver run on their own threads and only
    enqueue work; :meth:`pump` applies it on the caller's thread, and every
    user intent pumps first. Use as a context manager so the microphone,
    the stream and the timers are released on every exit path.
    """

    def __init__(self,
                 directory: InterviewDirectoryService,
                 responses: ResponsePersistenceService,
                 transcriber: TranscriptStreamAdapter,
                 event_bus: Optional[SessionEventBus] = None,
                 tick_interval: float = TICK_SECONDS,
                 auto_tick: bool = True):
        self.directory = directory
        self.responses = responses
        self.transcriber = transcriber

        self.event_bus = event_bus or SessionEventBus()
        self.event_logger = EventLogger()
        self.metrics = SessionMetrics()
        self.event_bus.subscribe_all(self.event_logger.handle_event)
        self.event_bus.subscribe_all(self.metrics.handle_event)

        self.timers = TimerService()
        self.tick_driver = TickDriver(self._enqueue_tick, tick_interval) if auto_tick else None
        self._queue: "queue.Queue[Tuple[str, int, Any]]" = queue.Queue()

        self.tracker: Optional[SessionProgressTracker] = None
        self.capture: Optional[AnswerCaptureStateMachine] = None
        self._closed = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self, interview_id: str) -> Interview:
        """
        Load the interview and start the session clock.

        Raises:
            PersistenceFailure: If the interview cannot be loaded
        """
        if self.tracker is not None:
            raise ActionNotAllowed("Session already open")
        interview = self.directory.get_interview(interview_id)
        self.tracker = SessionProgressTracker(interview, self.directory, self.responses, self.event_bus)
        self.capture = AnswerCaptureStateMachine(
            self.transcriber, self.tracker, self.timers, self.event_bus, deliver=self._enqueue_transcript
        )
        self.timers.open_session()
        if self.tick_driver is not None:
            self.tick_driver.start()

        logger.info("Opened interview %s (%s, %d questions)",
                    interview.id, interview.status.value, len(interview.questions))
        self.event_bus.emit(SessionEvent(
            EventType.SESSION_OPENED, interview.id, 0,
            {"status": interview.status.value, "questions": len(interview.questions)}
        ))
        return interview

    def close(self) -> None:
        """Release the stream, the tick driver and the session clock. Idempotent."""
        if self._closed:
            return
        self._closed = True
        try:
            if self.capture is not None:
                self.capture.abandon()
        finally:
            if self.tick_driver is not None:
                self.tick_driver.stop()
            self.timers.close_session()
            self.transcriber.stop()

        if self.tracker is not None:
            logger.info("Closed interview %s after %ds", self.tracker.interview.id, self.timers.session_elapsed)
            self.event_bus.emit(SessionEvent(
                EventType.SESSION_CLOSED, self.tracker.interview.id, self.tracker.current_index,
                {"session_elapsed": self.timers.session_elapsed, **self.metrics.get_metrics()}
            ))

    exit = close

    def __enter__(self) -> "InterviewSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _require_open(self) -> Tuple[SessionProgressTracker, AnswerCaptureStateMachine]:
        if self.tracker is None or self.capture is None:
            raise ActionNotAllowed("No interview is open")
        if self._closed:
            raise ActionNotAllowed("Session is closed")
        return self.tracker, self.capture

    # ------------------------------------------------------------------
    # Event serialization
    # ------------------------------------------------------------------

    def _enqueue_tick(self) -> None:
        self._queue.put((_TICK, 0, None))

    def _enqueue_transcript(self, attempt: int, event: TranscriptEvent) -> None:
        self._queue.put((_TRANSCRIPT, attempt, event))

    def pump(self) -> int:
        """
        Apply every queued tick and transcript event, in arrival order, then
        settle a manual stop whose adapter has gone quiet.
        """
        applied = 0
        while True:
            try:
                kind, attempt, payload = self._queue.get_nowait()
            except queue.Empty:
                break
            if self._closed:
                continue
            if kind == _TICK:
                self._apply_tick()
            elif self.capture is not None:
                self.capture.handle_event(attempt, payload)
            applied += 1
        if self.capture is not None and not self._closed:
            self.capture.settle_stop()
        return applied

    def _apply_tick(self) -> None:
        self.timers.tick()
        if self.capture is not None:
            self.capture.settle_stop(ticked=True)

    def tick(self, count: int = 1) -> None:
        """Advance the timers by hand (control thread only)."""
        self.pump()
        for _ in range(count):
            self._apply_tick()

    # ------------------------------------------------------------------
    # User intents
    # ------------------------------------------------------------------

    def _change_question(self, move) -> bool:
        tracker, capture = self._require_open()
        self.pump()
        before = tracker.current_index
        moved = move(tracker)
        if tracker.current_index != before:
            capture.abandon()
            self.event_bus.emit(SessionEvent(
                EventType.QUESTION_CHANGED, tracker.interview.id, tracker.current_index, {"from": before}
            ))
        return moved is not False

    def next_question(self) -> bool:
        return self._change_question(lambda t: t.next_question())

    def previous_question(self) -> bool:
        return self._change_question(lambda t: t.previous_question())

    def go_to(self, index: int) -> bool:
        return self._change_question(lambda t: t.go_to(index))

    def start_capture(self) -> bool:
        _, capture = self._require_open()
        self.pump()
        return capture.start_capture()

    def stop_capture(self) -> None:
        """
        Ask the recognizer to finish. The phase stays Listening until its
        last fragments and terminal event have been pumped.
        """
        _, capture = self._require_open()
        self.pump()
        if capture.phase == CapturePhase.LISTENING:
            capture.stop_capture()
            self.pump()

    def toggle_capture(self) -> bool:
        """Microphone button: stop when listening, start otherwise."""
        _, capture = self._require_open()
        self.pump()
        if capture.phase == CapturePhase.LISTENING:
            capture.stop_capture()
            self.pump()
            return False
        return capture.start_capture()

    def confirm(self) -> str:
        _, capture = self._require_open()
        self.pump()
        return capture.confirm()

    def retry(self) -> None:
        _, capture = self._require_open()
        self.pump()
        capture.retry()

    def edit_answer(self, text: str) -> None:
        _, capture = self._require_open()
        self.pump()
        capture.edit(text)

    @contextmanager
    def _reported(self, operation: str) -> Iterator[None]:
        try:
            yield
        except InterviewSessionError as e:
            tracker = self.tracker
            self.event_bus.emit(SessionEvent(
                EventType.ERROR_OCCURRED, tracker.interview.id, tracker.current_index,
                {"operation": operation, "code": e.code, "message": e.message}
            ))
            raise

    def save(self, index: Optional[int] = None) -> Response:
        tracker, _ = self._require_open()
        self.pump()
        with self._reported("save"):
            return tracker.save(index)

    def complete(self) -> None:
        tracker, capture = self._require_open()
        self.pump()
        with self._reported("complete"):
            tracker.complete()
        capture.abandon()

    def begin(self) -> None:
        tracker, _ = self._require_open()
        self.pump()
        with self._reported("begin"):
            tracker.begin()

    # ------------------------------------------------------------------
    # View
    # ------------------------------------------------------------------

    @property
    def voice_status(self) -> str:
        return self.capture.voice_status if self.capture else ""

    def view(self) -> SessionView:
        tracker, capture = self._require_open()
        self.pump()
        interview = tracker.interview
        question = tracker.current_question
        index = tracker.current_index
        all_answered = tracker.is_all_answered()
        return SessionView(
            title=interview.title,
            status=interview.status.value,
            index=index,
            count=tracker.question_count,
            question_text=question.text if question else "",
            difficulty=question.difficulty if question else "unknown",
            phase=capture.phase,
            draft_text=capture.draft_text,
            live_partial=capture.live_partial,
            local_answer=tracker.local_answer(index) if question else "",
            saved_answer=tracker.saved_answer(index) if question else "",
            answer_elapsed=capture.answer_elapsed,
            session_elapsed=capture.session_elapsed,
            voice_status=capture.voice_status,
            submitting=tracker.submitting,
            capture_available=capture.capture_available,
            editing_enabled=capture.editing_enabled,
            all_answered=all_answered,
            can_complete=interview.is_in_progress and all_answered and tracker.is_last_question,
            is_last_question=tracker.is_last_question,
            unsaved=tracker.unsaved(),
        )

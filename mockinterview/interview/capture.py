"""
Answer capture state machine: turns a live transcript into a confirmed answer.

Phases run Idle -> Listening -> Confirming -> Idle. Transcript events carry the
attempt number they were produced for; anything from an earlier attempt, or
arriving outside Listening, is dropped.
"""
import logging
from typing import Callable, Optional

from .models import CapturePhase
from .draft import AnswerDraftBuffer
from .timers import TimerService
from .progress import SessionProgressTracker
from .transcript import Fragment, StreamEnded, StreamFailed, TranscriptEvent, TranscriptStreamAdapter
from .events import SessionEventBus, SessionEvent, EventType
from .errors import ActionNotAllowed, EmptyAnswer, StreamError, SubmissionInProgress, UnsupportedCapability
from ..config import STOP_GRACE_TICKS

logger = logging.getLogger("capture")

STATUS_LISTENING = "Listening..."
STATUS_FINISHING = "Finishing transcription..."
STATUS_REVIEW = "Review your answer, then confirm or retry."
STATUS_TRY_AGAIN = "Click the microphone to try again."
STATUS_STREAM_ERROR = "Speech recognition error. Check your microphone."
STATUS_CONFIRMED = "Answer confirmed. Continue to the next step."
STATUS_RETRY = "You can start recording again whenever you like."
STATUS_UNSUPPORTED = "Speech recognition is not available; type your answer instead."

Deliver = Callable[[int, TranscriptEvent], None]


class AnswerCaptureStateMachine:
    """
    Owns the capture state for the question currently displayed.

    Dictation and free-text editing write the same slot of the tracker's
    local answer map, so editing is only allowed while Idle.
    """

    def __init__(self,
                 transcriber: TranscriptStreamAdapter,
                 tracker: SessionProgressTracker,
                 timers: TimerService,
                 event_bus: Optional[SessionEventBus] = None,
                 deliver: Optional[Deliver] = None):
        self.transcriber = transcriber
        self.tracker = tracker
        self.timers = timers
        self.event_bus = event_bus or tracker.event_bus
        # Default delivery applies events immediately; the session swaps in its queue
        self._deliver = deliver or self.handle_event
        self._immediate = deliver is None

        self.phase = CapturePhase.IDLE
        self.buffer = AnswerDraftBuffer()
        self.attempt = 0
        self.voice_status = ""
        self.last_error: Optional[str] = None
        self._capture_index: Optional[int] = None
        self._stopping = False
        self._stop_ticks = 0

        self.capture_available = self._check_available()
        if not self.capture_available:
            self.voice_status = STATUS_UNSUPPORTED

    def _check_available(self) -> bool:
        available = bool(self.transcriber.is_available())
        logger.info("Speech capture via %s: %s", self.transcriber.name(),
                    "available" if available else "unavailable")
        return available

    # ------------------------------------------------------------------
    # Read-only view
    # ------------------------------------------------------------------

    @property
    def draft_text(self) -> str:
        return self.buffer.draft_text

    @property
    def live_partial(self) -> str:
        return self.buffer.live_partial

    @property
    def answer_elapsed(self) -> int:
        return self.timers.answer_elapsed

    @property
    def session_elapsed(self) -> int:
        return self.timers.session_elapsed

    @property
    def stopping(self) -> bool:
        """Listening, but a manual stop is waiting for the recognizer to flush."""
        return self._stopping

    @property
    def editing_enabled(self) -> bool:
        return (self.phase == CapturePhase.IDLE
                and self.tracker.interview.is_in_progress
                and not self.tracker.submitting)

    def _emit(self, event_type: EventType, **data) -> None:
        self.event_bus.emit(SessionEvent(
            event_type, self.tracker.interview.id, self.tracker.current_index, data
        ))

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start_capture(self) -> bool:
        """
        Idle -> Listening.

        Returns False, leaving the phase Idle, when speech capture is
        unavailable; that state is permanent for the session.

        Raises:
            ActionNotAllowed: If a capture is already running or awaiting review
            SubmissionInProgress: While a save or completion is in flight
            InterviewNotInProgress: If the interview is not editable
        """
        if self.phase != CapturePhase.IDLE:
            raise ActionNotAllowed(f"Cannot start capturing while {self.phase.value}")
        self.tracker.require_in_progress()
        if self.tracker.submitting:
            raise SubmissionInProgress()
        if not self.capture_available:
            self.voice_status = STATUS_UNSUPPORTED
            return False

        self.buffer.reset()
        self.timers.restart_answer()
        self.attempt += 1
        self.last_error = None
        self._capture_index = self.tracker.current_index
        self.phase = CapturePhase.LISTENING
        self.voice_status = STATUS_LISTENING
        attempt = self.attempt

        try:
            self.transcriber.start(lambda event: self._deliver(attempt, event))
        except UnsupportedCapability as e:
            logger.warning("Speech capture unsupported: %s", e.message)
            self._reset_to_idle()
            self.capture_available = False
            self.voice_status = STATUS_UNSUPPORTED
            self._emit(EventType.CAPABILITY_UNAVAILABLE, reason=e.message)
            return False
        except StreamError as e:
            logger.warning("Transcript stream failed to start: %s", e.reason)
            self._finish_listening(failure=e.reason)
            return True

        logger.info("Capture attempt %d started for question %d", attempt, self._capture_index + 1)
        self._emit(EventType.CAPTURE_STARTED, attempt=attempt)
        return True

    def handle_event(self, attempt: int, event: TranscriptEvent) -> None:
        """Apply one transcript event. Must run on the control thread."""
        if attempt != self.attempt or self.phase != CapturePhase.LISTENING:
            logger.debug("Dropping %s from attempt %d (current %d, %s)",
                         type(event).__name__, attempt, self.attempt, self.phase.value)
            return

        if isinstance(event, Fragment):
            self.buffer.append(event)
            if event.is_final:
                logger.debug("Final fragment: %r", event.text)
            elif not self._stopping:
                self.voice_status = f"Listening: {event.text}"
                self._emit(EventType.PARTIAL_TRANSCRIPT, text=event.text)
        elif isinstance(event, StreamFailed):
            logger.warning("Transcript stream error: %s", event.reason)
            self._finish_listening(failure=event.reason)
        elif isinstance(event, StreamEnded):
            self._finish_listening()

    def stop_capture(self) -> None:
        """
        Manual stop: ask the adapter to finish and wait for its terminal event.

        Recognizers deliver their last final fragment after the audio stops,
        so the Confirming/Idle decision is left to the StreamEnded or
        StreamFailed that follows. :meth:`settle_stop` forces it once the
        adapter has gone quiet or the grace ticks run out.
        """
        if self.phase != CapturePhase.LISTENING:
            raise ActionNotAllowed("Not listening")
        if self._stopping:
            return
        self._stopping = True
        self._stop_ticks = 0
        self.voice_status = STATUS_FINISHING
        self.timers.pause_answer()
        logger.info("Stop requested for capture attempt %d", self.attempt)
        self.transcriber.stop()
        if self._immediate:
            self.settle_stop()

    def settle_stop(self, ticked: bool = False) -> bool:
        """
        Resolve a pending manual stop when the adapter is no longer streaming
        or ``STOP_GRACE_TICKS`` ticks have passed. Returns True if it did.
        """
        if self.phase != CapturePhase.LISTENING or not self._stopping:
            return False
        if ticked:
            self._stop_ticks += 1
        if self.transcriber.is_streaming() and self._stop_ticks < STOP_GRACE_TICKS:
            return False
        logger.info("Capture attempt %d settled after stop (%d ticks)", self.attempt, self._stop_ticks)
        self._finish_listening()
        return True

    def _finish_listening(self, failure: Optional[str] = None) -> None:
        if not self._stopping:
            self.transcriber.stop()
        self._stopping = False
        self.timers.pause_answer()
        self.buffer.live_partial = ""

        if failure is not None:
            self.last_error = failure
            self._emit(EventType.STREAM_FAILED, reason=failure)

        if self.buffer.is_empty():
            self.phase = CapturePhase.IDLE
            self.buffer.reset()
            self._capture_index = None
            self.voice_status = STATUS_STREAM_ERROR if failure is not None else STATUS_TRY_AGAIN
            logger.info("Capture attempt %d ended with nothing to review", self.attempt)
            self._emit(EventType.CAPTURE_EMPTY, attempt=self.attempt)
            return

        self.phase = CapturePhase.CONFIRMING
        self.voice_status = STATUS_REVIEW
        logger.info("Capture attempt %d ready for review", self.attempt)
        self._emit(EventType.DRAFT_READY, attempt=self.attempt, draft=self.buffer.snapshot())

    def confirm(self) -> str:
        """Confirming -> Idle, writing the draft into the local answer map."""
        if self.phase != CapturePhase.CONFIRMING:
            raise ActionNotAllowed("Nothing to confirm")
        text = self.buffer.snapshot()
        if not text:
            raise EmptyAnswer("The captured answer is empty")

        index = self._capture_index
        self.tracker.set_local_answer(index, text)
        self._reset_to_idle()
        self.voice_status = STATUS_CONFIRMED
        logger.info("Answer confirmed for question %d", index + 1)
        self._emit(EventType.ANSWER_CONFIRMED, length=len(text))
        return text

    def retry(self) -> None:
        """Confirming -> Idle, discarding the draft."""
        if self.phase != CapturePhase.CONFIRMING:
            raise ActionNotAllowed("Nothing to retry")
        self._reset_to_idle()
        self.voice_status = STATUS_RETRY
        self._emit(EventType.CAPTURE_RETRIED, attempt=self.attempt)

    def edit(self, text: str) -> None:
        """Free-text edit of the current question's local answer."""
        if self.phase != CapturePhase.IDLE:
            raise ActionNotAllowed(f"Editing is disabled while {self.phase.value}")
        self.tracker.require_in_progress()
        if self.tracker.submitting:
            raise SubmissionInProgress()
        self.tracker.set_local_answer(self.tracker.current_index, text)
        self._emit(EventType.ANSWER_EDITED, length=len(text))

    def abandon(self) -> bool:
        """
        Drop any capture in progress without touching the local answer map.

        Used when the displayed question changes and on teardown.
        """
        if self.phase == CapturePhase.IDLE:
            return False
        was = self.phase
        if was == CapturePhase.LISTENING:
            self.transcriber.stop()
        self._reset_to_idle()
        self.voice_status = "" if self.capture_available else STATUS_UNSUPPORTED
        logger.info("Capture attempt %d abandoned while %s", self.attempt, was.value)
        self._emit(EventType.CAPTURE_ABANDONED, attempt=self.attempt, phase=was.value)
        return True

    def _reset_to_idle(self) -> None:
        self.buffer.reset()
        self.timers.clear_answer()
        self.phase = CapturePhase.IDLE
        self._capture_index = None
        self._stopping = False

"""
Testing infrastructure with mock services for the interview session.
"""
import copy
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from .models import Interview, InterviewStatus, Question, Response
from .errors import PersistenceFailure
from .services import InterviewDirectoryService, ResponsePersistenceService
from .transcript import EventSink, Fragment, StreamEnded, StreamFailed, TranscriptStreamAdapter
from .orchestrator import InterviewSession


class ScriptedTranscriber(TranscriptStreamAdapter):
    """
    Transcriber driven by the test instead of a microphone.

    ``start()`` only records the sink; the test then calls :meth:`say`,
    :meth:`partial`, :meth:`end` or :meth:`fail` to push events through it.

    ``final_on_stop`` makes ``stop()`` flush that text as a final fragment
    followed by StreamEnded, the way a cloud recognizer finishes. With
    ``lingers`` the stream stays open after ``stop()`` until the test ends it.
    """

    def __init__(self, available: bool = True, start_error: Optional[Exception] = None,
                 final_on_stop: Optional[str] = None, lingers: bool = False):
        self.available = available
        self.start_error = start_error
        self.final_on_stop = final_on_stop
        self.lingers = lingers
        self.emit: Optional[EventSink] = None
        self.sinks: List[EventSink] = []
        self.start_count = 0
        self.stop_count = 0
        self.streaming = False

    def name(self) -> str:
        return "scripted"

    def is_available(self) -> bool:
        return self.available

    def is_streaming(self) -> bool:
        return self.streaming

    def start(self, emit: EventSink) -> None:
        self.start_count += 1
        if self.start_error is not None:
            raise self.start_error
        self.emit = emit
        self.sinks.append(emit)
        self.streaming = True

    def stop(self) -> None:
        self.stop_count += 1
        if not self.streaming:
            return
        if self.final_on_stop is not None:
            self.say(self.final_on_stop)
            self.end()
        elif not self.lingers:
            self.streaming = False

    def _push(self, event) -> None:
        if self.emit is None:
            raise AssertionError("Transcriber was never started")
        self.emit(event)

    def say(self, text: str) -> None:
        """Push a final fragment."""
        self._push(Fragment(text=text, is_final=True))

    def partial(self, text: str) -> None:
        self._push(Fragment(text=text, is_final=False))

    def end(self) -> None:
        self.streaming = False
        self._push(StreamEnded())

    def fail(self, reason: str = "network") -> None:
        self.streaming = False
        self._push(StreamFailed(reason=reason))


class InMemoryDirectoryService(InterviewDirectoryService):
    """Mock directory holding interviews in memory."""

    def __init__(self, interviews: Optional[List[Interview]] = None):
        # Don't call super().__init__ to avoid requiring a REST client
        self.interviews: Dict[str, Interview] = {}
        self.calls: List[Tuple[str, Any]] = []
        self.failures: Dict[str, PersistenceFailure] = {}
        for interview in interviews or []:
            self.add(interview)

    def add(self, interview: Interview) -> None:
        self.interviews[interview.id] = copy.deepcopy(interview)

    def fail_on(self, operation: str, message: str = "backend unavailable", status_code: int = 503) -> None:
        """Make every call to ``operation`` raise until :meth:`recover`."""
        self.failures[operation] = PersistenceFailure(operation, message, status_code=status_code)

    def recover(self) -> None:
        self.failures.clear()

    def _check(self, operation: str) -> None:
        if operation in self.failures:
            raise self.failures[operation]

    def get_interview(self, interview_id: str) -> Interview:
        self.calls.append(("get_interview", interview_id))
        self._check("get_interview")
        if interview_id not in self.interviews:
            raise PersistenceFailure("get_interview", "Interview not found", status_code=404)
        return copy.deepcopy(self.interviews[interview_id])

    def update_status(self, interview_id: str, status: InterviewStatus) -> None:
        self.calls.append(("update_status", (interview_id, status)))
        self._check("update_status")
        self.interviews[interview_id].status = status

    def list_interviews(self) -> List[Dict[str, Any]]:
        self.calls.append(("list_interviews", None))
        self._check("list_interviews")
        return [
            {"_id": i.id, "title": i.title, "status": i.status.value, "questions": len(i.questions)}
            for i in self.interviews.values()
        ]

    def count(self, operation: str) -> int:
        return sum(1 for name, _ in self.calls if name == operation)


class RecordingResponseService(ResponsePersistenceService):
    """
    Mock response service that writes straight into an
    :class:`InMemoryDirectoryService`, so the refresh after a save sees it.
    """

    def __init__(self, directory: InMemoryDirectoryService,
                 on_submit: Optional[Callable[[str, str, str], None]] = None):
        # Don't call super().__init__ to avoid requiring a REST client
        self.directory = directory
        self.on_submit = on_submit
        self.submissions: List[Tuple[str, str, str]] = []
        self.failure: Optional[PersistenceFailure] = None

    def fail_with(self, message: str = "backend unavailable", status_code: int = 500) -> None:
        self.failure = PersistenceFailure("submit_response", message, status_code=status_code)

    def recover(self) -> None:
        self.failure = None

    def submit_response(self, question_id: str, interview_id: str, text: str) -> Response:
        self.submissions.append((question_id, interview_id, text))
        if self.on_submit is not None:
            self.on_submit(question_id, interview_id, text)
        if self.failure is not None:
            raise self.failure

        response = Response(text=text, id=f"resp-{len(self.submissions)}")
        for question in self.directory.interviews[interview_id].questions:
            if question.id == question_id:
                question.response = copy.deepcopy(response)
        return response


def build_test_interview(answers: Optional[Dict[int, str]] = None,
                         status: InterviewStatus = InterviewStatus.IN_PROGRESS,
                         question_texts: Optional[List[str]] = None,
                         interview_id: str = "int-1") -> Interview:
    """Create an interview with saved responses for the given indices."""
    if question_texts is None:
        question_texts = [
            "Tell me about yourself.",
            "Describe a project you are proud of.",
            "Where do you see yourself in five years?",
        ]
    answers = answers or {}
    questions = [
        Question(
            id=f"q{i + 1}",
            text=text,
            difficulty="medium",
            response=Response(text=answers[i], id=f"saved-{i + 1}") if i in answers else None,
        )
        for i, text in enumerate(question_texts)
    ]
    return Interview(
        id=interview_id,
        title="Backend Developer Mock Interview",
        status=status,
        questions=questions,
        profession="Backend Developer",
        difficulty="medium",
    )


@dataclass
class MockSessionSetup:
    session: InterviewSession
    directory: InMemoryDirectoryService
    responses: RecordingResponseService
    transcriber: ScriptedTranscriber


def create_mock_session(interview: Optional[Interview] = None,
                        transcriber: Optional[ScriptedTranscriber] = None,
                        open_session: bool = True) -> MockSessionSetup:
    """
    Create a session over in-memory services.

    Ticks are manual (``session.tick()``) so timer values are deterministic.
    """
    interview = interview or build_test_interview()
    directory = InMemoryDirectoryService([interview])
    responses = RecordingResponseService(directory)
    transcriber = transcriber or ScriptedTranscriber()
    session = InterviewSession(directory, responses, transcriber, auto_tick=False)
    if open_session:
        session.open(interview.id)
    return MockSessionSetup(session, directory, responses, transcriber)


__all__ = [
    "ScriptedTranscriber",
    "InMemoryDirectoryService",
    "RecordingResponseService",
    "build_test_interview",
    "MockSessionSetup",
    "create_mock_session",
]

"""
Per-question answer bookkeeping and completion gating for one interview.
"""
import logging
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from .models import Interview, InterviewStatus, Question, Response
from .services import InterviewDirectoryService, ResponsePersistenceService
from .events import SessionEventBus, SessionEvent, EventType
from .errors import (
    ActionNotAllowed, EmptyAnswer, IncompleteAnswers, InterviewNotCompletable, InterviewNotInProgress,
    SubmissionInProgress,
)

logger = logging.getLogger("progress")


class SessionProgressTracker:
    """
    Owns the current question index and the local answer map.

    ``local_answers`` maps question index to the text the user currently
    holds for it, typed or confirmed from dictation, saved or not. The
    interview's Responses are the persisted side; both count towards
    "answered". Navigation is never blocked; only completion is gated.
    """

    def __init__(self,
                 interview: Interview,
                 directory: InterviewDirectoryService,
                 responses: ResponsePersistenceService,
                 event_bus: Optional[SessionEventBus] = None):
        self.directory = directory
        self.responses = responses
        self.event_bus = event_bus or SessionEventBus()
        self.current_index = 0
        self.local_answers: Dict[int, str] = {}
        self._submitting = False
        self._interview = interview
        self._seed_from_responses()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def interview(self) -> Interview:
        return self._interview

    @property
    def questions(self) -> List[Question]:
        return self._interview.questions

    @property
    def question_count(self) -> int:
        return len(self._interview.questions)

    @property
    def current_question(self) -> Optional[Question]:
        if 0 <= self.current_index < self.question_count:
            return self._interview.questions[self.current_index]
        return None

    @property
    def submitting(self) -> bool:
        return self._submitting

    @property
    def is_last_question(self) -> bool:
        return self.current_index == self.question_count - 1

    def _seed_from_responses(self) -> None:
        # Only an in-progress interview is editable, so only it gets local copies
        self.local_answers = {}
        if not self._interview.is_in_progress:
            return
        for idx, question in enumerate(self._interview.questions):
            if question.saved_text:
                self.local_answers[idx] = question.saved_text

    def local_answer(self, index: int) -> str:
        return self.local_answers.get(index, "")

    def saved_answer(self, index: int) -> str:
        return self._interview.questions[index].saved_text

    def set_local_answer(self, index: int, text: str) -> None:
        self._check_index(index)
        if text:
            self.local_answers[index] = text
        else:
            self.local_answers.pop(index, None)

    def is_answered(self, index: int) -> bool:
        return bool(self.local_answer(index).strip() or self.saved_answer(index).strip())

    def unanswered(self) -> List[int]:
        return [i for i in range(self.question_count) if not self.is_answered(i)]

    def is_all_answered(self) -> bool:
        return not self.unanswered()

    def unsaved(self) -> List[int]:
        """Indices whose local text differs from what the backend holds."""
        return [
            i for i, text in sorted(self.local_answers.items())
            if text.strip() and text.strip() != self.saved_answer(i).strip()
        ]

    def require_in_progress(self) -> None:
        if not self._interview.is_in_progress:
            raise InterviewNotInProgress(self._interview.status.value)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self.question_count:
            raise IndexError(f"Question index {index} out of range (0..{self.question_count - 1})")

    def go_to(self, index: int) -> None:
        self._check_index(index)
        self.current_index = index

    def next_question(self) -> bool:
        if self.current_index + 1 >= self.question_count:
            return False
        self.current_index += 1
        return True

    def previous_question(self) -> bool:
        if self.current_index == 0:
            return False
        self.current_index -= 1
        return True

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    @contextmanager
    def _submission(self) -> Iterator[None]:
        if self._submitting:
            raise SubmissionInProgress()
        self._submitting = True
        try:
            yield
        finally:
            self._submitting = False

    def refresh(self) -> Interview:
        """Re-fetch the interview; the backend is the source of truth."""
        self._interview = self.directory.get_interview(self._interview.id)
        return self._interview

    def save(self, index: Optional[int] = None) -> Response:
        """
        Persist the local answer for ``index`` (default: current question).

        Raises:
            SubmissionInProgress: If another save/complete is in flight
            InterviewNotInProgress: If the interview is not editable
            EmptyAnswer: If there is no local text; no call is made
            PersistenceFailure: If the write or the refresh fails
        """
        if index is None:
            index = self.current_index
        self._check_index(index)
        with self._submission():
            self.require_in_progress()
            text = self.local_answer(index).strip()
            if not text:
                raise EmptyAnswer("Enter an answer before saving")

            question = self._interview.questions[index]
            response = self.responses.submit_response(question.id, self._interview.id, text)
            self.refresh()

            saved = self.saved_answer(index)
            if saved:
                self.local_answers[index] = saved
            logger.info("Saved answer for question %d of interview %s", index + 1, self._interview.id)

        self.event_bus.emit(SessionEvent(
            EventType.ANSWER_SAVED, self._interview.id, index, {"length": len(text)}
        ))
        return response

    def complete(self) -> None:
        """
        Mark the interview completed.

        Raises:
            SubmissionInProgress: If another save/complete is in flight
            IncompleteAnswers: If any question has neither local nor saved text,
                or (as InterviewNotCompletable) the interview is not in progress
            PersistenceFailure: If the status update fails
        """
        with self._submission():
            if not self._interview.is_in_progress:
                raise InterviewNotCompletable(self._interview.status.value)
            missing = self.unanswered()
            if missing:
                raise IncompleteAnswers(missing)

            pending = self.unsaved()
            if pending:
                logger.warning("Completing with unsaved local answers for questions %s",
                               [i + 1 for i in pending])
            self.directory.update_status(self._interview.id, InterviewStatus.COMPLETED)
            self.refresh()

        self.event_bus.emit(SessionEvent(
            EventType.INTERVIEW_COMPLETED, self._interview.id, None, {"questions": self.question_count}
        ))

    def begin(self) -> None:
        """Move a scheduled interview to in progress."""
        with self._submission():
            if self._interview.status != InterviewStatus.SCHEDULED:
                raise ActionNotAllowed(f"Only a scheduled interview can be started (status: {self._interview.status.value})")
            self.directory.update_status(self._interview.id, InterviewStatus.IN_PROGRESS)
            self.refresh()
            self._seed_from_responses()

        self.event_bus.emit(SessionEvent(EventType.INTERVIEW_STARTED, self._interview.id))

"""
Error taxonomy for the answer capture controller.
"""
from typing import List, Optional


class InterviewSessionError(RuntimeError):
    code = "SESSION_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnsupportedCapability(InterviewSessionError):
    """No speech-to-text available on this host; answers must be typed."""
    code = "UNSUPPORTED_CAPABILITY"


class StreamError(InterviewSessionError):
    """Transient transcription failure. Retry by capturing again."""
    code = "STREAM_ERROR"

    def __init__(self, reason: str):
        super().__init__(f"Transcript stream failed: {reason}")
        self.reason = reason


class EmptyAnswer(InterviewSessionError):
    code = "EMPTY_ANSWER"


class IncompleteAnswers(InterviewSessionError):
    code = "INCOMPLETE_ANSWERS"

    def __init__(self, unanswered: List[int]):
        positions = ", ".join(str(i + 1) for i in unanswered)
        super().__init__(f"Questions still unanswered: {positions}")
        self.unanswered = list(unanswered)


class PersistenceFailure(InterviewSessionError):
    """A save or status update did not go through. Local state is untouched."""
    code = "PERSISTENCE_FAILURE"

    def __init__(self, operation: str, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.operation = operation
        self.status_code = status_code


class ActionNotAllowed(InterviewSessionError):
    code = "ACTION_NOT_ALLOWED"


class SubmissionInProgress(ActionNotAllowed):
    code = "SUBMISSION_IN_PROGRESS"

    def __init__(self):
        super().__init__("Another save or completion is still in flight")


class InterviewNotInProgress(ActionNotAllowed):
    code = "INTERVIEW_NOT_IN_PROGRESS"

    def __init__(self, status: str):
        super().__init__(f"Interview is {status}, not in progress")
        self.status = status


class InterviewNotCompletable(IncompleteAnswers):
    """Completion refused because the interview is not in progress."""

    def __init__(self, status: str):
        InterviewSessionError.__init__(self, f"Interview is {status}; only an interview in progress can be completed")
        self.unanswered = []
        self.status = status

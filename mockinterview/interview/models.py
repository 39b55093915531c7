"""
Data models for the interview session.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from ..config import STATUS_SCHEDULED, STATUS_IN_PROGRESS, STATUS_COMPLETED


class InterviewStatus(str, Enum):
    """Lifecycle status owned by the interview directory."""
    SCHEDULED = STATUS_SCHEDULED
    IN_PROGRESS = STATUS_IN_PROGRESS
    COMPLETED = STATUS_COMPLETED


class CapturePhase(str, Enum):
    """Phase of the answer capture state machine."""
    IDLE = "idle"
    LISTENING = "listening"
    CONFIRMING = "confirming"


@dataclass
class Response:
    """Latest persisted answer for a question."""
    text: str
    id: Optional[str] = None


@dataclass
class Question:
    """A single interview question with its latest saved response, if any."""
    id: str
    text: str
    difficulty: str = "unknown"
    response: Optional[Response] = None

    @property
    def saved_text(self) -> str:
        return self.response.text if self.response else ""


@dataclass
class Interview:
    """Interview as read from the directory service."""
    id: str
    title: str
    status: InterviewStatus
    questions: List[Question] = field(default_factory=list)
    profession: str = ""
    difficulty: str = ""

    @property
    def is_in_progress(self) -> bool:
        return self.status == InterviewStatus.IN_PROGRESS

    @property
    def is_completed(self) -> bool:
        return self.status == InterviewStatus.COMPLETED

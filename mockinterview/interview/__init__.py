"""Interview session components.

This module contains the logic for answering a mock interview: capturing
spoken answers, tracking per-question progress and persisting responses.
"""

# Session controller
from .orchestrator import InterviewSession, SessionView

# Data models
from .models import Interview, InterviewStatus, Question, Response, CapturePhase

# Wire schemas
from .schemas import parse_interview_payload, parse_response_payload

# Errors
from .errors import (
    InterviewSessionError, UnsupportedCapability, StreamError, EmptyAnswer,
    IncompleteAnswers, PersistenceFailure, ActionNotAllowed,
    SubmissionInProgress, InterviewNotInProgress, InterviewNotCompletable
)

# Capture components
from .transcript import (
    Fragment, StreamEnded, StreamFailed, TranscriptEvent,
    TranscriptStreamAdapter, UnavailableTranscriber
)
from .draft import AnswerDraftBuffer
from .timers import TimerService, TickDriver
from .capture import AnswerCaptureStateMachine
from .progress import SessionProgressTracker

# Service classes
from .services import InterviewDirectoryService, ResponsePersistenceService

# Event system
from .events import SessionEventBus, SessionEvent, EventType, EventLogger, SessionMetrics

# Terminal rendering
from .display import format_time, progress_percent, render_view

__all__ = [
    # Session
    "InterviewSession", "SessionView",

    # Data models
    "Interview", "InterviewStatus", "Question", "Response", "CapturePhase",
    "parse_interview_payload", "parse_response_payload",

    # Errors
    "InterviewSessionError", "UnsupportedCapability", "StreamError", "EmptyAnswer",
    "IncompleteAnswers", "PersistenceFailure", "ActionNotAllowed",
    "SubmissionInProgress", "InterviewNotInProgress", "InterviewNotCompletable",

    # Capture
    "Fragment", "StreamEnded", "StreamFailed", "TranscriptEvent",
    "TranscriptStreamAdapter", "UnavailableTranscriber",
    "AnswerDraftBuffer", "TimerService", "TickDriver",
    "AnswerCaptureStateMachine", "SessionProgressTracker",

    # Services
    "InterviewDirectoryService", "ResponsePersistenceService",

    # Events
    "SessionEventBus", "SessionEvent", "EventType", "EventLogger", "SessionMetrics",

    # Display
    "format_time", "progress_percent", "render_view",
]

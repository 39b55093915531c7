"""
mockinterview: answer capture client for spoken mock interviews.

Dictate answers through streaming speech recognition, review and confirm them,
and save them question by question to the interview directory service.
"""

__version__ = "1.0.0"

# Main entry points
from .interview.orchestrator import InterviewSession
from .interview.models import Interview, InterviewStatus, Question, Response

__all__ = ["InterviewSession", "Interview", "InterviewStatus", "Question", "Response"]

"""
Service classes for the interview session.

These wrap the REST client so the rest of the session only sees domain
objects and :class:`PersistenceFailure`.
"""
import logging
from typing import List, Dict, Any

import requests
from pydantic import ValidationError

from .models import Interview, InterviewStatus, Response
from .schemas import parse_interview_payload, parse_response_payload
from .errors import PersistenceFailure
from ..infrastructure.api import DirectoryRestClient, DirectoryApiError

logger = logging.getLogger("services")


def _failure(operation: str, error: Exception) -> PersistenceFailure:
    if isinstance(error, DirectoryApiError):
        return PersistenceFailure(operation, error.message, status_code=error.status_code)
    if isinstance(error, ValidationError):
        return PersistenceFailure(operation, f"Unexpected payload from directory: {error.error_count()} error(s)")
    return PersistenceFailure(operation, str(error) or error.__class__.__name__)


class InterviewDirectoryService:
    """Reads interviews and changes their status."""

    def __init__(self, client: DirectoryRestClient):
        self.client = client

    def get_interview(self, interview_id: str) -> Interview:
        """
        Fetch an interview with its questions and latest responses.

        Raises:
            PersistenceFailure: If the backend call fails or returns garbage
        """
        try:
            return parse_interview_payload(self.client.get_interview(interview_id))
        except (DirectoryApiError, requests.RequestException, ValidationError) as e:
            logger.error("Failed to load interview %s: %s", interview_id, e)
            raise _failure("get_interview", e) from e

    def update_status(self, interview_id: str, status: InterviewStatus) -> None:
        try:
            self.client.update_interview_status(interview_id, status.value)
        except (DirectoryApiError, requests.RequestException) as e:
            logger.error("Failed to set interview %s to %s: %s", interview_id, status.value, e)
            raise _failure("update_status", e) from e

    def list_interviews(self) -> List[Dict[str, Any]]:
        try:
            return self.client.list_interviews()
        except (DirectoryApiError, requests.RequestException) as e:
            logger.error("Failed to list interviews: %s", e)
            raise _failure("list_interviews", e) from e


class ResponsePersistenceService:
    """Writes answers. Repeated saves overwrite the latest response."""

    def __init__(self, client: DirectoryRestClient):
        self.client = client

    def submit_response(self, question_id: str, interview_id: str, text: str) -> Response:
        try:
            payload = self.client.submit_response(question_id, interview_id, text)
        except (DirectoryApiError, requests.RequestException) as e:
            logger.error("Failed to save response for question %s: %s", question_id, e)
            raise _failure("submit_response", e) from e
        try:
            return parse_response_payload(payload)
        except ValidationError:
            # The write went through; the refresh that follows is authoritative.
            logger.warning("Unparseable save acknowledgement for question %s", question_id)
            return Response(text=text)

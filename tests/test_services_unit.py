import pytest
import requests

from mockinterview.infrastructure.api import DirectoryApiError
from mockinterview.interview.errors import PersistenceFailure
from mockinterview.interview.models import InterviewStatus
from mockinterview.interview.services import InterviewDirectoryService, ResponsePersistenceService


class _StubClient:
    def __init__(self, **results):
        self.results = results
        self.calls = []

    def _answer(self, name, *args):
        self.calls.append((name, args))
        result = self.results[name]
        if isinstance(result, Exception):
            raise result
        return result

    def get_interview(self, interview_id):
        return self._answer("get_interview", interview_id)

    def update_interview_status(self, interview_id, status):
        return self._answer("update_interview_status", interview_id, status)

    def list_interviews(self):
        return self._answer("list_interviews")

    def submit_response(self, question_id, interview_id, response_text):
        return self._answer("submit_response", question_id, interview_id, response_text)


def test_get_interview_returns_domain_object() -> None:
    client = _StubClient(get_interview={"_id": "i1", "title": "T", "status": "scheduled", "questions": []})
    interview = InterviewDirectoryService(client).get_interview("i1")
    assert interview.status == InterviewStatus.SCHEDULED


def test_api_error_becomes_persistence_failure() -> None:
    client = _StubClient(get_interview=DirectoryApiError(404, "Interview not found"))
    with pytest.raises(PersistenceFailure) as excinfo:
        InterviewDirectoryService(client).get_interview("i1")
    assert excinfo.value.operation == "get_interview"
    assert excinfo.value.status_code == 404
    assert excinfo.value.message == "Interview not found"


def test_malformed_interview_becomes_persistence_failure() -> None:
    client = _StubClient(get_interview={"title": "no id or status"})
    with pytest.raises(PersistenceFailure) as excinfo:
        InterviewDirectoryService(client).get_interview("i1")
    assert excinfo.value.status_code is None


def test_update_status_sends_enum_value() -> None:
    client = _StubClient(update_interview_status={})
    InterviewDirectoryService(client).update_status("i1", InterviewStatus.COMPLETED)
    assert client.calls == [("update_interview_status", ("i1", "completed"))]


def test_connection_error_on_submit_becomes_persistence_failure() -> None:
    client = _StubClient(submit_response=requests.ConnectionError("refused"))
    with pytest.raises(PersistenceFailure) as excinfo:
        ResponsePersistenceService(client).submit_response("q1", "i1", "text")
    assert excinfo.value.operation == "submit_response"


def test_unparseable_acknowledgement_still_counts_as_saved() -> None:
    client = _StubClient(submit_response={"responseText": ["not", "a", "string"]})
    response = ResponsePersistenceService(client).submit_response("q1", "i1", "text")
    assert response.text == "text"

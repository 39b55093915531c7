import pytest
from pydantic import ValidationError

from mockinterview.interview.models import InterviewStatus
from mockinterview.interview.schemas import parse_interview_payload, parse_response_payload


def _document() -> dict:
    return {
        "_id": "664f1c",
        "title": "Data Engineer",
        "status": "in_progress",
        "profession": "Data Engineer",
        "difficulty": "hard",
        "createdAt": "2024-05-23T10:00:00Z",
        "questions": [
            {
                "_id": "q-a",
                "questionText": "What is a data lake?",
                "difficulty": "easy",
                "responses": [
                    {"_id": "r-2", "responseText": "latest"},
                    {"_id": "r-1", "responseText": "older"},
                ],
            },
            {"_id": "q-b", "question": "Explain partitioning."},
            {"_id": "q-c"},
        ],
    }


def test_parse_interview_maps_mongo_document() -> None:
    interview = parse_interview_payload(_document())
    assert interview.id == "664f1c"
    assert interview.status == InterviewStatus.IN_PROGRESS
    assert [q.id for q in interview.questions] == ["q-a", "q-b", "q-c"]


def test_first_response_is_the_latest() -> None:
    question = parse_interview_payload(_document()).questions[0]
    assert question.saved_text == "latest"
    assert question.response.id == "r-2"


def test_question_text_and_difficulty_fallbacks() -> None:
    questions = parse_interview_payload(_document()).questions
    assert questions[1].text == "Explain partitioning."
    assert questions[2].text == "Question not found"
    assert questions[2].difficulty == "unknown"
    assert questions[2].response is None


def test_envelope_is_unwrapped() -> None:
    interview = parse_interview_payload({"interview": _document()})
    assert interview.title == "Data Engineer"


def test_unknown_status_is_rejected() -> None:
    doc = _document()
    doc["status"] = "archived"
    with pytest.raises(ValidationError):
        parse_interview_payload(doc)


def test_parse_response_accepts_envelope_and_empty_body() -> None:
    response = parse_response_payload({"response": {"_id": "r-9", "responseText": "ok"}})
    assert response.id == "r-9"
    assert response.text == "ok"
    assert parse_response_payload({}).text == ""

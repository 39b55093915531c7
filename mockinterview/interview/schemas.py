"""
Wire schemas for interview directory payloads.

The backend returns Mongo-style documents (``_id``, ``questionText``,
``responses[0].responseText``); these models validate them and convert to
the domain dataclasses in :mod:`.models`.
"""
from typing import Any, Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from .models import Interview, InterviewStatus, Question, Response


class ResponsePayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: Optional[str] = Field(default=None, validation_alias=AliasChoices("_id", "id"))
    response_text: str = Field(default="", validation_alias=AliasChoices("responseText", "response_text"))


class QuestionPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    question_text: Optional[str] = Field(default=None, validation_alias=AliasChoices("questionText", "question_text"))
    question: Optional[str] = None
    difficulty: Optional[str] = None
    responses: List[ResponsePayload] = Field(default_factory=list)

    def to_domain(self) -> Question:
        # responses[0] is the latest saved answer
        latest = self.responses[0] if self.responses else None
        return Question(
            id=self.id,
            text=self.question_text or self.question or "Question not found",
            difficulty=self.difficulty or "unknown",
            response=Response(text=latest.response_text, id=latest.id) if latest else None,
        )


class InterviewPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    title: str = ""
    status: Literal["scheduled", "in_progress", "completed"]
    profession: str = ""
    difficulty: str = ""
    questions: List[QuestionPayload] = Field(default_factory=list)

    def to_domain(self) -> Interview:
        return Interview(
            id=self.id,
            title=self.title,
            status=InterviewStatus(self.status),
            questions=[q.to_domain() for q in self.questions],
            profession=self.profession,
            difficulty=self.difficulty,
        )


def parse_interview_payload(data: Dict[str, Any]) -> Interview:
    """
    Parse a directory payload into an Interview.

    Accepts either the bare document or the ``{"interview": {...}}`` envelope.

    Raises:
        ValueError: If the payload does not describe a valid interview
    """
    if isinstance(data, dict) and isinstance(data.get("interview"), dict):
        data = data["interview"]
    return InterviewPayload.model_validate(data).to_domain()


def parse_response_payload(data: Dict[str, Any]) -> Response:
    """Parse a saved response, with or without the ``{"response": {...}}`` envelope."""
    if isinstance(data, dict) and isinstance(data.get("response"), dict):
        data = data["response"]
    payload = ResponsePayload.model_validate(data or {})
    return Response(text=payload.response_text, id=payload.id)

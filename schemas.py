"""Wire models for the learning agent endpoint.

Every request is ``{message, agent_id, request_type}``; every response is an
envelope ``{success, response, error?, details?}`` whose ``response`` payload
depends on the request type. Payloads are parsed into a tagged union so the
default-construction rules live in one place.

Free-text fields coerce scalars to strings and drop anything else, so a
loosely typed explain or evaluate reply still renders. Quiz questions that
cannot be repaired are skipped one by one.
"""

import logging
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationInfo, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from errors import MalformedPayloadError

logger = logging.getLogger(__name__)

RequestType = Literal["explain", "quiz", "evaluate"]


def _as_text(v: Any) -> Optional[str]:
    if isinstance(v, str):
        return v
    if isinstance(v, (int, float)):
        return str(v)
    return None


class AgentRequest(BaseModel):
    message: str
    agent_id: str
    request_type: RequestType


class AgentEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    # anything but a literal true counts as failure
    success: Any = False
    response: Any = None
    error: Optional[Any] = None
    details: Optional[Any] = None


class ExplanationSection(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str = ""
    content: str = ""
    example: Optional[str] = None
    visual_description: Optional[str] = None

    @field_validator("title", "content", mode="before")
    @classmethod
    def _text_or_empty(cls, v: Any) -> str:
        return _as_text(v) or ""

    @field_validator("example", "visual_description", mode="before")
    @classmethod
    def _text_or_none(cls, v: Any) -> Optional[str]:
        return _as_text(v)


class QuizQuestion(BaseModel):
    """One generated multiple-choice question.

    Option keys and the correct answer are normalised to upper-case letters,
    and the correct answer must name one of the options. An answer written
    as ``"B) two"`` is read as ``"B"``.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    question_number: int = 0
    difficulty: str = ""
    question_text: str
    options: Dict[str, str]
    correct_answer: str

    @field_validator("question_number", mode="before")
    @classmethod
    def _null_number(cls, v: Any) -> Any:
        return 0 if v is None else v

    @field_validator("difficulty", mode="before")
    @classmethod
    def _difficulty_text(cls, v: Any) -> str:
        return _as_text(v) or ""

    @field_validator("question_text", mode="before")
    @classmethod
    def _question_text(cls, v: Any) -> Any:
        return _as_text(v) or v

    @field_validator("options", mode="before")
    @classmethod
    def _normalise_options(cls, v: Any) -> Dict[str, str]:
        if not isinstance(v, dict) or not v:
            raise ValueError("question has no options")
        return {str(k).strip().upper(): _as_text(text) or "" for k, text in v.items()}

    @field_validator("correct_answer", mode="before")
    @classmethod
    def _normalise_answer(cls, v: Any, info: ValidationInfo) -> Any:
        text = _as_text(v)
        if text is None:
            return v
        answer = text.strip().upper()
        options = info.data.get("options") or {}
        if answer not in options and answer[:1] in options and not answer[1:2].isalnum():
            return answer[:1]
        return answer

    @model_validator(mode="after")
    def _answer_is_an_option(self) -> "QuizQuestion":
        if self.correct_answer not in self.options:
            raise ValueError(f"correct answer {self.correct_answer!r} is not one of the options")
        return self


# ── Payloads (tagged by request_type) ─────────────────────────────────────────


class ExplainPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    request_type: Literal["explain"] = "explain"
    explanation_sections: Optional[List[ExplanationSection]] = None
    content: Optional[str] = None
    explanation: Optional[str] = None
    example: Optional[str] = None
    visual_description: Optional[str] = None

    @field_validator("explanation_sections", mode="before")
    @classmethod
    def _section_objects(cls, v: Any) -> Optional[List[Any]]:
        if not isinstance(v, list):
            return None
        return [s for s in v if isinstance(s, dict)]

    @field_validator("content", "explanation", "example", "visual_description", mode="before")
    @classmethod
    def _text_or_none(cls, v: Any) -> Optional[str]:
        return _as_text(v)

    def sections(self, topic: str) -> List[ExplanationSection]:
        """Structured sections, or a single section built from the free text."""
        if self.explanation_sections:
            return list(self.explanation_sections)
        return [
            ExplanationSection(
                title=f"Introduction to {topic}",
                content=self.content or self.explanation or "",
                example=self.example or None,
                visual_description=self.visual_description or None,
            )
        ]


class QuizPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    request_type: Literal["quiz"] = "quiz"
    questions: List[QuizQuestion] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _wrap_bare_question(cls, data: Any) -> Any:
        # A lone question object is accepted as a one-question quiz.
        if isinstance(data, dict) and data.get("questions") is None:
            question = {k: v for k, v in data.items() if k not in ("request_type", "questions")}
            return {"request_type": data.get("request_type", "quiz"), "questions": [question]}
        return data

    @field_validator("questions", mode="before")
    @classmethod
    def _usable_questions(cls, v: Any) -> List[QuizQuestion]:
        if not isinstance(v, list):
            return []
        usable = []
        for position, raw in enumerate(v, start=1):
            try:
                usable.append(QuizQuestion.model_validate(raw))
            except PydanticValidationError as e:
                logger.warning("Skipping quiz question %d: %d problem(s)", position, e.error_count())
        return usable

    def numbered(self) -> List[QuizQuestion]:
        """Questions with missing numbers filled in by position (1-based)."""
        return [
            q if q.question_number else q.model_copy(update={"question_number": i})
            for i, q in enumerate(self.questions, start=1)
        ]


class EvaluatePayload(BaseModel):
    # Any correctness verdict the agent sends is ignored.
    model_config = ConfigDict(extra="ignore")

    request_type: Literal["evaluate"] = "evaluate"
    feedback: Optional[str] = None
    explanation: Optional[str] = None

    @field_validator("feedback", "explanation", mode="before")
    @classmethod
    def _text_or_none(cls, v: Any) -> Optional[str]:
        return _as_text(v)

    @property
    def text(self) -> Optional[str]:
        return self.feedback or self.explanation or None


AgentPayload = Annotated[
    Union[ExplainPayload, QuizPayload, EvaluatePayload],
    Field(discriminator="request_type"),
]

_payload_adapter = TypeAdapter(AgentPayload)


def parse_payload(request_type: str, raw: Any) -> Union[ExplainPayload, QuizPayload, EvaluatePayload]:
    """Validate an envelope ``response`` for the given request type.

    Raises MalformedPayloadError when the payload is absent or cannot be
    read as the expected shape.
    """
    if raw is None:
        raise MalformedPayloadError("Agent returned an empty response", request_type=request_type)

    if isinstance(raw, str):
        # Plain text is the whole explanation or the whole feedback.
        if request_type == "explain":
            raw = {"content": raw}
        elif request_type == "evaluate":
            raw = {"feedback": raw}

    if not isinstance(raw, dict):
        raise MalformedPayloadError(
            f"Agent returned an unexpected {request_type} response", request_type=request_type
        )

    try:
        return _payload_adapter.validate_python({**raw, "request_type": request_type})
    except PydanticValidationError as exc:
        raise MalformedPayloadError(
            f"Agent returned an invalid {request_type} response: {exc.error_count()} problem(s)",
            request_type=request_type,
        ) from exc

import logging
from typing import Any, List, Optional, Protocol

from langchain_core.prompts import PromptTemplate

from errors import MalformedPayloadError
from schemas import ExplanationSection, QuizQuestion, RequestType, parse_payload

logger = logging.getLogger(__name__)

QUIZ_LENGTH = 8

EXPLAIN_PROMPT = PromptTemplate.from_template(
    'Explain the concept of "{topic}" in simple language suitable for rural students. '
    "Use rural-context examples like farming, local environment, and daily life. "
    "Provide step-by-step breakdown."
)

QUIZ_PROMPT = PromptTemplate.from_template(
    'Generate {count} multiple choice questions to test understanding of "{topic}". '
    "Include mix of easy, medium, and hard difficulty. "
    "Each question has exactly four options labelled A, B, C and D and one correct answer. "
    "Return questions directly tied to the concept."
)

EVALUATE_PROMPT = PromptTemplate.from_template(
    'Evaluate this answer: Question: "{question}" '
    'Student\'s answer: "{student_answer}" (option). '
    'Correct answer: "{correct_answer}". '
    "Provide detailed feedback explaining why the correct answer is right "
    "and why the student's answer might be wrong."
)


class Agent(Protocol):
    async def send(self, message: str, request_type: RequestType) -> Any: ...


async def explain_concept(agent: Agent, topic: str) -> List[ExplanationSection]:
    """Explanation sections for ``topic``; free text becomes one introduction section."""
    raw = await agent.send(EXPLAIN_PROMPT.format(topic=topic), "explain")
    sections = parse_payload("explain", raw).sections(topic)
    logger.debug("Explanation for %r has %d section(s)", topic, len(sections))
    return sections


async def generate_quiz(agent: Agent, topic: str, count: int = QUIZ_LENGTH) -> List[QuizQuestion]:
    raw = await agent.send(QUIZ_PROMPT.format(topic=topic, count=count), "quiz")
    questions = parse_payload("quiz", raw).numbered()
    if not questions:
        raise MalformedPayloadError("The agent did not return any quiz questions", request_type="quiz")
    if len(questions) != count:
        logger.info("Asked for %d questions on %r, got %d", count, topic, len(questions))
    return questions


async def evaluate_answer(agent: Agent, question: QuizQuestion, student_answer: str) -> Optional[str]:
    """Agent feedback text for the answer, or None when it sent none."""
    message = EVALUATE_PROMPT.format(
        question=question.question_text,
        student_answer=student_answer,
        correct_answer=question.correct_answer,
    )
    raw = await agent.send(message, "evaluate")
    return parse_payload("evaluate", raw).text

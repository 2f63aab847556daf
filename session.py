"""Pure screen transitions for one learning session.

Every function takes a ``LearningState`` and returns a new one; inputs are
never mutated and nothing here performs I/O. The controller wraps these with
the agent calls that feed them.

Screen order::

    TOPICS -> EXPLANATION -> QUIZ -> RESULTS
    RESULTS -> TOPICS | EXPLANATION | QUIZ (retake)
    EXPLANATION -> TOPICS
"""

from dataclasses import replace
from typing import Dict, List, Optional, Tuple

from errors import InvalidTransitionError, MalformedPayloadError, ValidationError
from history import remember_topic
from schemas import ExplanationSection, QuizQuestion
from state import LearningState, MasteryLevel, QuizResult, Screen, StudentAnswer

ADVANCED_THRESHOLD = 7
INTERMEDIATE_THRESHOLD = 5

MASTERY_MESSAGES = {
    MasteryLevel.ADVANCED: (
        "Excellent! You have a solid understanding of this concept. "
        "You can move on to more advanced topics."
    ),
    MasteryLevel.INTERMEDIATE: (
        "Good progress! You understand most aspects of this concept. "
        "Review the explanation to strengthen your knowledge."
    ),
    MasteryLevel.BEGINNER: (
        "You are just starting with this concept. "
        "Retake the quiz after reviewing the explanation for better mastery."
    ),
}


def _require(state: LearningState, *screens: Screen) -> None:
    if state.screen not in screens:
        allowed = ", ".join(s.value for s in screens)
        raise InvalidTransitionError(f"Not allowed on the {state.screen.value} screen (needs {allowed})")


# ── scoring ───────────────────────────────────────────────────────────────────


def mastery_for_score(score: int) -> MasteryLevel:
    """Absolute thresholds, whatever the quiz length."""
    if score >= ADVANCED_THRESHOLD:
        return MasteryLevel.ADVANCED
    if score >= INTERMEDIATE_THRESHOLD:
        return MasteryLevel.INTERMEDIATE
    return MasteryLevel.BEGINNER


def mastery_message(level: MasteryLevel) -> str:
    return MASTERY_MESSAGES[level]


def compute_result(questions: List[QuizQuestion], answers: Dict[int, str]) -> QuizResult:
    breakdown = [
        StudentAnswer(
            question_number=idx + 1,
            student_answer=answer,
            is_correct=0 <= idx < len(questions) and questions[idx].correct_answer == answer,
        )
        for idx, answer in sorted(answers.items())
    ]
    score = sum(1 for a in breakdown if a.is_correct)
    return QuizResult(
        score=score,
        total=len(questions),
        mastery_level=mastery_for_score(score),
        answers=breakdown,
    )


def running_score(state: LearningState) -> int:
    return sum(
        1
        for idx, answer in state.student_answers.items()
        if idx < len(state.questions) and state.questions[idx].correct_answer == answer
    )


def progress_percent(state: LearningState) -> float:
    if not state.questions:
        return 0.0
    return (state.current_question + 1) / len(state.questions) * 100


# ── topic selection / explanation ─────────────────────────────────────────────


def start_topic(state: LearningState, topic: str) -> LearningState:
    """Select a topic and record it in the recent list; the screen stays put."""
    _require(state, Screen.TOPICS)
    topic = topic.strip()
    if not topic:
        raise ValidationError("Please enter a topic to learn")
    return replace(
        state,
        concept=topic,
        recent_topics=remember_topic(state.recent_topics, topic),
        error="",
    )


def apply_explanation(state: LearningState, sections: List[ExplanationSection]) -> LearningState:
    _require(state, Screen.TOPICS)
    return replace(state, explanation_sections=list(sections), screen=Screen.EXPLANATION, error="")


def explanation_failed(state: LearningState, message: str) -> LearningState:
    return replace(state, explanation_sections=[], error=message)


# ── quiz ──────────────────────────────────────────────────────────────────────


def begin_quiz(state: LearningState) -> LearningState:
    """Check a quiz may be requested now; returns the state with the banner cleared."""
    _require(state, Screen.EXPLANATION, Screen.RESULTS)
    if not state.concept:
        raise ValidationError("Choose a topic before starting a quiz")
    return replace(state, error="")


def apply_quiz(state: LearningState, questions: List[QuizQuestion]) -> LearningState:
    _require(state, Screen.EXPLANATION, Screen.RESULTS)
    if not questions:
        raise MalformedPayloadError("The agent did not return any quiz questions", request_type="quiz")
    return replace(
        state,
        questions=list(questions),
        current_question=0,
        selection="",
        student_answers={},
        feedback=None,
        result=None,
        screen=Screen.QUIZ,
        error="",
    )


def select_answer(state: LearningState, letter: str) -> LearningState:
    _require(state, Screen.QUIZ)
    if state.feedback is not None:
        raise InvalidTransitionError("This question has already been answered")
    letter = letter.strip().upper()
    question = state.current
    if question is None or letter not in question.options:
        raise ValidationError(f"{letter or 'That'} is not one of the options")
    return replace(state, selection=letter, error="")


def pending_submission(state: LearningState) -> Tuple[QuizQuestion, str]:
    """The question and chosen letter to evaluate; raises if nothing is chosen."""
    _require(state, Screen.QUIZ)
    question = state.current
    if question is None:
        raise InvalidTransitionError("No active question")
    if not state.selection:
        raise ValidationError("Please select an answer")
    return question, state.selection


def apply_feedback(state: LearningState, feedback_text: Optional[str]) -> LearningState:
    question, letter = pending_submission(state)
    feedback = StudentAnswer(
        question_number=question.question_number,
        student_answer=letter,
        # never taken from the agent
        is_correct=letter == question.correct_answer,
        feedback=feedback_text or f"Correct answer: {question.correct_answer}",
    )
    return replace(state, feedback=feedback, error="")


def advance(state: LearningState) -> LearningState:
    """Commit the shown feedback, then move to the next question or the results."""
    _require(state, Screen.QUIZ)
    if state.feedback is None:
        raise InvalidTransitionError("Submit an answer before moving on")

    answers = {**state.student_answers, state.current_question: state.feedback.student_answer}
    if not state.is_last_question:
        return replace(
            state,
            student_answers=answers,
            current_question=state.current_question + 1,
            selection="",
            feedback=None,
        )
    return replace(
        state,
        student_answers=answers,
        result=compute_result(state.questions, answers),
        selection="",
        feedback=None,
        screen=Screen.RESULTS,
    )


# ── results ───────────────────────────────────────────────────────────────────


def reset_for_retake(state: LearningState) -> LearningState:
    _require(state, Screen.RESULTS)
    return replace(
        state,
        current_question=0,
        selection="",
        student_answers={},
        feedback=None,
        result=None,
        error="",
    )


def review_explanation(state: LearningState) -> LearningState:
    _require(state, Screen.RESULTS)
    return replace(state, screen=Screen.EXPLANATION)


def learn_new_concept(state: LearningState) -> LearningState:
    """Back to topic selection with everything but the recent list cleared."""
    _require(state, Screen.RESULTS, Screen.EXPLANATION)
    return LearningState(recent_topics=list(state.recent_topics))


def request_failed(state: LearningState, message: str) -> LearningState:
    return replace(state, error=message)


def dismiss_error(state: LearningState) -> LearningState:
    return replace(state, error="")

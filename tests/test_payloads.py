"""Agent payload parsing and the prompt-building agent operations."""

import pytest

from conftest import FakeAgent, make_question, make_quiz
from errors import MalformedPayloadError
from learning_agent import evaluate_answer, explain_concept, generate_quiz
from schemas import EvaluatePayload, ExplainPayload, QuizPayload, QuizQuestion, parse_payload


# ── parse_payload ─────────────────────────────────────────────────────────────


def test_payload_type_follows_request_type():
    assert isinstance(parse_payload("explain", {}), ExplainPayload)
    assert isinstance(parse_payload("quiz", make_quiz(2)), QuizPayload)
    assert isinstance(parse_payload("evaluate", {}), EvaluatePayload)


def test_missing_payload_is_malformed():
    with pytest.raises(MalformedPayloadError):
        parse_payload("explain", None)


def test_plain_text_payloads():
    assert parse_payload("explain", "Plants eat light.").sections("Photosynthesis")[0].content == "Plants eat light."
    assert parse_payload("evaluate", "Good try.").text == "Good try."
    with pytest.raises(MalformedPayloadError):
        parse_payload("quiz", "Question 1: ...")


class TestExplain:
    def test_structured_sections_kept_in_order(self):
        payload = parse_payload(
            "explain",
            {"explanation_sections": [{"title": "One", "content": "1"}, {"title": "Two", "content": "2", "example": "e"}]},
        )
        sections = payload.sections("Numbers")
        assert [s.title for s in sections] == ["One", "Two"]
        assert sections[1].example == "e"
        assert sections[0].example is None

    def test_fallback_section_prefers_content(self):
        payload = parse_payload(
            "explain",
            {"content": "main", "explanation": "other", "example": "seeds", "visual_description": "a field"},
        )
        [section] = payload.sections("Growth")
        assert section.title == "Introduction to Growth"
        assert section.content == "main"
        assert section.example == "seeds"
        assert section.visual_description == "a field"

    def test_empty_sections_list_falls_back(self):
        [section] = parse_payload("explain", {"explanation_sections": []}).sections("Verbs")
        assert section.title == "Introduction to Verbs"
        assert section.content == ""

    def test_list_example_is_dropped_not_fatal(self):
        payload = parse_payload("explain", {"content": "Parts of a whole", "example": ["roti", "mango"]})
        [section] = payload.sections("Fractions")
        assert section.content == "Parts of a whole"
        assert section.example is None

    def test_numbers_become_text(self):
        [section] = parse_payload("explain", {"content": 42}).sections("Numbers")
        assert section.content == "42"

    def test_loose_structured_sections(self):
        payload = parse_payload(
            "explain",
            {"explanation_sections": [{"title": None, "content": "A", "example": {"k": "v"}}, "stray text"]},
        )
        [section] = payload.sections("Verbs")
        assert (section.title, section.content, section.example) == ("", "A", None)

    def test_sections_that_are_not_a_list_fall_back(self):
        [section] = parse_payload("explain", {"explanation_sections": "none", "content": "c"}).sections("Verbs")
        assert section.title == "Introduction to Verbs"
        assert section.content == "c"


class TestQuiz:
    def test_bare_question_wrapped(self):
        payload = parse_payload("quiz", make_question(3))
        assert len(payload.questions) == 1
        assert payload.questions[0].question_number == 3

    def test_missing_numbers_filled_by_position(self):
        raw = make_quiz(3)
        for q in raw["questions"]:
            del q["question_number"]
        numbered = parse_payload("quiz", raw).numbered()
        assert [q.question_number for q in numbered] == [1, 2, 3]

    def test_letters_normalised(self):
        raw = make_question(1)
        raw["options"] = {"a": "x", "b": "y"}
        raw["correct_answer"] = " b "
        question = QuizQuestion.model_validate(raw)
        assert list(question.options) == ["A", "B"]
        assert question.correct_answer == "B"

    def test_answer_outside_options_drops_the_question(self):
        raw = make_question(1, correct="E")
        assert parse_payload("quiz", raw).questions == []

    def test_object_without_question_fields(self):
        assert parse_payload("quiz", {"message": "sorry"}).questions == []

    def test_answer_with_option_text_is_read_as_its_letter(self):
        raw = make_quiz(8)
        raw["questions"][-1]["correct_answer"] = "B) two"
        questions = parse_payload("quiz", raw).numbered()
        assert len(questions) == 8
        assert questions[-1].correct_answer == "B"

    def test_word_answer_is_not_read_as_a_letter(self):
        raw = make_question(1)
        raw["correct_answer"] = "Dog"
        assert parse_payload("quiz", raw).questions == []

    def test_invalid_question_dropped_rest_kept(self, caplog):
        raw = make_quiz(8)
        del raw["questions"][2]["options"]
        with caplog.at_level("WARNING", logger="schemas"):
            questions = parse_payload("quiz", raw).numbered()
        assert len(questions) == 7
        assert 3 not in [q.question_number for q in questions]
        assert "Skipping quiz question 3" in caplog.text

    def test_questions_that_are_not_a_list(self):
        assert parse_payload("quiz", {"questions": "coming soon"}).questions == []


def test_evaluate_prefers_feedback_then_explanation():
    assert parse_payload("evaluate", {"feedback": "f", "explanation": "e"}).text == "f"
    assert parse_payload("evaluate", {"explanation": "e"}).text == "e"
    assert parse_payload("evaluate", {"feedback": ""}).text is None


def test_evaluate_non_text_feedback():
    assert parse_payload("evaluate", {"feedback": {"text": "Good"}}).text is None
    assert parse_payload("evaluate", {"feedback": ["Good"], "explanation": "B is two."}).text == "B is two."


# ── agent operations ──────────────────────────────────────────────────────────


async def test_generate_quiz_prompt_and_count():
    agent = FakeAgent(quiz=make_quiz(8))
    questions = await generate_quiz(agent, "Decimals")
    [(request_type, message)] = agent.calls
    assert request_type == "quiz"
    assert "Generate 8 multiple choice questions" in message
    assert '"Decimals"' in message
    assert len(questions) == 8


async def test_generate_quiz_with_no_questions():
    with pytest.raises(MalformedPayloadError):
        await generate_quiz(FakeAgent(quiz={"questions": []}), "Decimals")


async def test_evaluate_prompt_carries_question_and_answers():
    agent = FakeAgent(evaluate={})
    question = QuizQuestion.model_validate(make_question(1, correct="C"))
    assert await evaluate_answer(agent, question, "A") is None
    message = agent.calls[0][1]
    assert '"Question 1?"' in message
    assert 'Student\'s answer: "A"' in message
    assert 'Correct answer: "C"' in message


async def test_explain_concept_sections():
    agent = FakeAgent(explain={"content": "Water goes up, water comes down."})
    [section] = await explain_concept(agent, "Water Cycle")
    assert section.title == "Introduction to Water Cycle"


async def test_generate_quiz_with_only_invalid_questions():
    raw = {"questions": [make_question(1, correct="E"), {"question_text": "No options?", "correct_answer": "A"}]}
    with pytest.raises(MalformedPayloadError):
        await generate_quiz(FakeAgent(quiz=raw), "Decimals")

"""Smoke tests for the Streamlit front-end, driven with a fake agent."""

from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

from conftest import FakeAgent, THREE_SECTIONS, make_quiz
from controller import SessionController
from history import MemoryStore
from state import Screen

APP = str(Path(__file__).resolve().parent.parent / "app.py")


@pytest.fixture
def controller():
    agent = FakeAgent(explain=THREE_SECTIONS, quiz=make_quiz(2), evaluate={"feedback": "Well done."})
    return SessionController(agent, MemoryStore())


def _app(controller):
    at = AppTest.from_file(APP, default_timeout=30)
    at.session_state["controller"] = controller
    return at.run()


def test_topic_screen_lists_suggestions(controller):
    at = _app(controller)
    assert not at.exception
    labels = [b.label for b in at.button]
    assert "Fractions · Math" in labels
    assert "Photosynthesis · Science" in labels


def test_picking_a_topic_shows_explanation(controller):
    at = _app(controller)
    at.button(key="topic_Fractions").click().run()

    assert not at.exception
    assert controller.state.screen == Screen.EXPLANATION
    assert any("Section 3 of 3" in md.value for md in at.markdown)


def test_quiz_to_results(controller):
    at = _app(controller)
    at.button(key="topic_Fractions").click().run()
    at.button(key="start_quiz").click().run()
    assert controller.state.screen == Screen.QUIZ

    for idx in range(2):
        at.button(key=f"opt_{idx}_B").click().run()
        at.button(key="submit_answer").click().run()
        at.button(key="next_question").click().run()

    assert not at.exception
    assert controller.state.screen == Screen.RESULTS
    assert controller.state.result.score == 2
    assert at.metric[0].value == "2/2"


def test_submit_without_choice_shows_error(controller):
    at = _app(controller)
    at.button(key="topic_Fractions").click().run()
    at.button(key="start_quiz").click().run()
    at.button(key="submit_answer").click().run()

    assert [e.value for e in at.error] == ["Please select an answer"]
    assert controller.agent.count("evaluate") == 0


def test_unexpected_failure_is_logged_and_shown(caplog):
    controller = SessionController(FakeAgent(explain=RuntimeError("agent exploded")), MemoryStore())
    at = _app(controller)

    with caplog.at_level("ERROR"):
        at.button(key="topic_Fractions").click().run()

    assert not at.exception
    assert [e.value for e in at.error] == ["⚠️ Error: agent exploded"]
    [record] = [r for r in caplog.records if r.getMessage() == "Session action failed"]
    assert record.exc_info[0] is RuntimeError
    assert not controller.lease.held

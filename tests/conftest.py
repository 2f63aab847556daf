import pytest

from errors import AgentRequestError
from history import MemoryStore


def make_question(n, correct="B", difficulty="easy"):
    return {
        "question_number": n,
        "difficulty": difficulty,
        "question_text": f"Question {n}?",
        "options": {"A": "one", "B": "two", "C": "three", "D": "four"},
        "correct_answer": correct,
    }


def make_quiz(count=8, correct="B"):
    return {"questions": [make_question(i, correct) for i in range(1, count + 1)]}


THREE_SECTIONS = {
    "explanation_sections": [
        {"title": "What is a fraction?", "content": "A part of a whole."},
        {"title": "Sharing rotis", "content": "Cut one roti into four.", "example": "1/4 each"},
        {"title": "Comparing", "content": "Bigger bottom, smaller piece."},
    ]
}


class FakeAgent:
    """In-memory imitation of the agent endpoint.

    ``responses`` maps request_type to a payload, an exception to raise, or a
    list of those consumed in order.
    """

    def __init__(self, **responses):
        self.responses = responses
        self.calls: list[tuple[str, str]] = []

    async def send(self, message, request_type):
        self.calls.append((request_type, message))
        reply = self.responses.get(request_type)
        if isinstance(reply, list):
            reply = reply.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    def count(self, request_type):
        return sum(1 for rt, _ in self.calls if rt == request_type)


@pytest.fixture
def agent():
    return FakeAgent(
        explain=THREE_SECTIONS,
        quiz=make_quiz(),
        evaluate={"feedback": "Nice work."},
    )


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def network_error():
    return AgentRequestError("Connection refused", request_type="explain")

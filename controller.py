"""Session controller: the async shell around the pure transitions in ``session``.

One method per user trigger. Methods that talk to the agent hold the
request lease for the duration of the call, so at most one request is ever
outstanding, and they report failures through ``state.error`` instead of
raising. Only lease conflicts and out-of-order triggers propagate.
"""

import logging
from dataclasses import replace
from typing import Optional

import session
from agent_client import AgentClient
from config import AgentSettings
from errors import AgentRequestError, RequestInFlightError, ValidationError
from history import JsonFileStore, KeyValueStore, load_recent_topics, save_recent_topics
from learning_agent import Agent, QUIZ_LENGTH, evaluate_answer, explain_concept, generate_quiz
from state import LearningState

logger = logging.getLogger(__name__)


class RequestLease:
    """Single-holder token guarding the agent connection."""

    def __init__(self) -> None:
        self._held = False

    @property
    def held(self) -> bool:
        return self._held

    def acquire(self) -> None:
        if self._held:
            raise RequestInFlightError()
        self._held = True

    def release(self) -> None:
        self._held = False

    async def __aenter__(self) -> "RequestLease":
        self.acquire()
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.release()


class SessionController:
    def __init__(self, agent: Agent, store: KeyValueStore, *, quiz_length: int = QUIZ_LENGTH) -> None:
        self.agent = agent
        self.store = store
        self.quiz_length = quiz_length
        self.lease = RequestLease()
        self.state = LearningState(recent_topics=load_recent_topics(store))

    def _set_loading(self, loading: bool) -> None:
        self.state = replace(self.state, loading=loading)

    def _save_history(self) -> None:
        try:
            save_recent_topics(self.store, self.state.recent_topics)
        except OSError as e:
            logger.warning("Could not save learning history: %s", e)

    def _reject(self, e: ValidationError) -> bool:
        self.state = session.request_failed(self.state, e.message)
        return False

    # ── topic selection ───────────────────────────────────────────────────

    async def start_learning(self, topic: str) -> bool:
        """Select ``topic`` and fetch its explanation. True on reaching the explanation screen."""
        async with self.lease:
            try:
                self.state = session.start_topic(self.state, topic)
            except ValidationError as e:
                return self._reject(e)
            self._save_history()
            logger.info("Starting topic %r", self.state.concept)

            self._set_loading(True)
            try:
                sections = await explain_concept(self.agent, self.state.concept)
            except AgentRequestError as e:
                self.state = session.explanation_failed(self.state, e.message)
                return False
            finally:
                self._set_loading(False)

            self.state = session.apply_explanation(self.state, sections)
            return True

    # ── quiz ──────────────────────────────────────────────────────────────

    async def start_quiz(self) -> bool:
        async with self.lease:
            return await self._load_quiz()

    async def _load_quiz(self) -> bool:
        try:
            self.state = session.begin_quiz(self.state)
        except ValidationError as e:
            return self._reject(e)

        self._set_loading(True)
        try:
            questions = await generate_quiz(self.agent, self.state.concept, self.quiz_length)
            self.state = session.apply_quiz(self.state, questions)
        except AgentRequestError as e:
            self.state = session.request_failed(self.state, e.message)
            return False
        finally:
            self._set_loading(False)
        return True

    def select_answer(self, letter: str) -> bool:
        if self.lease.held:
            raise RequestInFlightError()
        try:
            self.state = session.select_answer(self.state, letter)
        except ValidationError as e:
            return self._reject(e)
        return True

    async def submit_answer(self, letter: Optional[str] = None) -> bool:
        """Evaluate the chosen option, choosing ``letter`` first when given."""
        async with self.lease:
            try:
                if letter is not None:
                    self.state = session.select_answer(self.state, letter)
                question, chosen = session.pending_submission(self.state)
            except ValidationError as e:
                return self._reject(e)

            self.state = session.dismiss_error(self.state)
            self._set_loading(True)
            try:
                text = await evaluate_answer(self.agent, question, chosen)
            except AgentRequestError as e:
                self.state = session.request_failed(self.state, e.message)
                return False
            finally:
                self._set_loading(False)

            self.state = session.apply_feedback(self.state, text)
            return True

    def next_question(self) -> None:
        if self.lease.held:
            raise RequestInFlightError()
        self.state = session.advance(self.state)
        if self.state.result is not None:
            logger.info(
                "Quiz on %r finished: %d/%d (%s)",
                self.state.concept,
                self.state.result.score,
                self.state.result.total,
                self.state.result.mastery_level.value,
            )

    # ── results ───────────────────────────────────────────────────────────

    async def retake_quiz(self) -> bool:
        async with self.lease:
            self.state = session.reset_for_retake(self.state)
            return await self._load_quiz()

    def review_explanation(self) -> None:
        if self.lease.held:
            raise RequestInFlightError()
        self.state = session.review_explanation(self.state)

    def learn_new_concept(self) -> None:
        if self.lease.held:
            raise RequestInFlightError()
        self.state = session.learn_new_concept(self.state)

    back_to_topics = learn_new_concept

    def dismiss_error(self) -> None:
        if self.lease.held:
            raise RequestInFlightError()
        self.state = session.dismiss_error(self.state)


def build_controller(settings: AgentSettings) -> SessionController:
    agent = AgentClient(settings.agent_url, settings.agent_id, timeout=settings.timeout)
    return SessionController(agent, JsonFileStore(settings.history_file))

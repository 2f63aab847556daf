"""Error taxonomy for the learning session."""

from typing import Optional

DEFAULT_ERROR_MESSAGE = "An error occurred"


class LearningAgentError(Exception):
    """Base class for every error raised by the learning session."""

    def __init__(self, message: str = DEFAULT_ERROR_MESSAGE):
        super().__init__(message)
        self.message = message


class ValidationError(LearningAgentError):
    """User input rejected locally; no request was sent."""


class InvalidTransitionError(LearningAgentError):
    """A trigger arrived on a screen that does not accept it."""


class RequestInFlightError(LearningAgentError):
    """Another agent request already holds the lease."""

    def __init__(self, message: str = "An agent request is already in progress"):
        super().__init__(message)


class AgentRequestError(LearningAgentError):
    """The agent call failed: network, HTTP status, envelope or payload."""

    def __init__(
        self,
        message: str = DEFAULT_ERROR_MESSAGE,
        *,
        request_type: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.request_type = request_type
        self.status_code = status_code


class MalformedPayloadError(AgentRequestError):
    """The agent answered successfully but the payload is unusable."""

"""Async HTTP client for the learning agent endpoint."""

import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from errors import AgentRequestError, DEFAULT_ERROR_MESSAGE
from schemas import AgentEnvelope, AgentRequest, RequestType

logger = logging.getLogger(__name__)

FETCH_FAILED_MESSAGE = "Failed to fetch from agent"
REQUEST_FAILED_MESSAGE = "Agent request failed"


def _first_message(*candidates: Any) -> Optional[str]:
    for candidate in candidates:
        if candidate:
            return candidate if isinstance(candidate, str) else str(candidate)
    return None


class AgentClient:
    """Posts ``{message, agent_id, request_type}`` and returns the envelope's payload.

    Any failure (transport error, non-2xx status, a body that is not a JSON
    envelope, or ``success`` other than true) is raised as AgentRequestError
    carrying the most specific message available.
    """

    def __init__(
        self,
        url: str,
        agent_id: str,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.url = url
        self.agent_id = agent_id
        self._timeout = timeout
        self._transport = transport

    async def send(self, message: str, request_type: RequestType) -> Any:
        body = AgentRequest(message=message, agent_id=self.agent_id, request_type=request_type)

        # A fresh client per call: front-ends may run each call on its own event loop.
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as http:
            try:
                r = await http.post(self.url, json=body.model_dump())
            except httpx.HTTPError as e:
                logger.warning("Agent %s request failed: %s", request_type, e)
                raise AgentRequestError(
                    str(e) or DEFAULT_ERROR_MESSAGE, request_type=request_type
                ) from e

        try:
            envelope = AgentEnvelope.model_validate(r.json())
        except (ValueError, PydanticValidationError) as e:
            logger.warning("Agent %s returned an unreadable body (HTTP %s)", request_type, r.status_code)
            message = FETCH_FAILED_MESSAGE if not r.is_success else DEFAULT_ERROR_MESSAGE
            raise AgentRequestError(message, request_type=request_type, status_code=r.status_code) from e

        if not r.is_success:
            message = _first_message(envelope.error, envelope.details) or FETCH_FAILED_MESSAGE
            logger.warning("Agent %s returned HTTP %s: %s", request_type, r.status_code, message)
            raise AgentRequestError(message, request_type=request_type, status_code=r.status_code)

        if envelope.success is not True:
            message = _first_message(envelope.details) or REQUEST_FAILED_MESSAGE
            logger.warning("Agent %s reported failure: %s", request_type, message)
            raise AgentRequestError(message, request_type=request_type, status_code=r.status_code)

        logger.debug("Agent %s request succeeded", request_type)
        return envelope.response

"""Settings for the learning agent, read from the environment and ``.env``."""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# LOAD .env FIRST
load_dotenv()

DEFAULT_AGENT_URL = "http://localhost:3000/api/agent"
DEFAULT_AGENT_ID = "68fd263d71c6b27d6c8eb80f"
DEFAULT_HISTORY_FILE = "learning_history.json"


@dataclass(frozen=True)
class AgentSettings:
    agent_url: str = DEFAULT_AGENT_URL
    agent_id: str = DEFAULT_AGENT_ID
    # None leaves failure detection to the transport
    timeout: Optional[float] = None
    history_file: str = DEFAULT_HISTORY_FILE
    log_level: str = "INFO"


def load_settings() -> AgentSettings:
    timeout = os.getenv("LEARNING_AGENT_TIMEOUT", "").strip()
    return AgentSettings(
        agent_url=os.getenv("LEARNING_AGENT_URL", DEFAULT_AGENT_URL),
        agent_id=os.getenv("LEARNING_AGENT_ID", DEFAULT_AGENT_ID),
        timeout=float(timeout) if timeout else None,
        history_file=os.getenv("LEARNING_HISTORY_FILE", DEFAULT_HISTORY_FILE),
        log_level=os.getenv("LEARNING_LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

"""Recently studied topics and the key-value store that persists them."""

import json
import logging
import os
from typing import Dict, List, Optional, Protocol

logger = logging.getLogger(__name__)

HISTORY_KEY = "learningHistory"
MAX_RECENT_TOPICS = 3


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    """Dict-backed store, for tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class JsonFileStore:
    """Keeps every key as a string entry of one JSON object on disk."""

    def __init__(self, path: str):
        self.path = path

    def _load(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                loaded = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Unreadable store file %s (%s); using defaults", self.path, e)
            return {}
        if not isinstance(loaded, dict):
            logger.warning("Store file %s does not hold an object; using defaults", self.path)
            return {}
        return {k: v for k, v in loaded.items() if isinstance(v, str)}

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)


def remember_topic(recent: List[str], topic: str) -> List[str]:
    """Move ``topic`` to the front, dropping duplicates and anything past the limit."""
    return [topic, *(t for t in recent if t != topic)][:MAX_RECENT_TOPICS]


def load_recent_topics(store: KeyValueStore) -> List[str]:
    raw = store.get(HISTORY_KEY)
    if not raw:
        return []
    try:
        topics = json.loads(raw)
    except ValueError:
        logger.warning("Discarding unreadable learning history: %r", raw[:80])
        return []
    if not isinstance(topics, list):
        return []

    cleaned: List[str] = []
    for topic in topics:
        if isinstance(topic, str) and topic and topic not in cleaned:
            cleaned.append(topic)
    return cleaned[:MAX_RECENT_TOPICS]


def save_recent_topics(store: KeyValueStore, topics: List[str]) -> None:
    store.set(HISTORY_KEY, json.dumps(topics))

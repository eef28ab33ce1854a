from __future__ import annotations

import logging
import uuid
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    def create(self, state: dict[str, Any]) -> str: ...

    def load(self, session_id: str) -> dict[str, Any] | None: ...

    def save(self, session_id: str, state: dict[str, Any]) -> None: ...

    def delete(self, session_id: str) -> None: ...


class InMemoryStore:
    """Keeps each session as its persisted-layout dict, keyed by session id."""

    def __init__(self) -> None:
        self._states: dict[str, dict[str, Any]] = {}

    def create(self, state: dict[str, Any]) -> str:
        session_id = uuid.uuid4().hex
        self._states[session_id] = state
        logger.debug("Created session %s", session_id)
        return session_id

    def load(self, session_id: str) -> dict[str, Any] | None:
        return self._states.get(session_id)

    def save(self, session_id: str, state: dict[str, Any]) -> None:
        self._states[session_id] = state

    def delete(self, session_id: str) -> None:
        self._states.pop(session_id, None)

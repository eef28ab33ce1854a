"""Session state for a running intake and its persisted layout."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ViewState(str, Enum):
    """Which screen the session is on."""

    WIZARD = "WIZARD"
    REVIEW = "REVIEW"
    AGENT_EXIT = "AGENT_EXIT"
    THANK_YOU = "THANK_YOU"

    @property
    def is_terminal(self) -> bool:
        return self in (ViewState.AGENT_EXIT, ViewState.THANK_YOU)


@dataclass(slots=True, frozen=True)
class AnswerRecord:
    """One recorded answer, with the question snapshotted for review display."""

    node_id: str
    question: str
    section: str
    answer: str
    answer_type: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "node_id": self.node_id,
            "question": self.question,
            "section": self.section,
            "answer": self.answer,
            "answer_type": self.answer_type,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AnswerRecord:
        return cls(
            node_id=data["node_id"],
            question=data.get("question", ""),
            section=data.get("section", ""),
            answer=data.get("answer", ""),
            answer_type=data.get("answer_type", "text"),
        )


@dataclass(slots=True)
class SessionState:
    """Current node, answers keyed by node id, visited history and view.

    In WIZARD ``history`` never contains ``current_node_id``. REVIEW is the
    exception: on completion the current node stays on the last answered
    question, which is also the last history entry. The navigation engine
    always hands back a fresh instance instead of mutating the one it got.
    """

    current_node_id: str
    answers: dict[str, AnswerRecord] = field(default_factory=dict)
    history: list[str] = field(default_factory=list)
    view: ViewState = ViewState.WIZARD
    unclear_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dict for persistence."""
        return {
            "current_node_id": self.current_node_id,
            "answers": {nid: record.to_dict() for nid, record in self.answers.items()},
            "history": list(self.history),
            "view": self.view.value,
            "unclear_count": self.unclear_count,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SessionState:
        """Restore verbatim; eligibility is not re-checked here."""
        return cls(
            current_node_id=data["current_node_id"],
            answers={
                nid: AnswerRecord.from_dict(record)
                for nid, record in data.get("answers", {}).items()
            },
            history=list(data.get("history", [])),
            view=ViewState(data.get("view", ViewState.WIZARD.value)),
            unclear_count=int(data.get("unclear_count", 0)),
        )

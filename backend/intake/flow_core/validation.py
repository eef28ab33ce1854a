"""Answer validation used by the presentation layers before submitting."""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import TYPE_CHECKING

from .literals import UNPARSABLE, coerce

if TYPE_CHECKING:
    from .ir import FlowNode

_PUNCTUATION_RE = re.compile(r"[^\w\s]")

_ERROR_MESSAGES = {
    "boolean": "Please answer yes or no.",
    "integer": "Please enter a whole number.",
    "decimal": "Please enter a number.",
    "date": "Please enter a date, for example 1985-04-23.",
}


def choose_option(answer: str, options: list[str]) -> str | None:
    """Return the canonical option matching a free-text answer, if any.

    Casefold and underscore -> space; an exact match wins, then a unique
    substring match.
    """
    text = " ".join(answer.lower().split())
    normalized = {opt: opt.lower().replace("_", " ") for opt in options}
    for opt, norm in normalized.items():
        if norm == text:
            return opt
    partial = [opt for opt, norm in normalized.items() if text and (norm in text or text in norm)]
    return partial[0] if len(partial) == 1 else None


def validate_answer(node: FlowNode, text: str) -> tuple[bool, str | None]:
    """Validate raw answer text against a node's declared answer type."""
    if not text or not text.strip():
        return False, "Please enter an answer."

    if node.answer_type == "single_select" and node.options:
        if choose_option(text, node.options) is None:
            return False, "Please choose one of: " + ", ".join(node.options)
        return True, None

    if coerce(node.answer_type, text) is UNPARSABLE:
        return False, _ERROR_MESSAGES.get(node.answer_type, "Please enter a valid answer.")
    return True, None


def normalize_answer(node: FlowNode, text: str) -> str:
    """Answer text as it should be recorded (canonical option for selects)."""
    if node.answer_type == "single_select" and node.options:
        return choose_option(text, node.options) or text.strip()
    return text.strip()


def _phrase(text: str) -> str:
    return " ".join(_PUNCTUATION_RE.sub(" ", text.lower()).split())


def wants_agent(text: str, keywords: Iterable[str]) -> bool:
    """True when the whole answer is one of the hand-off phrases.

    Case, punctuation and spacing are ignored. A phrase inside a longer answer
    ("Jordan Representative") is an ordinary answer, not a request.
    """
    answer = _phrase(text)
    if not answer:
        return False
    return any(answer == _phrase(keyword) for keyword in keywords)

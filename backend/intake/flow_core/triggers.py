"""Trigger condition language for follow-on questions.

Grammar (loosest to tightest)::

    expression := and_group ("OR" and_group)*
    and_group  := clause ("AND" clause)*
    clause     := true | false
                | node_ref CONTAINS literal
                | node_ref (== | >= | <= | > | <) literal

Every failure mode (unknown node, missing or unparsable answer, non-numeric
ordering comparison, unrecognised clause) makes the clause false. Nothing in
here raises.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Literal

from .literals import UNPARSABLE, TypedValue, as_number, coerce, parse_boolean, parse_literal, text_form

if TYPE_CHECKING:
    from .ir import FlowNode
    from .state import AnswerRecord

logger = logging.getLogger(__name__)

ClauseOp = Literal["literal", "contains", "==", ">=", "<=", ">", "<", "invalid"]
NodeLookup = Callable[[str], "FlowNode | None"]

_OR_RE = re.compile(r"\s+OR\s+", re.IGNORECASE)
_AND_RE = re.compile(r"\s+AND\s+", re.IGNORECASE)
_CONTAINS_RE = re.compile(r"^(?P<ref>.+?)\s+CONTAINS\s+(?P<lit>.+)$", re.IGNORECASE)
_COMPARE_RE = re.compile(r"^(?P<ref>.+?)\s*(?P<op>==|>=|<=|>|<)\s*(?P<lit>.+)$")


@dataclass(slots=True, frozen=True)
class Clause:
    op: ClauseOp
    node_ref: str | None = None
    literal: TypedValue | None = None
    source: str = ""


@dataclass(slots=True, frozen=True)
class AndGroup:
    clauses: tuple[Clause, ...]


@dataclass(slots=True, frozen=True)
class TriggerExpression:
    groups: tuple[AndGroup, ...]

    def referenced_ids(self) -> list[str]:
        """Node ids referenced by the expression, in first-seen order."""
        seen: list[str] = []
        for group in self.groups:
            for clause in group.clauses:
                if clause.node_ref and clause.node_ref not in seen:
                    seen.append(clause.node_ref)
        return seen


def parse_clause(text: str) -> Clause:
    trimmed = text.strip()
    if not trimmed:
        return Clause(op="invalid", source=text)
    if trimmed in ("true", "false"):
        return Clause(op="literal", literal=trimmed == "true", source=trimmed)

    match = _CONTAINS_RE.match(trimmed)
    if match:
        return Clause(
            op="contains",
            node_ref=match.group("ref").strip(),
            literal=parse_literal(match.group("lit")),
            source=trimmed,
        )

    match = _COMPARE_RE.match(trimmed)
    if match:
        return Clause(
            op=match.group("op"),  # type: ignore[arg-type]
            node_ref=match.group("ref").strip(),
            literal=parse_literal(match.group("lit")),
            source=trimmed,
        )

    return Clause(op="invalid", source=trimmed)


@lru_cache(maxsize=512)
def parse_trigger(text: str) -> TriggerExpression:
    """Tokenize a trigger string into OR-of-AND groups of tagged clauses."""
    trimmed = text.strip()
    if not trimmed:
        return TriggerExpression(groups=())
    groups = tuple(
        AndGroup(clauses=tuple(parse_clause(part) for part in _AND_RE.split(or_part)))
        for or_part in _OR_RE.split(trimmed)
    )
    return TriggerExpression(groups=groups)


def _resolve_answer(
    node_id: str,
    answers: Mapping[str, AnswerRecord],
    node_by_id: NodeLookup,
) -> TypedValue | None:
    record = answers.get(node_id)
    if record is None:
        return None
    node = node_by_id(node_id)
    if node is None:
        return None
    value = coerce(node.answer_type, record.answer)
    if value is UNPARSABLE:
        return None
    return value  # type: ignore[return-value]


def _equals(left: TypedValue, right: TypedValue) -> bool:
    if isinstance(left, bool):
        right_bool = parse_boolean(text_form(right))
        if right_bool is not UNPARSABLE:
            return left is right_bool
    return text_form(left) == text_form(right)


def evaluate_clause(
    clause: Clause,
    answers: Mapping[str, AnswerRecord],
    node_by_id: NodeLookup,
) -> bool:
    if clause.op == "literal":
        return bool(clause.literal)
    if clause.op == "invalid" or clause.node_ref is None or clause.literal is None:
        logger.debug("Unrecognised trigger clause %r evaluates false", clause.source)
        return False

    left = _resolve_answer(clause.node_ref, answers, node_by_id)
    if left is None:
        return False
    right = clause.literal

    if clause.op == "contains":
        return text_form(right) in text_form(left)
    if clause.op == "==":
        return _equals(left, right)

    left_num = as_number(left)
    right_num = as_number(right)
    if left_num is None or right_num is None:
        return False
    if clause.op == ">":
        return left_num > right_num
    if clause.op == ">=":
        return left_num >= right_num
    if clause.op == "<":
        return left_num < right_num
    if clause.op == "<=":
        return left_num <= right_num
    return False


def evaluate_trigger(
    trigger: str | None,
    answers: Mapping[str, AnswerRecord],
    node_by_id: NodeLookup,
) -> bool:
    """Return True iff at least one AND group has every clause true."""
    if not trigger:
        return False
    expression = parse_trigger(trigger)
    return any(
        all(evaluate_clause(clause, answers, node_by_id) for clause in group.clauses)
        for group in expression.groups
    )

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

from .triggers import evaluate_trigger

if TYPE_CHECKING:
    from .compiler import FlowGraph
    from .ir import FlowNode
    from .state import AnswerRecord


class EligibilityResolver:
    """Filters the flow order down to the questions currently in play.

    Stateless: every call recomputes from the graph and the given answers.
    """

    def __init__(self, graph: FlowGraph) -> None:
        self._graph = graph

    def is_eligible(self, node: FlowNode, answers: Mapping[str, AnswerRecord]) -> bool:
        if node.is_gateway:
            return True
        return evaluate_trigger(node.trigger, answers, self._graph.node_by_id)

    def eligible_ids(self, answers: Mapping[str, AnswerRecord]) -> list[str]:
        eligible: list[str] = []
        for node_id in self._graph.order():
            node = self._graph.node_by_id(node_id)
            if node is not None and self.is_eligible(node, answers):
                eligible.append(node_id)
        return eligible

    def next_id(self, current_id: str, answers: Mapping[str, AnswerRecord]) -> str | None:
        """First eligible id strictly after ``current_id``; None means the flow is done."""
        order = self._graph.order()
        index = self._graph.position(current_id)
        if index == -1:
            return None
        for node_id in order[index + 1 :]:
            node = self._graph.node_by_id(node_id)
            if node is not None and self.is_eligible(node, answers):
                return node_id
        return None

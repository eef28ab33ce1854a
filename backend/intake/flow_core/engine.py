"""Navigation engine for the intake wizard - a pure state machine.

Key principles:
1. Eligibility is recomputed from scratch after every mutation
2. Every operation returns a new SessionState; the input is never mutated
3. Answers and history only ever hold nodes eligible under the current answers
4. AGENT_EXIT and THANK_YOU are terminal; only restart() leaves them
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from .eligibility import EligibilityResolver
from .errors import InvalidTransitionError, UnknownNodeError
from .state import AnswerRecord, SessionState, ViewState

if TYPE_CHECKING:
    from .compiler import FlowGraph
    from .ir import FlowNode

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class Progress:
    position: int
    total: int


class IntakeFlowEngine:
    def __init__(self, graph: FlowGraph, *, max_unclear_answers: int = 2) -> None:
        self._graph = graph
        self._resolver = EligibilityResolver(graph)
        self._max_unclear_answers = max_unclear_answers

    @property
    def graph(self) -> FlowGraph:
        return self._graph

    @property
    def resolver(self) -> EligibilityResolver:
        return self._resolver

    def initial_state(self) -> SessionState:
        entry = self._graph.entry
        if entry is None:
            raise UnknownNodeError(None)
        return SessionState(current_node_id=entry)

    # Queries

    def current_node(self, state: SessionState) -> FlowNode:
        node = self._graph.node_by_id(state.current_node_id)
        if node is None:
            raise UnknownNodeError(state.current_node_id)
        return node

    def is_resumable(self, state: SessionState) -> bool:
        return self._graph.node_by_id(state.current_node_id) is not None

    def eligible_ids(self, state: SessionState) -> list[str]:
        return self._resolver.eligible_ids(state.answers)

    def progress(self, state: SessionState) -> Progress:
        eligible = self._resolver.eligible_ids(state.answers)
        try:
            position = eligible.index(state.current_node_id) + 1
        except ValueError:
            position = 0
        return Progress(position=position, total=len(eligible))

    def review_items(self, state: SessionState) -> list[AnswerRecord]:
        """Recorded answers in the order the questions were visited."""
        return [state.answers[nid] for nid in state.history if nid in state.answers]

    def previous_answer(self, state: SessionState) -> str:
        record = state.answers.get(state.current_node_id)
        return record.answer if record else ""

    # Operations

    def submit_answer(self, state: SessionState, text: str) -> SessionState:
        """Record the answer for the current node and move to the next eligible one.

        ``text`` is expected to have passed the answer validator already.
        """
        self._require_view(state, "submit an answer", ViewState.WIZARD)
        node = self.current_node(state)

        answers = dict(state.answers)
        answers[node.id] = AnswerRecord(
            node_id=node.id,
            question=node.question,
            section=node.section,
            answer=text,
            answer_type=node.answer_type,
        )

        pruned_answers, eligible = self._settle(answers)
        dropped = sorted(set(answers) - set(pruned_answers))
        if dropped:
            logger.info("Pruned answers no longer in play: %s", dropped)
        history = [nid for nid in state.history if nid in eligible]
        history.append(node.id)

        next_id = self._resolver.next_id(node.id, pruned_answers)
        if next_id is None:
            logger.info("Node %s answered, flow complete; moving to review", node.id)
            return SessionState(
                current_node_id=node.id,
                answers=pruned_answers,
                history=history,
                view=ViewState.REVIEW,
            )

        logger.info("Node %s answered, advancing to %s", node.id, next_id)
        return SessionState(
            current_node_id=next_id,
            answers=pruned_answers,
            history=history,
            view=ViewState.WIZARD,
        )

    def go_back(self, state: SessionState) -> SessionState:
        self._require_view(state, "go back", ViewState.WIZARD, ViewState.REVIEW)
        if not state.history:
            return state
        history = list(state.history)
        previous = history.pop()
        return replace(
            state,
            current_node_id=previous,
            history=history,
            answers=dict(state.answers),
            view=ViewState.WIZARD,
        )

    def edit_answer(self, state: SessionState, target_id: str) -> SessionState:
        """Rewind to ``target_id``, discarding everything answered after it."""
        self._require_view(state, "edit an answer", ViewState.WIZARD, ViewState.REVIEW)
        if target_id in state.history:
            history = state.history[: state.history.index(target_id)]
        elif target_id == state.current_node_id:
            history = list(state.history)
        else:
            logger.warning("Ignoring edit of %s: not in history and not current", target_id)
            return state

        keep = set(history) | {target_id}
        answers = {nid: rec for nid, rec in state.answers.items() if nid in keep}
        logger.info("Editing %s; kept %d answers", target_id, len(answers))
        return SessionState(
            current_node_id=target_id,
            answers=answers,
            history=history,
            view=ViewState.WIZARD,
            unclear_count=0,
        )

    def restart(self) -> SessionState:
        logger.info("Session restarted")
        return self.initial_state()

    def submit_review(self, state: SessionState) -> SessionState:
        self._require_view(state, "submit the review", ViewState.REVIEW)
        logger.info("Review submitted with %d answers", len(state.answers))
        return self._with_view(state, ViewState.THANK_YOU)

    def force_agent_exit(self, state: SessionState) -> SessionState:
        if state.view is ViewState.AGENT_EXIT:
            return state
        self._require_view(state, "hand off to an agent", ViewState.WIZARD, ViewState.REVIEW)
        logger.info("Handing session off to an agent at node %s", state.current_node_id)
        return self._with_view(state, ViewState.AGENT_EXIT)

    def finish_agent_exit(self, state: SessionState) -> SessionState:
        self._require_view(state, "finish the agent hand-off", ViewState.AGENT_EXIT)
        return self._with_view(state, ViewState.THANK_YOU)

    def record_unclear_answer(self, state: SessionState) -> SessionState:
        """Count an unusable answer; too many in a row escalates to an agent."""
        self._require_view(state, "record an unclear answer", ViewState.WIZARD)
        count = state.unclear_count + 1
        updated = replace(
            state, answers=dict(state.answers), history=list(state.history), unclear_count=count
        )
        if count >= self._max_unclear_answers:
            logger.info("%d unclear answers in a row at %s", count, state.current_node_id)
            return self.force_agent_exit(updated)
        return updated

    # Helpers

    def _settle(
        self, answers: dict[str, AnswerRecord]
    ) -> tuple[dict[str, AnswerRecord], set[str]]:
        """Drop answers to ineligible nodes until the eligible set stops changing.

        Removing one answer can switch off triggers that read it, so a single
        pass is not enough for chains of follow-on questions.
        """
        while True:
            eligible = set(self._resolver.eligible_ids(answers))
            kept = {nid: rec for nid, rec in answers.items() if nid in eligible}
            if len(kept) == len(answers):
                return kept, eligible
            answers = kept

    @staticmethod
    def _require_view(state: SessionState, operation: str, *allowed: ViewState) -> None:
        if state.view not in allowed:
            raise InvalidTransitionError(state.view.value, operation)

    @staticmethod
    def _with_view(state: SessionState, view: ViewState) -> SessionState:
        return replace(
            state, answers=dict(state.answers), history=list(state.history), view=view
        )

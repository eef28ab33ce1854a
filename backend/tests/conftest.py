import os
import sys
from collections.abc import Callable

import pytest

# Ensure the backend root (containing the `intake` package) is importable
_TESTS_DIR = os.path.dirname(__file__)
_BACKEND_ROOT = os.path.abspath(os.path.join(_TESTS_DIR, os.pardir))
if _BACKEND_ROOT not in sys.path:
    sys.path.insert(0, _BACKEND_ROOT)

from intake.flow_core.compiler import FlowGraph, compile_flow  # noqa: E402
from intake.flow_core.engine import IntakeFlowEngine  # noqa: E402
from intake.flow_core.ir import FlowDefinition, FlowNode  # noqa: E402
from intake.flow_core.state import AnswerRecord  # noqa: E402

AnswersFactory = Callable[..., dict[str, AnswerRecord]]


@pytest.fixture
def definition() -> FlowDefinition:
    """Small intake flow exercising every trigger shape.

    Flow order: smoker, smoke_freq, age, consent, adult_consent,
    coverage_amount, income, region
    """
    return FlowDefinition(
        id="test_intake",
        root_nodes=["smoker", "age", "consent", "coverage_amount", "region"],
        nodes=[
            FlowNode(
                id="smoker",
                section="Health",
                kind="gateway",
                question="Do you smoke?",
                answer_type="boolean",
                children=["smoke_freq"],
            ),
            FlowNode(
                id="smoke_freq",
                section="Health",
                kind="follow_on",
                question="How often?",
                answer_type="text",
                trigger="smoker == Yes",
            ),
            FlowNode(id="age", section="About you", question="Age?", answer_type="integer"),
            FlowNode(
                id="consent",
                section="Consent",
                question="Do you consent?",
                answer_type="boolean",
                children=["adult_consent"],
            ),
            FlowNode(
                id="adult_consent",
                section="Consent",
                kind="follow_on",
                question="Sign here",
                answer_type="text",
                trigger="age >= 18 AND consent == Yes",
            ),
            FlowNode(
                id="coverage_amount",
                section="Coverage",
                question="Coverage amount?",
                answer_type="decimal",
                children=["income"],
            ),
            FlowNode(
                id="income",
                section="Coverage",
                kind="follow_on",
                question="Annual income?",
                answer_type="decimal",
                trigger="coverage_amount > 1000000 OR region CONTAINS international",
            ),
            FlowNode(id="region", section="Residence", question="Region?", answer_type="text"),
        ],
    )


@pytest.fixture
def graph(definition: FlowDefinition) -> FlowGraph:
    return compile_flow(definition)


@pytest.fixture
def engine(graph: FlowGraph) -> IntakeFlowEngine:
    return IntakeFlowEngine(graph, max_unclear_answers=2)


@pytest.fixture
def answers_for(graph: FlowGraph) -> AnswersFactory:
    """Build an answer map from ``node_id=raw_text`` keyword arguments."""

    def _build(**raw: str) -> dict[str, AnswerRecord]:
        answers: dict[str, AnswerRecord] = {}
        for node_id, text in raw.items():
            node = graph.node_by_id(node_id)
            answers[node_id] = AnswerRecord(
                node_id=node_id,
                question=node.question if node else "",
                section=node.section if node else "",
                answer=text,
                answer_type=node.answer_type if node else "text",
            )
        return answers

    return _build

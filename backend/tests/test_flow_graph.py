"""Tests for flow order construction and flow document loading."""

import json
from pathlib import Path

import pytest

from intake.flow_core.compiler import build_flow_order, compile_flow
from intake.flow_core.errors import FlowLoadError
from intake.flow_core.ir import FlowDefinition, FlowNode
from intake.flow_core.loader import default_flow_path, load_flow_definition


@pytest.mark.unit
def test_flow_order_roots_then_children(graph) -> None:
    assert graph.order() == (
        "smoker",
        "smoke_freq",
        "age",
        "consent",
        "adult_consent",
        "coverage_amount",
        "income",
        "region",
    )
    assert graph.entry == "smoker"


@pytest.mark.unit
def test_flow_order_deduplicates_first_seen() -> None:
    definition = FlowDefinition(
        root_nodes=["a", "b", "a"],
        nodes=[
            FlowNode(id="a", question="A?", children=["c", "b"]),
            FlowNode(id="b", question="B?", children=["c", "d"]),
            FlowNode(id="c", question="C?", kind="follow_on", trigger="true"),
            FlowNode(id="d", question="D?", kind="follow_on", trigger="true"),
        ],
    )
    assert build_flow_order(definition) == ["a", "c", "b", "d"]


@pytest.mark.unit
def test_children_of_children_are_not_expanded() -> None:
    definition = FlowDefinition(
        root_nodes=["a"],
        nodes=[
            FlowNode(id="a", question="A?", children=["b"]),
            FlowNode(id="b", question="B?", children=["c"]),
            FlowNode(id="c", question="C?"),
        ],
    )
    assert build_flow_order(definition) == ["a", "b"]


@pytest.mark.unit
def test_node_lookup(graph) -> None:
    node = graph.node_by_id("income")
    assert node is not None
    assert node.kind == "follow_on"
    assert not node.is_gateway
    assert graph.node_by_id("missing") is None
    assert graph.position("region") == 7
    assert graph.position("missing") == -1


@pytest.mark.unit
def test_graph_is_read_only(graph) -> None:
    with pytest.raises(Exception):
        graph.flow_order = ("x",)  # type: ignore[misc]


def test_bundled_flow_loads() -> None:
    definition = load_flow_definition(default_flow_path())
    graph = compile_flow(definition)
    assert graph.entry == "full_name"
    assert graph.order()[:4] == ("full_name", "date_of_birth", "age", "guardian_name")
    assert set(graph.order()) == {n.id for n in definition.nodes}
    smoker = graph.node_by_id("smoker")
    assert smoker is not None and smoker.is_gateway
    assert smoker.helper_text


def test_loader_reads_type_alias(tmp_path: Path) -> None:
    doc = {
        "root_nodes": ["q1"],
        "nodes": [
            {"id": "q1", "section": "S", "type": "gateway", "question": "Q1?", "answer_type": "boolean",
             "children": ["q2"], "unknown_key": 1},
            {"id": "q2", "section": "S", "type": "follow_on", "question": "Q2?", "trigger": "q1 == yes"},
        ],
    }
    path = tmp_path / "flow.json"
    path.write_text(json.dumps(doc), encoding="utf-8")
    definition = load_flow_definition(path)
    assert definition.node_by_id("q2").kind == "follow_on"
    assert definition.node_by_id("q1").children == ["q2"]


def test_loader_errors(tmp_path: Path) -> None:
    with pytest.raises(FlowLoadError):
        load_flow_definition(tmp_path / "nope.json")

    bad_json = tmp_path / "bad.json"
    bad_json.write_text("{not json", encoding="utf-8")
    with pytest.raises(FlowLoadError):
        load_flow_definition(bad_json)

    not_object = tmp_path / "list.json"
    not_object.write_text("[]", encoding="utf-8")
    with pytest.raises(FlowLoadError):
        load_flow_definition(not_object)

    bad_shape = tmp_path / "shape.json"
    bad_shape.write_text(json.dumps({"root_nodes": ["a"], "nodes": [{"id": "a"}]}), encoding="utf-8")
    with pytest.raises(FlowLoadError):
        load_flow_definition(bad_shape)

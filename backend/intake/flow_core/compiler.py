"""Compile a flow document into the fixed flow order and an id lookup."""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict, Field

from .ir import FlowDefinition, FlowNode

logger = logging.getLogger(__name__)


class FlowGraph(BaseModel):
    """Read-only compiled flow shared by every session of a process."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str | None = None
    flow_order: tuple[str, ...]
    nodes: dict[str, FlowNode] = Field(default_factory=dict)

    @property
    def entry(self) -> str | None:
        return self.flow_order[0] if self.flow_order else None

    def order(self) -> tuple[str, ...]:
        return self.flow_order

    def node_by_id(self, node_id: str) -> FlowNode | None:
        return self.nodes.get(node_id)

    def position(self, node_id: str) -> int:
        """Index of ``node_id`` in the flow order, -1 when absent."""
        try:
            return self.flow_order.index(node_id)
        except ValueError:
            return -1


def build_flow_order(definition: FlowDefinition) -> list[str]:
    """Each root in declared order, then its children, first-seen wins."""
    nodes_by_id = {n.id: n for n in definition.nodes}
    ordered: list[str] = []
    seen: set[str] = set()

    def _emit(node_id: str) -> None:
        if node_id not in seen:
            ordered.append(node_id)
            seen.add(node_id)

    for root_id in definition.root_nodes:
        _emit(root_id)
        root = nodes_by_id.get(root_id)
        if root is None:
            continue
        for child_id in root.children:
            _emit(child_id)

    return ordered


def compile_flow(definition: FlowDefinition) -> FlowGraph:
    order = build_flow_order(definition)
    graph = FlowGraph(
        id=definition.id,
        name=definition.name,
        flow_order=tuple(order),
        nodes={n.id: n for n in definition.nodes},
    )
    logger.info("Compiled flow %s with %d ordered nodes", graph.id, len(order))
    return graph

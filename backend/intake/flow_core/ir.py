from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

AnswerType = Literal["boolean", "integer", "decimal", "date", "text", "single_select"]
NodeKind = Literal["gateway", "follow_on"]


class FlowNode(BaseModel):
    """A single intake question as declared in the flow document."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id: str
    section: str = ""
    kind: NodeKind = Field(default="gateway", alias="type")
    question: str
    answer_type: AnswerType = "text"
    # Boolean condition over earlier answers; only read for follow-on nodes
    trigger: str | None = None
    # Used only to build the flat flow order
    children: list[str] = Field(default_factory=list)
    # Presentation hints
    helper_text: str | None = None
    placeholder: str | None = None
    options: list[str] = Field(default_factory=list)

    @property
    def is_gateway(self) -> bool:
        return self.kind == "gateway"


class FlowDefinition(BaseModel):
    """Root flow document: ordered roots plus the full node set."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = "life_intake"
    name: str | None = None
    version: str = "1.0.0"
    root_nodes: list[str]
    nodes: list[FlowNode]

    def node_by_id(self, node_id: str) -> FlowNode | None:
        """Get node by ID."""
        for n in self.nodes:
            if n.id == node_id:
                return n
        return None

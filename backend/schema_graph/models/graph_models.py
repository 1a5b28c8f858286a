"""Pydantic models for the schema graph and its API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from schema_graph.models.schema_models import JsonSchemaDocument


class GraphNode(BaseModel):
    """A node in the schema graph."""

    id: str  # definition key, composite id, type name or fresh id
    label: str


class GraphEdge(BaseModel):
    """A labeled, directed edge in the schema graph."""

    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(alias="from")
    to: str
    label: str  # "$ref" | "union" | "extends" | "property: <name>" | "item[<i>]" | "items"


class SchemaGraph(BaseModel):
    """Nodes and edges produced by one build."""

    nodes: list[GraphNode] = []
    edges: list[GraphEdge] = []


# --- API models ---


class SchemaGraphRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    schema_: JsonSchemaDocument = Field(alias="schema")
    focus_node_id: str | None = None


class SchemaTextRequest(BaseModel):
    text: str
    focus_node_id: str | None = None


class GraphNodeView(GraphNode):
    is_focus: bool = False


class GraphEdgeView(GraphEdge):
    is_highlighted: bool = False


class SchemaGraphResponse(BaseModel):
    """Renderable graph returned to the front-end."""

    nodes: list[GraphNodeView]
    edges: list[GraphEdgeView]
    focus_node_id: str | None = None
    node_count: int = 0
    edge_count: int = 0
    filtered_count: int = 0  # nodes + edges dropped as not renderable

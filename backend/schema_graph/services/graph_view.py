"""Prepare a built schema graph for the front-end canvas."""

from __future__ import annotations

from schema_graph.models.graph_models import (
    GraphEdgeView,
    GraphNodeView,
    SchemaGraph,
    SchemaGraphResponse,
)
from schema_graph.services.ref_labels import ROOT_PREFIX


def is_renderable_id(node_id: str | None) -> bool:
    """Return True if the canvas can draw an element with this id."""
    return isinstance(node_id, str) and bool(node_id.strip()) and not node_id.startswith(ROOT_PREFIX)


def renderable_graph(graph: SchemaGraph) -> SchemaGraph:
    """Drop blank and `#/root` nodes, and edges touching such ids."""
    return SchemaGraph(
        nodes=[n for n in graph.nodes if is_renderable_id(n.id)],
        edges=[e for e in graph.edges if is_renderable_id(e.from_) and is_renderable_id(e.to)],
    )


def focus_view(graph: SchemaGraph, focus_node_id: str | None = None) -> SchemaGraphResponse:
    """Filter the graph and mark the focused node and its incident edges.

    An unknown focus id is ignored (nothing highlighted).
    """
    visible = renderable_graph(graph)
    filtered = (len(graph.nodes) - len(visible.nodes)) + (len(graph.edges) - len(visible.edges))

    node_ids = {n.id for n in visible.nodes}
    if focus_node_id not in node_ids:
        focus_node_id = None

    nodes = [
        GraphNodeView(id=n.id, label=n.label, is_focus=(n.id == focus_node_id))
        for n in visible.nodes
    ]
    edges = [
        GraphEdgeView(
            from_=e.from_,
            to=e.to,
            label=e.label,
            is_highlighted=focus_node_id is not None and focus_node_id in (e.from_, e.to),
        )
        for e in visible.edges
    ]
    return SchemaGraphResponse(
        nodes=nodes,
        edges=edges,
        focus_node_id=focus_node_id,
        node_count=len(nodes),
        edge_count=len(edges),
        filtered_count=filtered,
    )

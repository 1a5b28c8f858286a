"""Schema-to-graph traversal.

Walks every fragment of a `definitions` map and reduces it to a node id plus
graph side effects: references become `$ref` edges, `anyOf`/`allOf` become
composite nodes with `union`/`extends` edges, `properties` become
`property: <name>` edges and arrays get an `<id>-array` container node.
"""

from __future__ import annotations

import itertools
import logging
import uuid
from collections.abc import Callable, Mapping
from typing import Any

from schema_graph.models.graph_models import GraphEdge, GraphNode, SchemaGraph
from schema_graph.models.schema_models import (
    FragmentKind,
    JsonSchemaDocument,
    SchemaFragment,
)
from schema_graph.services.ref_labels import node_label_from_ref, strip_definitions_prefix

logger = logging.getLogger(__name__)

IdFactory = Callable[[], str]
LabelDecoder = Callable[[str], str]


class SchemaDepthError(ValueError):
    """Raised when fragments nest deeper than the configured limit."""

    def __init__(self, max_depth: int, node_id: str) -> None:
        super().__init__(
            f"Schema nesting exceeds maximum depth of {max_depth} (at '{node_id}')"
        )
        self.max_depth = max_depth
        self.node_id = node_id


def _uuid_id() -> str:
    return str(uuid.uuid4())


def sequential_ids(prefix: str = "node") -> IdFactory:
    """Deterministic fresh-id factory: `<prefix>-1`, `<prefix>-2`, ..."""
    counter = itertools.count(1)
    return lambda: f"{prefix}-{next(counter)}"


def _title_or(fragment: SchemaFragment, default: str) -> str:
    return fragment.title if fragment.title is not None else default


class SchemaGraphBuilder:
    """Builds one graph from one definitions map.

    The builder owns the traversal state (node list, dedup set, edge list,
    visited set) for a single build and cannot be reused.
    """

    def __init__(
        self,
        definitions: Mapping[str, SchemaFragment],
        id_factory: IdFactory | None = None,
        label_decoder: LabelDecoder | None = None,
        max_depth: int | None = None,
    ):
        self.definitions = definitions
        self.max_depth = max_depth
        self._new_id = id_factory or _uuid_id
        self._label = label_decoder or node_label_from_ref
        self.graph = SchemaGraph()
        self._node_ids: set[str] = set()
        self._visited: set[str] = set()
        self._built = False

    # ---------- helpers ----------

    def _add_node(self, node_id: str, label: str) -> None:
        # First registration wins, whatever label later callers pass
        if node_id in self._node_ids:
            return
        self._node_ids.add(node_id)
        self.graph.nodes.append(GraphNode(id=node_id, label=label))

    def _add_edge(self, source: str, target: str, label: str) -> None:
        self.graph.edges.append(GraphEdge(from_=source, to=target, label=label))

    # ---------- traversal ----------

    def _enter(self, key: str, depth: int) -> str:
        """Walk a definition reached through `$ref`, at most once per build."""
        if key in self._visited:
            return key
        self._visited.add(key)
        return self._walk(self.definitions[key], key, depth)

    def _walk(self, fragment: SchemaFragment, current: str, depth: int) -> str:
        if self.max_depth is not None and depth > self.max_depth:
            raise SchemaDepthError(self.max_depth, current)

        kind = fragment.kind
        if kind is FragmentKind.REF:
            return self._walk_ref(fragment, current, depth)
        if kind is FragmentKind.ANY_OF:
            return self._walk_any_of(fragment, current, depth)
        if kind is FragmentKind.ALL_OF:
            return self._walk_all_of(fragment, current, depth)
        if kind is FragmentKind.OBJECT:
            return self._walk_properties(fragment, current, depth)
        if kind is FragmentKind.ARRAY:
            return self._walk_array(fragment, current, depth)
        if kind is FragmentKind.PRIMITIVE:
            node_id = fragment.type_id
            self._add_node(node_id, _title_or(fragment, "object"))
            return node_id

        node_id = self._new_id()
        self._add_node(node_id, _title_or(fragment, "unknown"))
        return node_id

    def _walk_ref(self, fragment: SchemaFragment, current: str, depth: int) -> str:
        ref_key = strip_definitions_prefix(fragment.ref)
        # Decoded even for self-references so malformed keys always fail
        label = self._label(fragment.ref)
        if ref_key == current:
            return current

        self._add_node(current, label)
        self._add_edge(current, ref_key, "$ref")

        if ref_key in self.definitions:
            return self._enter(ref_key, depth + 1)

        # Unresolvable: one placeholder per occurrence
        placeholder_id = self._new_id()
        self._add_node(placeholder_id, _title_or(fragment, "unknown"))
        logger.debug("Unresolved $ref %s from %s -> %s", fragment.ref, current, placeholder_id)
        return placeholder_id

    def _walk_any_of(self, fragment: SchemaFragment, current: str, depth: int) -> str:
        child_ids = [self._walk(sub, current, depth + 1) for sub in fragment.any_of]
        node_id = "|".join(child_ids)
        self._add_node(node_id, _title_or(fragment, f"anyOf {node_id}"))
        for child_id in child_ids:
            self._add_edge(node_id, child_id, "union")
        return node_id

    def _walk_all_of(self, fragment: SchemaFragment, current: str, depth: int) -> str:
        child_ids = [self._walk(sub, current, depth + 1) for sub in fragment.all_of]
        # A fragment never extends itself
        parent_ids = [child_id for child_id in child_ids if child_id != current]
        node_id = "&".join(parent_ids)
        self._add_node(node_id, _title_or(fragment, f"allOf {node_id}"))
        for parent_id in parent_ids:
            self._add_edge(node_id, parent_id, "extends")
        return node_id

    def _walk_properties(self, fragment: SchemaFragment, current: str, depth: int) -> str:
        members = [
            (self._walk(sub, current, depth + 1), f"property: {name}")
            for name, sub in fragment.properties.items()
        ]
        # Sorted so the composite id ignores declaration order
        members.sort(key=lambda m: m[0])
        node_id = "&".join(member_id for member_id, _ in members)
        for member_id, label in members:
            if member_id != current:
                self._add_edge(current, member_id, label)
        self._add_node(node_id, _title_or(fragment, "object"))
        return node_id

    def _walk_array(self, fragment: SchemaFragment, current: str, depth: int) -> str:
        array_id = f"{current}-array"
        self._add_node(array_id, "Array of items")

        if isinstance(fragment.items, list):
            for index, item in enumerate(fragment.items):
                item_id = self._walk(item, f"{array_id}-item-{index}", depth + 1)
                if item_id != array_id:
                    self._add_edge(array_id, item_id, f"item[{index}]")
        else:
            item_id = self._walk(fragment.items, f"{array_id}-item", depth + 1)
            if item_id != array_id:
                self._add_edge(array_id, item_id, "items")
        return array_id

    # ---------- entry point ----------

    def build(self) -> SchemaGraph:
        """Seed the walk from every definition, in map order.

        Each definition is walked in full even when an earlier `$ref` already
        reached it; re-entry through `$ref` is what the visited set guards.
        """
        if self._built:
            raise RuntimeError("SchemaGraphBuilder.build() can only run once")
        self._built = True

        for key, fragment in self.definitions.items():
            self._add_node(key, self._label(key))
            self._visited.add(key)
            self._walk(fragment, key, 0)

        logger.debug(
            "Built schema graph: %d definitions, %d nodes, %d edges",
            len(self.definitions),
            len(self.graph.nodes),
            len(self.graph.edges),
        )
        return self.graph


def to_graph(
    document: JsonSchemaDocument | Mapping[str, Any],
    id_factory: IdFactory | None = None,
    label_decoder: LabelDecoder | None = None,
    max_depth: int | None = None,
) -> SchemaGraph:
    """Build the node/edge graph for a schema document's `definitions`.

    Raises:
        MalformedReferenceError: a definition key or `$ref` is not base64.
        SchemaDepthError: nesting exceeds `max_depth`.
    """
    if not isinstance(document, JsonSchemaDocument):
        document = JsonSchemaDocument.model_validate(document)
    builder = SchemaGraphBuilder(
        document.definitions,
        id_factory=id_factory,
        label_decoder=label_decoder,
        max_depth=max_depth,
    )
    return builder.build()

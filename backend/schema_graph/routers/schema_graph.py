import logging
import os

from fastapi import APIRouter, HTTPException, Request

from schema_graph.models.graph_models import (
    SchemaGraphRequest,
    SchemaGraphResponse,
    SchemaTextRequest,
)
from schema_graph.models.schema_models import JsonSchemaDocument
from schema_graph.rate_limit import limiter
from schema_graph.services.graph_builder import SchemaDepthError, to_graph
from schema_graph.services.graph_view import focus_view
from schema_graph.services.ref_labels import MalformedReferenceError
from schema_graph.services.schema_input import MAX_TEXT_SIZE, SchemaInputError, parse_schema_text

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/schema", tags=["schema"])

# Untrusted input: bound recursion depth
MAX_DEPTH = int(os.environ.get("SCHEMA_GRAPH_MAX_DEPTH", "64"))


def _build_response(document: JsonSchemaDocument, focus_node_id: str | None) -> SchemaGraphResponse:
    try:
        graph = to_graph(document, max_depth=MAX_DEPTH)
    except (MalformedReferenceError, SchemaDepthError) as e:
        logger.warning("Schema graph build failed: %s", e)
        raise HTTPException(status_code=422, detail=str(e))

    result = focus_view(graph, focus_node_id)
    logger.info(
        "Schema graph: %d definitions -> %d nodes, %d edges (%d filtered)",
        len(document.definitions),
        result.node_count,
        result.edge_count,
        result.filtered_count,
    )
    return result


@router.post("/graph", response_model=SchemaGraphResponse)
@limiter.limit("30/minute")
async def build_schema_graph(request: Request, body: SchemaGraphRequest) -> SchemaGraphResponse:
    """Build the node/edge graph for a schema's definitions."""
    return _build_response(body.schema_, body.focus_node_id)


@router.post("/graph/text", response_model=SchemaGraphResponse)
@limiter.limit("30/minute")
async def build_schema_graph_from_text(request: Request, body: SchemaTextRequest) -> SchemaGraphResponse:
    """Build the graph from pasted JSON of the form {"schema": {"definitions": ...}}."""
    if not body.text.strip():
        raise HTTPException(status_code=400, detail="Text input is empty")
    if len(body.text.encode("utf-8")) > MAX_TEXT_SIZE:
        raise HTTPException(
            status_code=413,
            detail=f"Input too large. Maximum size is {MAX_TEXT_SIZE // (1024 * 1024)}MB.",
        )

    try:
        document = parse_schema_text(body.text)
    except SchemaInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _build_response(document, body.focus_node_id)

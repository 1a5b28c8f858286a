"""Parse pasted JSON text into a schema document."""

from __future__ import annotations

import json
import logging

from pydantic import ValidationError

from schema_graph.models.schema_models import JsonSchemaDocument

logger = logging.getLogger(__name__)

MAX_TEXT_SIZE = 5 * 1024 * 1024  # 5 MB


class SchemaInputError(ValueError):
    """Raised when pasted text is not a usable schema payload."""


def parse_schema_text(text: str) -> JsonSchemaDocument:
    """Parse `{"schema": {"definitions": {...}}}` text.

    The pasted payload wraps the schema document in a `schema` field.
    """
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning("Rejected pasted schema: %s", e)
        raise SchemaInputError(f"Invalid JSON input: {e}") from e
    except RecursionError as e:
        logger.warning("Rejected pasted schema: nesting too deep")
        raise SchemaInputError("Invalid JSON input: nesting too deep") from e

    if not isinstance(payload, dict):
        raise SchemaInputError("Invalid JSON input: expected an object")

    schema = payload.get("schema")
    if not isinstance(schema, dict):
        raise SchemaInputError("Input has no 'schema' object")
    if not isinstance(schema.get("definitions", {}), dict):
        raise SchemaInputError("'schema.definitions' must be an object")

    try:
        return JsonSchemaDocument.model_validate(schema)
    except ValidationError as e:
        raise SchemaInputError(f"Invalid schema: {e.error_count()} validation error(s)") from e

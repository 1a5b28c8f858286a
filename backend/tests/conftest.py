import os

import pytest

from schema_graph.services.ref_labels import encode_definition_key

# Disable rate limiting for tests
os.environ["SCHEMA_GRAPH_NO_RATE_LIMIT"] = "true"


def ref_to(name: str, suffix: str | None = None) -> str:
    return "#/definitions/" + encode_definition_key(name, suffix)


@pytest.fixture
def key():
    """Encode a definition name into a definitions-map key."""
    return encode_definition_key


@pytest.fixture
def ref():
    """Build a `$ref` string pointing at a definition name."""
    return ref_to

"""Human-readable labels for definition keys and `$ref` strings.

Definition keys are the base64 encoding of the definition name, optionally
followed by `@<suffix>` (for example a version tag). A `$ref` points at one
with the `#/definitions/` prefix. Keys under `#/root` are not encoded.
"""

from __future__ import annotations

import base64
import binascii

DEFINITIONS_PREFIX = "#/definitions/"
ROOT_PREFIX = "#/root"


class MalformedReferenceError(ValueError):
    """Raised when a definition key's base segment is not valid base64."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"Malformed reference '{key}': {reason}")
        self.key = key


def strip_definitions_prefix(ref: str) -> str:
    """Turn a `$ref` into the definitions-map key it points at."""
    return ref.replace(DEFINITIONS_PREFIX, "", 1)


def _b64decode_lenient(encoded: str) -> bytes:
    # Same leniency as a browser's atob(): whitespace ignored, padding optional
    compact = "".join(encoded.split())
    if len(compact) % 4 == 1:
        raise binascii.Error("invalid base64 length")
    compact += "=" * (-len(compact) % 4)
    return base64.b64decode(compact, validate=True)


def node_label_from_ref(key: str) -> str:
    """Decode a definition key or `$ref` into its display label.

    Examples:
        "#/definitions/Rm9v"     -> "Foo"
        "#/definitions/Rm9v@v2"  -> "Foo@v2"
        "#/root/anything"        -> "#/root/anything"

    Raises:
        MalformedReferenceError: the base segment is not valid base64.
    """
    if key.startswith(ROOT_PREFIX):
        return key

    base, _, suffix = strip_definitions_prefix(key).partition("@")
    try:
        raw = _b64decode_lenient(base)
    except binascii.Error as e:
        raise MalformedReferenceError(key, f"invalid base64 ({e})") from e

    try:
        decoded = raw.decode("utf-8")
    except UnicodeDecodeError:
        # atob() yields one character per byte
        decoded = raw.decode("latin-1")

    return f"{decoded}@{suffix}" if suffix else decoded


def encode_definition_key(name: str, suffix: str | None = None) -> str:
    """Build the definitions-map key for a definition name."""
    encoded = base64.b64encode(name.encode("utf-8")).decode("ascii")
    return f"{encoded}@{suffix}" if suffix else encoded

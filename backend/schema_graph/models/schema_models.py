"""Pydantic models for JSON-Schema-style definition maps."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FragmentKind(str, Enum):
    """Shape of a schema fragment, in dispatch precedence order."""

    REF = "ref"
    ANY_OF = "anyOf"
    ALL_OF = "allOf"
    OBJECT = "object"
    ARRAY = "array"
    PRIMITIVE = "primitive"
    UNKNOWN = "unknown"


def _coerce_boolean_schema(value):
    # JSON Schema allows `true`/`false` anywhere a subschema is expected
    if isinstance(value, bool):
        return {}
    return value


class SchemaFragment(BaseModel):
    """A schema object, named (a definition) or inline.

    Only the keywords that shape the graph are modelled; everything else
    (`required`, `enum`, `const`, ...) is accepted and ignored.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    ref: str | None = Field(default=None, alias="$ref")
    type: str | list[str] | None = None
    title: str | None = None
    all_of: list[SchemaFragment] | None = Field(default=None, alias="allOf")
    any_of: list[SchemaFragment] | None = Field(default=None, alias="anyOf")
    properties: dict[str, SchemaFragment] | None = None
    items: SchemaFragment | list[SchemaFragment] | None = None

    @field_validator("all_of", "any_of", mode="before")
    @classmethod
    def _coerce_subschema_list(cls, value):
        if isinstance(value, list):
            return [_coerce_boolean_schema(v) for v in value]
        return value

    @field_validator("properties", mode="before")
    @classmethod
    def _coerce_subschema_map(cls, value):
        if isinstance(value, dict):
            return {k: _coerce_boolean_schema(v) for k, v in value.items()}
        return value

    @field_validator("items", mode="before")
    @classmethod
    def _coerce_items(cls, value):
        if isinstance(value, list):
            return [_coerce_boolean_schema(v) for v in value]
        return _coerce_boolean_schema(value)

    @property
    def kind(self) -> FragmentKind:
        """Classify the fragment; the first matching shape wins.

        `$ref` and a string `type` only count when non-empty. The container
        keywords count whenever present, even if empty.
        """
        if self.ref:
            return FragmentKind.REF
        if self.any_of is not None:
            return FragmentKind.ANY_OF
        if self.all_of is not None:
            return FragmentKind.ALL_OF
        if self.properties is not None:
            return FragmentKind.OBJECT
        if self.type == "array" and self.items is not None:
            return FragmentKind.ARRAY
        if self.type is not None and self.type != "":
            return FragmentKind.PRIMITIVE
        return FragmentKind.UNKNOWN

    @property
    def type_id(self) -> str:
        """Node id for a primitive type: the name, or pipe-joined names."""
        if isinstance(self.type, list):
            return "|".join(self.type)
        return self.type or ""


class JsonSchemaDocument(BaseModel):
    """A schema document carrying a `definitions` map (insertion ordered)."""

    model_config = ConfigDict(extra="ignore")

    definitions: dict[str, SchemaFragment] = {}


SchemaFragment.model_rebuild()

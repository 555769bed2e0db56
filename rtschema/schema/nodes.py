"""Intermediate schema nodes produced by the parser.

A SchemaNode keeps the raw keyword set of one schema position together with
its path from the schema root. Nothing here is validated yet: unknown
keywords are retained and flagged, polymorphism keywords are kept as raw
values and never descended into.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from rtschema.model.types import Kind
from rtschema.schema.keywords import POLYMORPHISM_KEYWORDS, REF_KEYWORD, TYPE_NAMES


@dataclass
class SchemaNode:
    """One node of the intermediate schema tree."""

    path: tuple[str, ...]
    keywords: dict[str, Any] = field(default_factory=dict)  # Raw keyword -> raw value

    # Parsed children
    properties: dict[str, SchemaNode] | None = None
    additional_properties: SchemaNode | bool | None = None
    items: SchemaNode | None = None

    # Flagged for the validator
    unknown_keywords: list[str] = field(default_factory=list)

    def has(self, keyword: str) -> bool:
        return keyword in self.keywords

    @property
    def ref(self) -> str | None:
        return self.keywords.get(REF_KEYWORD)

    @property
    def is_ref(self) -> bool:
        return REF_KEYWORD in self.keywords

    @property
    def type_value(self) -> Any:
        return self.keywords.get("type")

    @property
    def declared_kind(self) -> Kind | None:
        """Kind named by the raw `type` keyword, if it names a single known type."""
        value = self.type_value
        if isinstance(value, str):
            return TYPE_NAMES.get(value)
        return None

    @property
    def map_value(self) -> SchemaNode | None:
        if isinstance(self.additional_properties, SchemaNode):
            return self.additional_properties
        return None

    @property
    def has_open_additional_properties(self) -> bool:
        """additionalProperties is set to something other than `false`."""
        return self.additional_properties is not None and self.additional_properties is not False

    @property
    def has_properties(self) -> bool:
        return bool(self.properties)

    @property
    def kind(self) -> Kind | None:
        """Effective kind: object nodes with a map value type are maps."""
        declared = self.declared_kind
        if declared == Kind.OBJECT and self.has_open_additional_properties and not self.has_properties:
            return Kind.MAP
        return declared

    @property
    def required(self) -> list[str]:
        """Required property names, or nothing when 'required' is not a list of names."""
        if not self.has_well_formed_required:
            return []
        return list(self.keywords.get("required") or [])

    @property
    def has_well_formed_required(self) -> bool:
        value = self.keywords.get("required", [])
        return isinstance(value, list) and all(isinstance(name, str) for name in value)

    @property
    def polymorphism_keywords(self) -> list[str]:
        return [k for k in POLYMORPHISM_KEYWORDS if k in self.keywords]

    @property
    def description(self) -> str:
        value = self.keywords.get("description")
        return value if isinstance(value, str) else ""

    @property
    def read_only(self) -> bool:
        return self.keywords.get("readOnly") is True

    def children(self) -> list[SchemaNode]:
        """Direct child schema nodes in declaration order."""
        result = list((self.properties or {}).values())
        if self.map_value is not None:
            result.append(self.map_value)
        if self.items is not None:
            result.append(self.items)
        return result

    def walk(self):
        """Yield this node and all descendants, depth-first."""
        yield self
        for child in self.children():
            yield from child.walk()

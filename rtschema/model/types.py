"""Canonical type model — the resolved, immutable form of a resource schema.

These models are what the engine hands to downstream collaborators (type
generators, runtime payload validators). A descriptor tree is built once per
validation pass and never mutated afterwards. Subtrees that came from the
reference registry are shared objects, not copies.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any


class Kind(Enum):
    OBJECT = "object"
    MAP = "map"  # Object with a single value type for every key
    ARRAY = "array"
    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"

    @property
    def is_scalar(self) -> bool:
        return self in SCALAR_KINDS


SCALAR_KINDS = frozenset({Kind.STRING, Kind.NUMBER, Kind.INTEGER, Kind.BOOLEAN})


class OriginKind(Enum):
    AUTHORED = "authored"  # Declared inline in the document
    REFERENCED = "referenced"  # Resolved from the reference registry


@dataclass(frozen=True)
class Origin:
    """Where a descriptor came from."""

    kind: OriginKind = OriginKind.AUTHORED
    reference_id: str = ""

    @classmethod
    def authored(cls) -> Origin:
        return cls()

    @classmethod
    def referenced(cls, reference_id: str) -> Origin:
        return cls(kind=OriginKind.REFERENCED, reference_id=reference_id)

    @property
    def is_referenced(self) -> bool:
        return self.kind == OriginKind.REFERENCED

    @property
    def name(self) -> str:
        """Short name of the reference, e.g. 'RecipeStatus' for '...v1#RecipeStatus'."""
        if not self.is_referenced:
            return ""
        for sep in ("#", "/"):
            if sep in self.reference_id:
                return self.reference_id.rsplit(sep, 1)[1]
        return self.reference_id

    def __str__(self) -> str:
        if self.is_referenced:
            return f"referenced({self.name})"
        return "authored"


AUTHORED = Origin.authored()


@dataclass(frozen=True)
class Property:
    """A named field of an object descriptor."""

    name: str
    type: TypeDescriptor
    required: bool = False
    read_only: bool = False
    description: str = ""


@dataclass(frozen=True)
class TypeDescriptor:
    """The canonical representation of one schema node.

    `properties` is only populated for OBJECT, `element_type` only for MAP
    (value type) and ARRAY (item type). `validation` holds kind-appropriate
    constraints (enum, format, minLength, ...) copied verbatim from the source.

    Both mappings are read-only views over private copies, so a descriptor
    shared through the registry cannot be changed by any one caller. They take
    no part in hashing.
    """

    kind: Kind
    properties: Mapping[str, Property] = field(default_factory=dict, hash=False)
    element_type: TypeDescriptor | None = None
    validation: Mapping[str, Any] = field(default_factory=dict, hash=False)
    description: str = ""
    read_only: bool = False
    origin: Origin = AUTHORED

    def __post_init__(self):
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))
        object.__setattr__(self, "validation", MappingProxyType(dict(self.validation)))

    @property
    def property_names(self) -> list[str]:
        return list(self.properties)

    @property
    def required_properties(self) -> list[str]:
        return [name for name, prop in self.properties.items() if prop.required]

    def walk(self):
        """Yield every descriptor in the tree, depth-first, this one first.

        Shared (referenced) subtrees are yielded each time they are reached.
        """
        yield self
        for prop in self.properties.values():
            yield from prop.type.walk()
        if self.element_type is not None:
            yield from self.element_type.walk()

    def to_dict(self, expand_references: bool = False) -> dict:
        """Canonical JSON-able view of the descriptor.

        Referenced subtrees below the root render as ``{"$ref": id}`` unless
        `expand_references` is set.
        """
        data: dict[str, Any] = {"kind": self.kind.value, "origin": str(self.origin)}
        if self.origin.is_referenced:
            data["reference"] = self.origin.reference_id
        if self.description:
            data["description"] = self.description
        if self.read_only:
            data["readOnly"] = True
        if self.validation:
            data["validation"] = dict(self.validation)
        if self.kind == Kind.OBJECT:
            data["properties"] = {
                name: {
                    "required": prop.required,
                    "readOnly": prop.read_only,
                    "description": prop.description,
                    "type": _child_dict(prop.type, expand_references),
                }
                for name, prop in self.properties.items()
            }
        if self.element_type is not None:
            data["elementType"] = _child_dict(self.element_type, expand_references)
        return data

    def to_schema(self) -> dict:
        """Render back into the restricted schema grammar.

        Feeding the result through the engine again yields an equal descriptor.
        """
        schema: dict[str, Any] = {}
        if self.kind == Kind.MAP:
            schema["type"] = "object"
        else:
            schema["type"] = self.kind.value
        if self.description:
            schema["description"] = self.description
        if self.read_only:
            schema["readOnly"] = True
        schema.update(self.validation)

        if self.kind == Kind.OBJECT and self.properties:
            schema["properties"] = {
                name: _property_schema(prop) for name, prop in self.properties.items()
            }
            required = self.required_properties
            if required:
                schema["required"] = required
        elif self.kind == Kind.MAP and self.element_type is not None:
            schema["additionalProperties"] = _child_schema(self.element_type)
        elif self.kind == Kind.ARRAY and self.element_type is not None:
            schema["items"] = _child_schema(self.element_type)
        return schema


def _child_dict(descriptor: TypeDescriptor, expand_references: bool) -> dict:
    if descriptor.origin.is_referenced and not expand_references:
        return {"$ref": descriptor.origin.reference_id}
    return descriptor.to_dict(expand_references)


def _child_schema(descriptor: TypeDescriptor) -> dict:
    if descriptor.origin.is_referenced:
        return {"$ref": descriptor.origin.reference_id}
    return descriptor.to_schema()


def _property_schema(prop: Property) -> dict:
    if prop.type.origin.is_referenced:
        schema: dict[str, Any] = {"$ref": prop.type.origin.reference_id}
        if prop.description:
            schema["description"] = prop.description
        if prop.read_only:
            schema["readOnly"] = True
        return schema
    return prop.type.to_schema()

"""Keyword tables for the restricted schema grammar.

This is the normative definition of which JSON-Schema keywords a resource
type schema may use, and on which kinds. Anything not listed here is
rejected as an unknown keyword.
"""

from rtschema.model.types import Kind

# Raw `type` values accepted in a schema. `map` is never written directly:
# it is an object whose additionalProperties is a schema.
TYPE_NAMES: dict[str, Kind] = {
    "object": Kind.OBJECT,
    "array": Kind.ARRAY,
    "string": Kind.STRING,
    "number": Kind.NUMBER,
    "integer": Kind.INTEGER,
    "boolean": Kind.BOOLEAN,
}

POLYMORPHISM_KEYWORDS = ("allOf", "anyOf", "oneOf", "not")

REF_KEYWORD = "$ref"

# Metadata is legal on every node, including $ref nodes.
METADATA_KEYWORDS = frozenset({"description", "readOnly", "title"})

# Keywords that may sit next to a $ref. They describe the property, not the
# shared descriptor.
REF_COMPANION_KEYWORDS = frozenset({"description", "readOnly"})

STRUCTURAL_KEYWORDS = frozenset({"type", "properties", "additionalProperties", "items", "required"})

GENERIC_VALIDATION_KEYWORDS = frozenset({"default", "examples"})

_NUMERIC = frozenset(
    {"enum", "format", "minimum", "maximum", "exclusiveMinimum", "exclusiveMaximum", "multipleOf"}
)
_OBJECT = frozenset({"minProperties", "maxProperties"})

VALIDATION_KEYWORDS: dict[Kind, frozenset[str]] = {
    Kind.STRING: frozenset({"enum", "format", "minLength", "maxLength", "pattern"}),
    Kind.NUMBER: _NUMERIC,
    Kind.INTEGER: _NUMERIC,
    Kind.BOOLEAN: frozenset({"enum"}),
    Kind.ARRAY: frozenset({"minItems", "maxItems", "uniqueItems"}),
    Kind.OBJECT: _OBJECT,
    Kind.MAP: _OBJECT,
}

# Structural keywords that only make sense on one family of kinds.
STRUCTURAL_BY_KIND: dict[str, frozenset[Kind]] = {
    "properties": frozenset({Kind.OBJECT, Kind.MAP}),
    "additionalProperties": frozenset({Kind.OBJECT, Kind.MAP}),
    "required": frozenset({Kind.OBJECT, Kind.MAP}),
    "items": frozenset({Kind.ARRAY}),
}

ALL_VALIDATION_KEYWORDS = frozenset().union(*VALIDATION_KEYWORDS.values()) | GENERIC_VALIDATION_KEYWORDS

KNOWN_KEYWORDS = (
    frozenset(POLYMORPHISM_KEYWORDS)
    | {REF_KEYWORD}
    | METADATA_KEYWORDS
    | STRUCTURAL_KEYWORDS
    | ALL_VALIDATION_KEYWORDS
)


def is_known_keyword(keyword: str) -> bool:
    return keyword in KNOWN_KEYWORDS


def validation_keywords_for(kind: Kind) -> frozenset[str]:
    """Validation attributes that may appear on a node of the given kind."""
    return VALIDATION_KEYWORDS[kind] | GENERIC_VALIDATION_KEYWORDS

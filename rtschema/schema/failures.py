"""Validation failures and the closed rule taxonomy.

Rules are only ever added, never generalized. Every failure carries the
path of the offending node (schema-location tokens from the root) so it can
be surfaced directly to the schema author.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from rtschema.model.types import TypeDescriptor


class Rule(Enum):
    TYPE_REQUIRED = "TypeRequired"
    AMBIGUOUS_OBJECT_SHAPE = "AmbiguousObjectShape"
    UNKNOWN_REQUIRED_PROPERTY = "UnknownRequiredProperty"
    ARRAY_ITEM_TYPE_REQUIRED = "ArrayItemTypeRequired"
    INCOMPATIBLE_VALIDATION_ATTRIBUTE = "IncompatibleValidationAttribute"
    POLYMORPHISM_NOT_ALLOWED = "PolymorphismNotAllowed"
    REF_MUST_BE_EXCLUSIVE = "RefMustBeExclusive"
    UNKNOWN_REFERENCE = "UnknownReference"
    DISALLOWED_REFERENCE = "DisallowedReference"
    CYCLIC_REFERENCE = "CyclicReference"
    ROOT_MUST_BE_OBJECT = "RootMustBeObject"
    UNSUPPORTED_TYPE = "UnsupportedType"
    UNKNOWN_KEYWORD = "UnknownKeyword"
    MALFORMED_INPUT = "MalformedInput"  # Fatal, parser only

    def __str__(self) -> str:
        return self.value


RULE_DESCRIPTIONS: dict[Rule, str] = {
    Rule.TYPE_REQUIRED: "Every node must declare a 'type' (or be a pure $ref).",
    Rule.AMBIGUOUS_OBJECT_SHAPE: "An object declares either 'properties' or 'additionalProperties', not both.",
    Rule.UNKNOWN_REQUIRED_PROPERTY: "'required' may only name declared properties.",
    Rule.ARRAY_ITEM_TYPE_REQUIRED: "An array must declare a typed 'items' schema.",
    Rule.INCOMPATIBLE_VALIDATION_ATTRIBUTE: "A keyword is used on a kind it does not apply to.",
    Rule.POLYMORPHISM_NOT_ALLOWED: "allOf/anyOf/oneOf/not and type unions are not supported.",
    Rule.REF_MUST_BE_EXCLUSIVE: "A $ref node may only carry 'description' and 'readOnly'.",
    Rule.UNKNOWN_REFERENCE: "The referenced id is not in the registry.",
    Rule.DISALLOWED_REFERENCE: "The referenced id is outside the allowed namespaces.",
    Rule.CYCLIC_REFERENCE: "References must not lead back to an enclosing type.",
    Rule.ROOT_MUST_BE_OBJECT: "The schema root must be a plain object.",
    Rule.UNSUPPORTED_TYPE: "'type' must be one of object, array, string, number, integer, boolean.",
    Rule.UNKNOWN_KEYWORD: "The keyword is not part of the supported schema grammar.",
    Rule.MALFORMED_INPUT: "The input is not a schema-shaped tree.",
}


def format_path(path: tuple[str, ...]) -> str:
    """Dotted rendering of a schema path, '<root>' for the root."""
    return ".".join(path) if path else "<root>"


def json_pointer(path: tuple[str, ...]) -> str:
    return "".join("/" + token.replace("~", "~0").replace("/", "~1") for token in path)


@dataclass(frozen=True)
class ValidationFailure:
    """A single rule violation found in a schema."""

    path: tuple[str, ...]
    rule: Rule
    message: str

    @property
    def dotted_path(self) -> str:
        return format_path(self.path)

    def __str__(self) -> str:
        return f"{self.dotted_path}: [{self.rule}] {self.message}"


@dataclass
class ValidationResult:
    """Outcome of one validation pass over a schema document.

    Exactly one of `descriptor` / `failures` is meaningful: an accepted schema
    has a descriptor and no failures, a rejected one has failures and no
    descriptor.
    """

    descriptor: TypeDescriptor | None = None
    failures: list[ValidationFailure] = field(default_factory=list)
    document_id: str = ""

    @property
    def passed(self) -> bool:
        return not self.failures and self.descriptor is not None

    @property
    def fatal(self) -> bool:
        return any(f.rule == Rule.MALFORMED_INPUT for f in self.failures)

    def failures_for(self, rule: Rule) -> list[ValidationFailure]:
        return [f for f in self.failures if f.rule == rule]

    @property
    def rules(self) -> set[Rule]:
        return {f.rule for f in self.failures}

    def summary(self) -> str:
        status = "PASS" if self.passed else "FAIL"
        label = f" {self.document_id}" if self.document_id else ""
        return f"[{status}]{label} {len(self.failures)} failure(s)"

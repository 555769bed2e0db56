"""Constraint validator — enforces the restricted schema grammar.

Walks the intermediate tree depth-first and collects every violation in one
pass, so the author sees all problems in a single round-trip:
- No polymorphism (allOf/anyOf/oneOf/not, type unions)
- Every node is explicitly typed, or is a pure $ref
- Objects have one unambiguous shape; 'required' names declared properties
- Arrays declare a typed item schema
- Validation attributes match the node's kind
- The root is a plain object

References are recorded, not resolved: that is the resolver's job.
"""

from __future__ import annotations

import logging

from rtschema.model.types import Kind
from rtschema.schema.failures import Rule, ValidationFailure
from rtschema.schema.keywords import (
    ALL_VALIDATION_KEYWORDS,
    REF_COMPANION_KEYWORDS,
    REF_KEYWORD,
    STRUCTURAL_BY_KIND,
    TYPE_NAMES,
    validation_keywords_for,
)
from rtschema.schema.nodes import SchemaNode

logger = logging.getLogger(__name__)


def validate_constraints(node: SchemaNode, root: bool = True) -> list[ValidationFailure]:
    """Validate a parsed schema tree against the restricted grammar.

    Args:
        node: The parsed tree.
        root: Whether `node` is a document root (must then be an object).
              Registry entries are validated with root=False.

    Returns:
        List of failures in depth-first order. Empty list means valid.
    """
    failures: list[ValidationFailure] = []
    if root:
        _check_root(node, failures)
    _validate_node(node, failures, Rule.TYPE_REQUIRED)
    logger.debug("Constraint validation found %d failure(s)", len(failures))
    return failures


def _fail(failures: list[ValidationFailure], node: SchemaNode, rule: Rule, message: str):
    failures.append(ValidationFailure(path=node.path, rule=rule, message=message))


def _validate_node(node: SchemaNode, failures: list[ValidationFailure], untyped_rule: Rule):
    for keyword in node.unknown_keywords:
        _fail(failures, node, Rule.UNKNOWN_KEYWORD, f"Keyword '{keyword}' is not supported.")

    _check_polymorphism(node, failures)

    if node.is_ref:
        _check_ref(node, failures)
        return

    _check_type(node, failures, untyped_rule)

    kind = node.kind
    if kind is not None:
        _check_keywords_for_kind(node, kind, failures)
        if kind in (Kind.OBJECT, Kind.MAP):
            _check_object(node, failures)
        elif kind == Kind.ARRAY:
            _check_array(node, failures)

    for child in (node.properties or {}).values():
        _validate_node(child, failures, Rule.TYPE_REQUIRED)
    if node.map_value is not None:
        _validate_node(node.map_value, failures, Rule.TYPE_REQUIRED)
    if node.items is not None:
        _validate_node(node.items, failures, Rule.ARRAY_ITEM_TYPE_REQUIRED)


def _check_polymorphism(node: SchemaNode, failures: list[ValidationFailure]):
    for keyword in node.polymorphism_keywords:
        _fail(
            failures,
            node,
            Rule.POLYMORPHISM_NOT_ALLOWED,
            f"'{keyword}' is not allowed; declare a single concrete type.",
        )
    if isinstance(node.type_value, list):
        _fail(
            failures,
            node,
            Rule.POLYMORPHISM_NOT_ALLOWED,
            f"Type unions are not allowed (got {node.type_value}); declare a single type.",
        )


def _check_ref(node: SchemaNode, failures: list[ValidationFailure]):
    """A $ref node is a pure substitution."""
    extra = sorted(k for k in node.keywords if k != REF_KEYWORD and k not in REF_COMPANION_KEYWORDS)
    if extra:
        _fail(
            failures,
            node,
            Rule.REF_MUST_BE_EXCLUSIVE,
            f"'$ref' cannot be combined with {', '.join(repr(k) for k in extra)}.",
        )


def _check_type(node: SchemaNode, failures: list[ValidationFailure], untyped_rule: Rule):
    value = node.type_value
    if value is None:
        if untyped_rule == Rule.ARRAY_ITEM_TYPE_REQUIRED:
            message = "Array items must declare a 'type' or '$ref'."
        else:
            message = "Node must declare a 'type' or be a '$ref'."
        _fail(failures, node, untyped_rule, message)
    elif isinstance(value, str) and value not in TYPE_NAMES:
        _fail(
            failures,
            node,
            Rule.UNSUPPORTED_TYPE,
            f"Unsupported type '{value}'. Use one of: {', '.join(TYPE_NAMES)}.",
        )


def _check_keywords_for_kind(node: SchemaNode, kind: Kind, failures: list[ValidationFailure]):
    allowed_validation = validation_keywords_for(kind)
    for keyword in node.keywords:
        if keyword in STRUCTURAL_BY_KIND:
            if kind not in STRUCTURAL_BY_KIND[keyword]:
                _fail(
                    failures,
                    node,
                    Rule.INCOMPATIBLE_VALIDATION_ATTRIBUTE,
                    f"'{keyword}' does not apply to type '{node.type_value}'.",
                )
        elif keyword in ALL_VALIDATION_KEYWORDS and keyword not in allowed_validation:
            _fail(
                failures,
                node,
                Rule.INCOMPATIBLE_VALIDATION_ATTRIBUTE,
                f"'{keyword}' does not apply to {kind.value} values.",
            )


def _check_object(node: SchemaNode, failures: list[ValidationFailure]):
    if node.has_properties and node.has_open_additional_properties:
        _fail(
            failures,
            node,
            Rule.AMBIGUOUS_OBJECT_SHAPE,
            "Object declares both 'properties' and 'additionalProperties'; use one shape.",
        )

    if node.additional_properties is True:
        failures.append(
            ValidationFailure(
                path=node.path + ("additionalProperties",),
                rule=Rule.TYPE_REQUIRED,
                message="'additionalProperties' must be a typed schema, not 'true'.",
            )
        )

    if not node.has_well_formed_required:
        failures.append(
            ValidationFailure(
                path=node.path + ("required",),
                rule=Rule.INCOMPATIBLE_VALIDATION_ATTRIBUTE,
                message="'required' must be a list of property names.",
            )
        )

    declared = set(node.properties or {})
    for name in node.required:
        if name not in declared:
            _fail(
                failures,
                node,
                Rule.UNKNOWN_REQUIRED_PROPERTY,
                f"Required property '{name}' is not declared in 'properties'.",
            )


def _check_array(node: SchemaNode, failures: list[ValidationFailure]):
    if node.items is None:
        _fail(
            failures,
            node,
            Rule.ARRAY_ITEM_TYPE_REQUIRED,
            "Array must declare an 'items' schema.",
        )


def _check_root(node: SchemaNode, failures: list[ValidationFailure]):
    if node.is_ref:
        _fail(failures, node, Rule.ROOT_MUST_BE_OBJECT, "The schema root cannot be a '$ref'.")
        return
    kind = node.kind
    if kind is not None and kind != Kind.OBJECT:
        _fail(
            failures,
            node,
            Rule.ROOT_MUST_BE_OBJECT,
            f"The schema root must be an object with properties, got {kind.value}.",
        )

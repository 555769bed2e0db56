"""Validation pipeline for resource type schemas.

Runs the four phases in order:
1. Parse the decoded schema into an intermediate tree (fatal on malformed input)
2. Validate the restricted grammar, collecting every violation
3. Resolve references against the registry and detect cycles
4. Build the canonical descriptor tree

Phases 2 and 3 both contribute failures to the same batch. The model is only
built when the batch is empty. A pass is pure and synchronous: the same input
and registry always give the same result, and passes can run concurrently
against one registry.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from rtschema.exceptions import MalformedInputError
from rtschema.model.types import AUTHORED, Origin
from rtschema.schema.constraint_validator import validate_constraints
from rtschema.schema.failures import Rule, ValidationFailure, ValidationResult
from rtschema.schema.model_builder import build_model
from rtschema.schema.nodes import SchemaNode
from rtschema.schema.parser import parse_schema
from rtschema.schema.reference_resolver import resolve_references

if TYPE_CHECKING:
    from rtschema.registry.reference_registry import ReferenceRegistry

logger = logging.getLogger(__name__)


def validate_schema(
    raw: Any,
    registry: ReferenceRegistry,
    document_id: str | None = None,
    root: bool = True,
) -> ValidationResult:
    """Validate one decoded schema and build its canonical descriptor.

    Args:
        raw: The decoded `schema` subtree of one resource type API version.
        registry: The reference registry to resolve `$ref` against.
        document_id: Id of the type being validated, used for cycle detection.
        root: Whether this is a document root (must be an object).

    Returns:
        ValidationResult with either a descriptor or the failures found.
    """
    try:
        node = parse_schema(raw)
    except MalformedInputError as e:
        logger.warning("Malformed schema%s: %s", _label(document_id), e.message)
        return ValidationResult(
            failures=[ValidationFailure(path=e.path, rule=Rule.MALFORMED_INPUT, message=e.message)],
            document_id=document_id or "",
        )
    return validate_node(node, registry, document_id=document_id, root=root)


def validate_node(
    node: SchemaNode,
    registry: ReferenceRegistry,
    document_id: str | None = None,
    root: bool = True,
    origin: Origin = AUTHORED,
) -> ValidationResult:
    """Run validation, resolution and model building on a parsed tree."""
    failures = validate_constraints(node, root=root)

    # Resolution still runs on independent, well-formed $ref nodes so the
    # author sees reference problems in the same round-trip.
    broken_refs = {f.path for f in failures if f.rule == Rule.REF_MUST_BE_EXCLUSIVE}
    resolution = resolve_references(node, registry, document_id=document_id, skip_paths=broken_refs)
    failures.extend(resolution.failures)

    if failures:
        logger.debug("Rejected schema%s with %d failure(s)", _label(document_id), len(failures))
        return ValidationResult(failures=failures, document_id=document_id or "")

    descriptor = build_model(node, resolution.resolutions, origin=origin)
    logger.debug("Accepted schema%s", _label(document_id))
    return ValidationResult(descriptor=descriptor, document_id=document_id or "")


def _label(document_id: str | None) -> str:
    return f" '{document_id}'" if document_id else ""


class SchemaEngine:
    """Reusable validation facade bound to one reference registry.

    Holds no per-pass state, so one engine can serve concurrent validations.
    """

    def __init__(self, registry: ReferenceRegistry):
        self.registry = registry

    def validate(self, raw: Any, document_id: str | None = None) -> ValidationResult:
        result = validate_schema(raw, self.registry, document_id=document_id)
        logger.info(result.summary())
        return result

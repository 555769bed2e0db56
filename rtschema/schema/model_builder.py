"""Canonical model builder — turns a validated, resolved tree into descriptors.

This is the last phase of the pipeline and enforces no rules: by the time it
runs, the constraint validator and the resolver have both passed. If a
descriptor cannot be built, that is a defect in an earlier phase and
surfaces as ModelBuildError.
"""

from __future__ import annotations

import copy

from rtschema.exceptions import ModelBuildError
from rtschema.model.types import AUTHORED, Kind, Origin, Property, TypeDescriptor
from rtschema.schema.failures import format_path
from rtschema.schema.keywords import validation_keywords_for
from rtschema.schema.nodes import SchemaNode


def build_model(
    node: SchemaNode,
    resolutions: dict[tuple[str, ...], TypeDescriptor],
    origin: Origin = AUTHORED,
) -> TypeDescriptor:
    """Build the canonical descriptor tree.

    Args:
        node: Root of a tree that passed validation and resolution.
        resolutions: Registry descriptors keyed by $ref node path.
        origin: Origin tag for the root descriptor. Registry entries are
                built with their own referenced origin.
    """
    if node.is_ref:
        try:
            return resolutions[node.path]
        except KeyError:
            raise ModelBuildError(
                f"{format_path(node.path)}: reference '{node.ref}' was not resolved"
            ) from None

    kind = node.kind
    if kind is None:
        raise ModelBuildError(f"{format_path(node.path)}: node has no recognized kind")

    allowed = validation_keywords_for(kind)
    validation = {k: copy.deepcopy(v) for k, v in node.keywords.items() if k in allowed}

    properties: dict[str, Property] = {}
    element_type = None

    if kind == Kind.OBJECT:
        required = set(node.required)
        # Declaration order, not alphabetical
        for name, child in (node.properties or {}).items():
            properties[name] = Property(
                name=name,
                type=build_model(child, resolutions),
                required=name in required,
                read_only=child.read_only,
                description=child.description,
            )
    elif kind == Kind.MAP:
        element_type = build_model(_child(node, node.map_value, "additionalProperties"), resolutions)
    elif kind == Kind.ARRAY:
        element_type = build_model(_child(node, node.items, "items"), resolutions)

    return TypeDescriptor(
        kind=kind,
        properties=properties,
        element_type=element_type,
        validation=validation,
        description=node.description,
        read_only=node.read_only,
        origin=origin,
    )


def _child(node: SchemaNode, child: SchemaNode | None, keyword: str) -> SchemaNode:
    if child is None:
        raise ModelBuildError(f"{format_path(node.path)}: missing '{keyword}' schema")
    return child

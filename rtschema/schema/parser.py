"""Schema parser — builds the intermediate node tree from a decoded schema.

The input is the `schema` subtree of one resource type API version, already
decoded from YAML/JSON into dicts, lists and scalars. The parser performs no
semantic validation. It fails only when the input is not a schema-shaped
tree at all, which is the one fatal failure of the pipeline.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from rtschema.exceptions import MalformedInputError
from rtschema.schema.failures import format_path
from rtschema.schema.keywords import REF_KEYWORD, is_known_keyword
from rtschema.schema.nodes import SchemaNode

logger = logging.getLogger(__name__)


def parse_schema(raw: Any, base_path: tuple[str, ...] = ()) -> SchemaNode:
    """Parse a decoded schema into a SchemaNode tree.

    Args:
        raw: The decoded schema (a mapping at the root).
        base_path: Path prefix for every node, when the schema is not parsed
                   from its own root.

    Raises:
        MalformedInputError: If the input is not a schema-shaped tree.
    """
    node = _parse_node(raw, tuple(base_path), set())
    logger.debug("Parsed schema with %d node(s)", sum(1 for _ in node.walk()))
    return node


def _parse_node(raw: Any, path: tuple[str, ...], active: set[int]) -> SchemaNode:
    if not isinstance(raw, Mapping):
        raise MalformedInputError(
            f"{format_path(path)}: expected a schema object, got {type(raw).__name__}", path
        )

    # YAML aliases can produce a mapping that contains itself
    if id(raw) in active:
        raise MalformedInputError(f"{format_path(path)}: schema contains itself", path)
    active.add(id(raw))

    node = SchemaNode(path=path)
    for key, value in raw.items():
        if not isinstance(key, str):
            raise MalformedInputError(
                f"{format_path(path)}: keyword {key!r} is not a string", path
            )
        node.keywords[key] = value
        if not is_known_keyword(key):
            node.unknown_keywords.append(key)

    _check_scalar_keywords(node)

    if "properties" in raw:
        node.properties = _parse_properties(raw["properties"], path, active)

    if "additionalProperties" in raw:
        value = raw["additionalProperties"]
        if isinstance(value, bool):
            node.additional_properties = value
        elif isinstance(value, Mapping):
            node.additional_properties = _parse_node(value, path + ("additionalProperties",), active)
        else:
            raise MalformedInputError(
                f"{format_path(path)}: 'additionalProperties' must be a schema or a boolean",
                path,
            )

    if "items" in raw:
        value = raw["items"]
        if not isinstance(value, Mapping):
            raise MalformedInputError(f"{format_path(path)}: 'items' must be a single schema", path)
        node.items = _parse_node(value, path + ("items",), active)

    active.discard(id(raw))
    return node


def _parse_properties(raw: Any, path: tuple[str, ...], active: set[int]) -> dict[str, SchemaNode]:
    if not isinstance(raw, Mapping):
        raise MalformedInputError(f"{format_path(path)}: 'properties' must be a mapping", path)

    properties: dict[str, SchemaNode] = {}
    for name, value in raw.items():
        if not isinstance(name, str):
            raise MalformedInputError(
                f"{format_path(path)}: property name {name!r} is not a string", path
            )
        properties[name] = _parse_node(value, path + ("properties", name), active)
    return properties


def _check_scalar_keywords(node: SchemaNode):
    """Reject keyword values whose shape makes the node unreadable."""
    path = node.path

    if REF_KEYWORD in node.keywords and not isinstance(node.keywords[REF_KEYWORD], str):
        raise MalformedInputError(f"{format_path(path)}: '$ref' must be a string", path)

    if "type" in node.keywords and not isinstance(node.keywords["type"], (str, list)):
        raise MalformedInputError(
            f"{format_path(path)}: 'type' must be a string or a list of strings", path
        )

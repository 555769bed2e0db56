"""Reference resolver — binds every $ref to a shared registry descriptor.

Only the closed reference registry is consulted; there is no URL fetching.
Each `$ref` is checked against the registry's allowed namespaces, looked up,
and its reference closure is walked to make sure it never leads back to the
document being validated (directly, or through registry entries that
reference it).
"""

from __future__ import annotations

import logging
from collections.abc import Collection
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rtschema.model.types import TypeDescriptor
from rtschema.schema.failures import Rule, ValidationFailure
from rtschema.schema.nodes import SchemaNode

if TYPE_CHECKING:
    from rtschema.registry.reference_registry import ReferenceRegistry

logger = logging.getLogger(__name__)


@dataclass
class ResolutionResult:
    """Resolved references keyed by the path of their $ref node."""

    resolutions: dict[tuple[str, ...], TypeDescriptor] = field(default_factory=dict)
    failures: list[ValidationFailure] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.failures


def resolve_references(
    node: SchemaNode,
    registry: ReferenceRegistry,
    document_id: str | None = None,
    skip_paths: Collection[tuple[str, ...]] = (),
) -> ResolutionResult:
    """Resolve every $ref node in the tree against the registry.

    Args:
        node: Root of the parsed tree.
        registry: The reference registry.
        document_id: Registry-style id of the type being validated, if it has
                     one. A reference chain reaching this id is a cycle.
        skip_paths: $ref nodes to leave alone (they already failed validation).
    """
    resolver = _Resolver(registry, document_id)
    result = ResolutionResult()
    skip = set(skip_paths)

    for ref_node in _ref_nodes(node):
        if ref_node.path in skip:
            continue
        resolver.resolve(ref_node, result)

    logger.debug(
        "Resolved %d reference(s), %d failure(s)", len(result.resolutions), len(result.failures)
    )
    return result


def _ref_nodes(node: SchemaNode):
    """$ref nodes in depth-first order, without descending below a $ref."""
    if node.is_ref:
        yield node
        return
    for child in node.children():
        yield from _ref_nodes(child)


class _Resolver:
    def __init__(self, registry: ReferenceRegistry, document_id: str | None):
        self.registry = registry
        self.document_id = document_id
        # Reference closures already walked in this pass
        self._acyclic: set[str] = set()
        self._cycles: dict[str, list[str]] = {}

    def resolve(self, node: SchemaNode, result: ResolutionResult):
        ref_id = node.ref

        if not self.registry.is_allowed(ref_id):
            result.failures.append(
                ValidationFailure(
                    path=node.path,
                    rule=Rule.DISALLOWED_REFERENCE,
                    message=(
                        f"Reference '{ref_id}' is outside the allowed namespaces "
                        f"({', '.join(self.registry.allowed_namespaces) or 'none'})."
                    ),
                )
            )
            return

        descriptor = self.registry.resolve(ref_id)
        if descriptor is None:
            result.failures.append(
                ValidationFailure(
                    path=node.path,
                    rule=Rule.UNKNOWN_REFERENCE,
                    message=f"Reference '{ref_id}' is not defined in the registry.",
                )
            )
            return

        stack = [self.document_id] if self.document_id else []
        cycle = self._find_cycle(ref_id, stack)
        if cycle:
            result.failures.append(
                ValidationFailure(
                    path=node.path,
                    rule=Rule.CYCLIC_REFERENCE,
                    message=f"Reference '{ref_id}' forms a cycle: {' -> '.join(cycle)}.",
                )
            )
            return

        result.resolutions[node.path] = descriptor

    def _find_cycle(self, ref_id: str, stack: list[str]) -> list[str] | None:
        """Depth-first walk of reference edges; returns the closing chain of the first back-edge."""
        if ref_id in stack:
            return stack[stack.index(ref_id):] + [ref_id]
        if ref_id in self._acyclic:
            return None
        if ref_id in self._cycles:
            return stack + self._cycles[ref_id]

        stack.append(ref_id)
        for dependency in self.registry.references_of(ref_id):
            cycle = self._find_cycle(dependency, stack)
            if cycle:
                stack.pop()
                self._cycles[ref_id] = cycle[cycle.index(ref_id):] if ref_id in cycle else cycle
                return cycle
        stack.pop()
        self._acyclic.add(ref_id)
        return None

"""Closed reference registry.

The registry is the only thing a `$ref` can point at. It is built once from
platform-supplied definitions, every definition going through the same
pipeline as user schemas, and is read-only afterwards. Lookups never mutate
state, so concurrent validation passes can share one registry.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any
from urllib.parse import unquote

import yaml

from rtschema.exceptions import MalformedInputError, RegistryError
from rtschema.model.types import Origin, TypeDescriptor
from rtschema.registry.models import RegistryEntry
from rtschema.schema.engine import validate_node
from rtschema.schema.parser import parse_schema

logger = logging.getLogger(__name__)

_SEGMENT_SEPARATORS = re.compile(r"[/#?]")


class ReferenceRegistry:
    """Read-only lookup table from reference id to canonical descriptor."""

    def __init__(
        self,
        entries: Iterable[RegistryEntry] = (),
        allowed_namespaces: Iterable[str] = (),
    ):
        self._allowed_namespaces: tuple[str, ...] = tuple(allowed_namespaces)
        self._entries: dict[str, RegistryEntry] = {}
        for entry in entries:
            self._add(entry)

    # ── Lookup contract ──────────────────────────────────────────────

    @property
    def allowed_namespaces(self) -> tuple[str, ...]:
        return self._allowed_namespaces

    def is_allowed(self, reference_id: str) -> bool:
        """Whether the id falls inside one of the allowed namespaces.

        A namespace matches on a segment boundary only, and ids with `.` or
        `..` segments (plain or percent-encoded) never match.
        """
        if _has_dot_segment(reference_id):
            return False
        return any(_within_namespace(reference_id, ns) for ns in self._allowed_namespaces)

    def resolve(self, reference_id: str) -> TypeDescriptor | None:
        entry = self._entries.get(reference_id)
        return entry.resolved_type if entry else None

    def references_of(self, reference_id: str) -> tuple[str, ...]:
        """Ids directly referenced by an entry (empty for unknown ids)."""
        entry = self._entries.get(reference_id)
        return entry.references if entry else ()

    def get(self, reference_id: str) -> RegistryEntry | None:
        return self._entries.get(reference_id)

    def entries(self) -> list[RegistryEntry]:
        return list(self._entries.values())

    def __contains__(self, reference_id: object) -> bool:
        return reference_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def _add(self, entry: RegistryEntry):
        if entry.id in self._entries:
            raise RegistryError(f"Duplicate registry entry: {entry.id}")
        self._entries[entry.id] = entry

    # ── Construction ─────────────────────────────────────────────────

    @classmethod
    def from_definitions(
        cls,
        definitions: Mapping[str, Any],
        allowed_namespaces: Iterable[str],
    ) -> ReferenceRegistry:
        """Build a registry from raw schema definitions keyed by id.

        Definitions may reference each other whatever the allow-list says;
        dependencies are built first. The allow-list only governs the finished
        registry.
        Each definition is validated with its own id as the document id, so a
        definition reaching itself through references is rejected.

        Raises:
            RegistryError: If any definition is invalid, references an
                           unknown id, or takes part in a reference cycle.
        """
        allowed_namespaces = tuple(allowed_namespaces)
        registry = cls(allowed_namespaces=allowed_namespaces + tuple(definitions))
        building: list[str] = []

        def build(entry_id: str):
            if entry_id in registry:
                return
            if entry_id in building:
                chain = building[building.index(entry_id):] + [entry_id]
                raise RegistryError(f"Cyclic registry definitions: {' -> '.join(chain)}")
            building.append(entry_id)
            try:
                node = parse_schema(definitions[entry_id])
            except MalformedInputError as e:
                raise RegistryError(f"Malformed registry entry '{entry_id}': {e.message}") from e

            references = tuple(dict.fromkeys(n.ref for n in node.walk() if n.is_ref))
            for dependency in references:
                if dependency in definitions:
                    build(dependency)

            result = validate_node(
                node,
                registry,
                document_id=entry_id,
                root=False,
                origin=Origin.referenced(entry_id),
            )
            if not result.passed:
                details = "; ".join(str(f) for f in result.failures)
                raise RegistryError(f"Invalid registry entry '{entry_id}': {details}", result.failures)

            registry._add(RegistryEntry(id=entry_id, resolved_type=result.descriptor, references=references))
            building.pop()
            logger.debug("Registered %s", entry_id)

        for entry_id in definitions:
            build(entry_id)

        logger.info("Loaded %d registry entr%s", len(registry), "y" if len(registry) == 1 else "ies")
        return cls(entries=registry.entries(), allowed_namespaces=allowed_namespaces)


def _within_namespace(reference_id: str, namespace: str) -> bool:
    if not namespace or not reference_id.startswith(namespace):
        return False
    if namespace[-1] in "/#":
        return True
    return reference_id[len(namespace) : len(namespace) + 1] in ("", "/", "#")


def _has_dot_segment(reference_id: str) -> bool:
    segments = _SEGMENT_SEPARATORS.split(unquote(reference_id))
    return any(segment in (".", "..") for segment in segments)


def load_registry(
    registry_path: str | Path,
    allowed_namespaces: Iterable[str] | None = None,
) -> ReferenceRegistry:
    """Load a registry from a YAML file.

    The file holds `entries` (id -> schema) and optionally `allowedNamespaces`.
    Namespaces passed explicitly take precedence over the file's.
    """
    path = Path(registry_path)
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise RegistryError(f"Cannot read registry file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise RegistryError(f"Invalid YAML in registry file {path}: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("entries", {}), dict):
        raise RegistryError(f"Registry file {path} must contain an 'entries' mapping")

    if allowed_namespaces is None:
        allowed_namespaces = data.get("allowedNamespaces") or []
    logger.debug("Loading registry from %s", path)
    return ReferenceRegistry.from_definitions(data.get("entries") or {}, allowed_namespaces)

"""Manifest loader — reads resource type definition files for the CLI.

A manifest declares one namespace and its resource types; every API version
of a type carries one schema. The engine itself only ever sees those schema
subtrees.

    namespace: Applications.Test
    types:
      testResources:
        apiVersions:
          '2025-01-01-preview':
            schema: {...}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from rtschema.exceptions import ManifestError
from rtschema.utils.source_location import SourceMap, build_source_map

logger = logging.getLogger(__name__)


@dataclass
class SchemaDocument:
    """The schema of one resource type API version."""

    namespace: str
    type_name: str
    api_version: str
    schema: Any

    @property
    def document_id(self) -> str:
        return f"{self.namespace}/{self.type_name}@{self.api_version}"

    @property
    def base_path(self) -> tuple[str, ...]:
        """Location of the schema inside the manifest."""
        return ("types", self.type_name, "apiVersions", self.api_version, "schema")


@dataclass
class Manifest:
    namespace: str
    documents: list[SchemaDocument] = field(default_factory=list)
    file_path: Path | None = None
    source_map: SourceMap = field(default_factory=dict)

    def find(self, type_name: str, api_version: str) -> SchemaDocument | None:
        for doc in self.documents:
            if doc.type_name == type_name and doc.api_version == api_version:
                return doc
        return None


def load_manifest(manifest_path: str | Path) -> Manifest:
    """Load a manifest file.

    Raises:
        ManifestError: If the file is missing, not YAML, or not manifest-shaped.
    """
    path = Path(manifest_path)
    if not path.exists():
        raise ManifestError(f"File not found: {manifest_path}")
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ManifestError(f"Cannot read {path}: {e}") from e

    manifest = load_manifest_from_string(content)
    manifest.file_path = path
    return manifest


def load_manifest_from_string(content: str) -> Manifest:
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ManifestError(f"Invalid YAML: {e}") from e

    if not isinstance(data, dict):
        raise ManifestError("Manifest must be a mapping with 'namespace' and 'types'")

    namespace = data.get("namespace")
    if not isinstance(namespace, str) or not namespace:
        raise ManifestError("Manifest missing required field: namespace")

    types = data.get("types")
    if not isinstance(types, dict) or not types:
        raise ManifestError("Manifest must declare at least one entry under 'types'")

    manifest = Manifest(namespace=namespace, source_map=build_source_map(content))
    for type_name, type_def in types.items():
        versions = (type_def or {}).get("apiVersions") if isinstance(type_def, dict) else None
        if not isinstance(versions, dict) or not versions:
            raise ManifestError(f"Type '{type_name}' must declare 'apiVersions'")
        for api_version, version_def in versions.items():
            if not isinstance(version_def, dict) or "schema" not in version_def:
                raise ManifestError(f"Type '{type_name}' version '{api_version}' has no 'schema'")
            manifest.documents.append(
                SchemaDocument(
                    namespace=namespace,
                    type_name=str(type_name),
                    api_version=str(api_version),
                    schema=version_def["schema"],
                )
            )

    logger.debug("Loaded manifest %s with %d schema(s)", namespace, len(manifest.documents))
    return manifest

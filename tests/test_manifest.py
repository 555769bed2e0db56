"""Tests for the manifest loader and YAML source locations."""

import tempfile
from pathlib import Path

import pytest

from rtschema.exceptions import ManifestError
from rtschema.manifest import load_manifest, load_manifest_from_string
from rtschema.utils.source_location import build_source_map, lookup_source

MANIFEST = """namespace: Applications.Test
types:
  widgets:
    apiVersions:
      '2025-01-01-preview':
        schema:
          type: object
          properties:
            size:
              type: array
  gadgets:
    apiVersions:
      '2025-01-01-preview':
        schema:
          type: object
      '2025-06-01-preview':
        schema:
          type: object
"""


def test_load_manifest_documents():
    manifest = load_manifest_from_string(MANIFEST)
    assert manifest.namespace == "Applications.Test"
    assert [d.document_id for d in manifest.documents] == [
        "Applications.Test/widgets@2025-01-01-preview",
        "Applications.Test/gadgets@2025-01-01-preview",
        "Applications.Test/gadgets@2025-06-01-preview",
    ]
    widgets = manifest.find("widgets", "2025-01-01-preview")
    assert widgets.schema["properties"]["size"] == {"type": "array"}
    assert manifest.find("widgets", "1999-01-01") is None


def test_source_location_of_schema_path():
    manifest = load_manifest_from_string(MANIFEST)
    doc = manifest.find("widgets", "2025-01-01-preview")
    location = lookup_source(manifest.source_map, doc.base_path + ("properties", "size"))
    assert location.line == 10


def test_source_location_falls_back_to_ancestor():
    manifest = load_manifest_from_string(MANIFEST)
    doc = manifest.find("widgets", "2025-01-01-preview")
    location = lookup_source(manifest.source_map, doc.base_path + ("properties", "size", "items"))
    assert location.line == 10
    assert location.pointer.endswith("/properties/size/items")


def test_source_map_of_invalid_yaml_is_empty():
    assert build_source_map("{{invalid yaml::: [") == {}


def test_load_manifest_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "types.yaml"
        path.write_text(MANIFEST)
        manifest = load_manifest(path)
        assert manifest.file_path == path
        location = lookup_source(manifest.source_map, manifest.documents[0].base_path, manifest.file_path)
        assert str(location).startswith(str(path))


def test_load_manifest_missing_file():
    with pytest.raises(ManifestError) as exc:
        load_manifest("/nonexistent/types.yaml")
    assert "not found" in str(exc.value).lower()


def test_invalid_yaml():
    with pytest.raises(ManifestError) as exc:
        load_manifest_from_string("{{invalid yaml::: [")
    assert "yaml" in str(exc.value).lower()


def test_missing_namespace():
    with pytest.raises(ManifestError):
        load_manifest_from_string("types: {a: {apiVersions: {v1: {schema: {type: object}}}}}")


def test_type_without_api_versions():
    with pytest.raises(ManifestError):
        load_manifest_from_string("namespace: X\ntypes:\n  a: {}\n")


def test_version_without_schema():
    with pytest.raises(ManifestError):
        load_manifest_from_string("namespace: X\ntypes:\n  a:\n    apiVersions:\n      v1: {}\n")

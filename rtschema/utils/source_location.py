"""Map schema paths back to YAML line/column positions."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

from rtschema.schema.failures import json_pointer

SourceMap = dict[str, tuple[int, int]]  # JSON pointer -> (line, column), 1-based


@dataclass(frozen=True)
class SourceLocation:
    file_path: Path | None = None
    pointer: str = ""
    line: int | None = None
    column: int | None = None

    def __str__(self) -> str:
        where = str(self.file_path) if self.file_path else "<input>"
        if self.line is not None:
            return f"{where}:{self.line}:{self.column}"
        return where


def build_source_map(content: str) -> SourceMap:
    """Record the start position of every node in a YAML document.

    Uses PyYAML's node tree (yaml.compose), so positions are tracked without
    changing the data returned by safe_load.
    """
    source_map: SourceMap = {}
    try:
        root = yaml.compose(content, Loader=yaml.SafeLoader)
    except yaml.YAMLError:
        # Parse errors are reported by the loader
        return source_map
    if root is None:
        return source_map

    def walk(node: yaml.Node, pointer: str, seen: set[int]):
        source_map.setdefault(pointer, (node.start_mark.line + 1, node.start_mark.column + 1))
        # Aliased nodes can contain themselves
        if id(node) in seen:
            return
        if isinstance(node, yaml.MappingNode):
            for key_node, value_node in node.value:
                key = getattr(key_node, "value", None)
                if key is None:
                    continue
                walk(value_node, pointer + json_pointer((str(key),)), seen | {id(node)})
        elif isinstance(node, yaml.SequenceNode):
            for index, item in enumerate(node.value):
                walk(item, f"{pointer}/{index}", seen | {id(node)})

    walk(root, "", set())
    return source_map


def lookup_source(
    source_map: SourceMap,
    path: tuple[str, ...],
    file_path: Path | None = None,
) -> SourceLocation:
    """Locate a path, falling back to its nearest recorded ancestor."""
    pointer = json_pointer(path)
    probe = tuple(path)
    while True:
        position = source_map.get(json_pointer(probe))
        if position is not None:
            return SourceLocation(file_path=file_path, pointer=pointer, line=position[0], column=position[1])
        if not probe:
            return SourceLocation(file_path=file_path, pointer=pointer)
        probe = probe[:-1]

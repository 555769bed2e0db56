"""Canonical Type Descriptor model.

The descriptor tree is the only artifact the engine exposes downstream:
- Kind: the closed set of seven node kinds
- TypeDescriptor / Property: the resolved, immutable tree
- Origin: whether a subtree was authored inline or shared from the registry
"""

from rtschema.model.types import (
    AUTHORED,
    Kind,
    Origin,
    OriginKind,
    Property,
    TypeDescriptor,
)

__all__ = ["AUTHORED", "Kind", "Origin", "OriginKind", "Property", "TypeDescriptor"]

"""Reference registry — the closed set of types a schema may `$ref`.

The registry provides:
- Lookup: resolve(id) to a shared, pre-validated descriptor
- Policy: the allowed reference namespaces
- Reference edges between entries, for cycle detection
"""

from rtschema.registry.models import RegistryEntry
from rtschema.registry.reference_registry import ReferenceRegistry, load_registry

__all__ = ["ReferenceRegistry", "RegistryEntry", "load_registry"]

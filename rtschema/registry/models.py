"""Registry data models."""

from __future__ import annotations

from dataclasses import dataclass, field

from rtschema.model.types import TypeDescriptor


@dataclass(frozen=True)
class RegistryEntry:
    """A reusable built-in type, resolved and validated at load time."""

    id: str  # e.g. "https://radapp.io/schemas/v1#RecipeStatus"
    resolved_type: TypeDescriptor
    references: tuple[str, ...] = field(default_factory=tuple)  # Direct $ref edges

    @property
    def name(self) -> str:
        return self.resolved_type.origin.name or self.id

    @property
    def description(self) -> str:
        return self.resolved_type.description

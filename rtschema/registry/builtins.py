"""Built-in reference definitions shipped with the engine.

These are placeholders for the platform's own type library: a handful of
shared types that resource type authors reference instead of redefining.
Deployments supply their real registry via a registry file.
"""

from __future__ import annotations

from functools import lru_cache

from rtschema.registry.reference_registry import ReferenceRegistry

DEFAULT_NAMESPACE = "https://radapp.io/schemas/"

_V1 = "https://radapp.io/schemas/v1#"

BUILTIN_DEFINITIONS: dict[str, dict] = {
    f"{_V1}RecipeStatus": {
        "type": "object",
        "description": "Status of the recipe used to deploy the resource.",
        "readOnly": True,
        "properties": {
            "templateKind": {
                "type": "string",
                "description": "Format of the recipe template.",
                "enum": ["bicep", "terraform"],
            },
            "templatePath": {
                "type": "string",
                "description": "Path to the recipe template.",
            },
            "templateVersion": {
                "type": "string",
                "description": "Version of the recipe template.",
            },
        },
        "required": ["templateKind", "templatePath"],
    },
    f"{_V1}OutputResource": {
        "type": "object",
        "description": "A resource created by the platform on behalf of the user.",
        "properties": {
            "id": {"type": "string", "description": "Resource id of the output resource."},
            "localId": {"type": "string", "description": "Logical id within the deployment."},
            "radiusManaged": {
                "type": "boolean",
                "description": "Whether the platform manages the resource lifecycle.",
            },
        },
        "required": ["id"],
    },
    f"{_V1}ResourceStatus": {
        "type": "object",
        "description": "Status of a deployed resource.",
        "readOnly": True,
        "properties": {
            "recipe": {"$ref": f"{_V1}RecipeStatus"},
            "outputResources": {
                "type": "array",
                "items": {"$ref": f"{_V1}OutputResource"},
            },
            "binding": {
                "type": "object",
                "description": "Connection values exposed to consumers.",
                "additionalProperties": {"type": "string"},
            },
        },
    },
    f"{_V1}EnvironmentVariables": {
        "type": "object",
        "description": "Environment variables keyed by name.",
        "additionalProperties": {"type": "string"},
    },
}


@lru_cache(maxsize=None)
def default_registry() -> ReferenceRegistry:
    """The built-in registry, built once per process."""
    return ReferenceRegistry.from_definitions(BUILTIN_DEFINITIONS, [DEFAULT_NAMESPACE])

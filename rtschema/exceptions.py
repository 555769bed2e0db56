"""Custom exceptions for the resource type schema engine.

Rule violations in a user's schema are reported as ValidationFailure values,
not exceptions. Exceptions are reserved for input that cannot be processed at
all and for loader or configuration problems.
"""


class RtSchemaError(Exception):
    """Base exception for schema engine errors."""
    pass


class MalformedInputError(RtSchemaError):
    """Raised by the parser when the input is not a schema-shaped tree."""

    def __init__(self, message: str, path: tuple[str, ...] = ()):
        super().__init__(message)
        self.message = message
        self.path = tuple(path)


class RegistryError(RtSchemaError):
    """Raised when reference registry definitions cannot be loaded."""

    def __init__(self, message: str, failures: list | None = None):
        super().__init__(message)
        self.failures = list(failures or [])


class ManifestError(RtSchemaError):
    """Raised when a type-definition manifest cannot be read."""
    pass


class ModelBuildError(RtSchemaError):
    """Raised when the model builder's precondition does not hold.

    This always points at a defect in an earlier phase, never at user input.
    """
    pass


class ConfigurationError(RtSchemaError):
    """Raised for invalid engine configuration."""
    pass

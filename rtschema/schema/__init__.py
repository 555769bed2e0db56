"""Schema validation and normalization engine.

This package provides the four phases of the pipeline:
1. Parser — decoded schema to intermediate node tree
2. Constraint Validator — the restricted grammar, all violations in one pass
3. Reference Resolver — closed-registry $ref binding and cycle detection
4. Model Builder — the immutable canonical descriptor tree
"""

from rtschema.schema.engine import SchemaEngine, validate_node, validate_schema
from rtschema.schema.failures import Rule, ValidationFailure, ValidationResult

__all__ = [
    "Rule",
    "SchemaEngine",
    "ValidationFailure",
    "ValidationResult",
    "validate_node",
    "validate_schema",
]

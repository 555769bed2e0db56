"""rtschema — validation and normalization engine for resource type schemas."""

__version__ = "0.1.0"

"""JSON Schema adapter and error normalization."""

from .error_format import RawError, format_jsonschema_errors, format_validation_error, format_validation_errors
from .json_schema_adapter import CompiledSchema, JsonSchemaAdapter

__all__ = [
    "CompiledSchema",
    "JsonSchemaAdapter",
    "RawError",
    "format_jsonschema_errors",
    "format_validation_error",
    "format_validation_errors",
]

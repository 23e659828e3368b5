from typing import Optional


class SparkSchemaError(Exception):
    """
    Base exception for all schema-to-Spark errors.

    field_path is the dotted location of the offending value inside the
    schema (e.g. "scores.element"), when known.
    """

    def __init__(self, message: str, field_path: Optional[str] = None):
        self.field_path = field_path
        if field_path:
            message = f"{message} (field '{field_path}')"
        super().__init__(message)


class UnsupportedTypeError(SparkSchemaError):
    """
    Raised when a logical type has no Spark SQL equivalent
    """

    def __init__(self, type_name: str, field_path: Optional[str] = None):
        self.type_name = type_name
        super().__init__(f"{type_name} not supported", field_path)


class MalformedMapEncodingError(SparkSchemaError):
    """
    Raised when a map does not wrap a struct of exactly two fields
    """

    def __init__(self, found: str, field_path: Optional[str] = None):
        self.found = found
        super().__init__(
            f"Expected struct with 2 fields for map entries, got {found}",
            field_path,
        )


class UnrepresentableRootTypeError(SparkSchemaError):
    """
    Raised when a top-level column is null-typed
    """

    def __init__(self, field_path: Optional[str] = None):
        super().__init__("Null is not a valid column type", field_path)


class InvalidFieldNameError(SparkSchemaError):
    """
    Raised in strict mode for names that cannot be backtick-quoted as-is
    """

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Invalid field name {name!r}", name or None)


class NestingTooDeepError(SparkSchemaError):
    """
    Raised when a type tree nests deeper than the configured limit
    """

    def __init__(self, max_depth: int, field_path: Optional[str] = None):
        self.max_depth = max_depth
        super().__init__(
            f"Type nesting exceeds maximum depth of {max_depth}",
            field_path,
        )


class SchemaInferenceError(SparkSchemaError):
    """
    Raised when a record type cannot be described as a schema
    """
    pass


class SerializationError(SparkSchemaError):
    """
    Raised when records cannot be encoded against their schema
    """
    pass

"""
Schema inference for dataclass records.

Follows the tracing defaults of Arrow serializers: text is traced as
large text and sequences as large lists, which is why every inferred schema
goes through normalization before it is rendered or serialized.
"""
import collections.abc
import dataclasses
import datetime
import functools
import types
import typing
from decimal import Decimal
from typing import Any, List, Optional, Tuple

import pyarrow as pa

from arrow_spark.adapters.arrow_adapter import from_arrow_type
from arrow_spark.canonical import logical_type as lt
from arrow_spark.canonical.logical_type import Field, LogicalType
from arrow_spark.utils.exceptions import SchemaInferenceError

# Order matters: bool is an int, datetime is a date
_SCALARS: List[Tuple[type, Any]] = [
    (bool, lt.boolean),
    (int, lt.int64),
    (float, lt.float64),
    (str, lt.large_text),
    (bytes, lt.large_binary),
    (datetime.datetime, lambda: lt.timestamp("us")),
    (datetime.date, lt.date32),
    (datetime.time, lambda: lt.time64("us")),
    (datetime.timedelta, lambda: lt.duration("us")),
    (Decimal, lambda: lt.decimal(38, 18)),
]

_SEQUENCE_ORIGINS = (list, set, frozenset, collections.abc.Sequence, collections.abc.Set)
_MAPPING_ORIGINS = (dict, collections.abc.Mapping)


def _is_union(origin) -> bool:
    return origin is typing.Union or origin is types.UnionType


def _type_override(metadata) -> Optional[LogicalType]:
    for item in metadata:
        if isinstance(item, LogicalType):
            return item
        if isinstance(item, pa.DataType):
            return from_arrow_type(item)
    return None


class _Tracer:
    """
    Walks type hints of one record class (and the dataclasses it nests).
    """

    def __init__(self):
        self._active: List[type] = []

    def fields(self, record_cls: type, path: str = "") -> List[Field]:
        if not dataclasses.is_dataclass(record_cls) or not isinstance(record_cls, type):
            raise SchemaInferenceError(
                f"{getattr(record_cls, '__name__', record_cls)!s} is not a dataclass",
                path or None,
            )
        if record_cls in self._active:
            raise SchemaInferenceError(
                f"Recursive record type {record_cls.__name__}", path or None
            )

        self._active.append(record_cls)
        try:
            hints = typing.get_type_hints(record_cls, include_extras=True)
            result = []
            for f in dataclasses.fields(record_cls):
                field_path = f"{path}.{f.name}" if path else f.name
                logical_type, nullable = self.trace(hints[f.name], field_path)
                result.append(Field(f.name, logical_type, nullable))
            return result
        finally:
            self._active.pop()

    def trace(self, annotation: Any, path: str) -> Tuple[LogicalType, bool]:
        """
        Returns (logical type, nullable) for one annotation.
        """
        origin = typing.get_origin(annotation)
        args = typing.get_args(annotation)

        if origin is typing.Annotated:
            inner_type, nullable = self.trace(args[0], path)
            override = _type_override(args[1:])
            return (override or inner_type), nullable

        if _is_union(origin):
            members = [a for a in args if a is not type(None)]
            if len(members) != 1:
                raise SchemaInferenceError(f"Union types are not supported: {annotation}", path)
            inner_type, _ = self.trace(members[0], path)
            return inner_type, True

        if origin is tuple:
            if len(args) == 2 and args[1] is Ellipsis:
                return self._sequence(args[0], path), False
            raise SchemaInferenceError(f"Only homogeneous tuples are supported: {annotation}", path)

        if origin in _SEQUENCE_ORIGINS:
            if not args:
                raise SchemaInferenceError(f"Missing element type: {annotation}", path)
            return self._sequence(args[0], path), False

        if origin in _MAPPING_ORIGINS:
            if len(args) != 2:
                raise SchemaInferenceError(f"Missing key/value types: {annotation}", path)
            return self._mapping(args[0], args[1], path), False

        if dataclasses.is_dataclass(annotation) and isinstance(annotation, type):
            return lt.struct(self.fields(annotation, path)), False

        if isinstance(annotation, type):
            for python_type, build in _SCALARS:
                if issubclass(annotation, python_type):
                    return build(), False

        raise SchemaInferenceError(f"Cannot infer a logical type for {annotation!r}", path)

    def _sequence(self, element_annotation: Any, path: str) -> LogicalType:
        element_type, nullable = self.trace(element_annotation, f"{path}.element")
        return lt.large_list(Field("element", element_type, nullable))

    def _mapping(self, key_annotation: Any, value_annotation: Any, path: str) -> LogicalType:
        key_type, key_nullable = self.trace(key_annotation, f"{path}.key")
        if key_nullable:
            raise SchemaInferenceError("Map keys cannot be optional", f"{path}.key")
        value_type, value_nullable = self.trace(value_annotation, f"{path}.value")
        return lt.map_(
            Field("key", key_type, nullable=False),
            Field("value", value_type, value_nullable),
        )


def infer_fields(record_cls: type) -> List[Field]:
    """
    Describe a dataclass as an ordered list of canonical fields.
    Nested dataclasses become structs; Optional[...] makes a field nullable.
    """
    return _Tracer().fields(record_cls)


@functools.lru_cache(maxsize=None)
def infer_schema(record_cls: type) -> Tuple[Field, ...]:
    """Cached, immutable variant of infer_fields (one trace per class)."""
    return tuple(infer_fields(record_cls))

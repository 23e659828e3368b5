from typing import Callable, Dict, Iterable, List, Optional

import pyarrow as pa

from arrow_spark.canonical import logical_type as lt
from arrow_spark.canonical.logical_type import Field, LogicalKind, LogicalType
from arrow_spark.utils.exceptions import MalformedMapEncodingError, UnsupportedTypeError

_DESCRIPTION_KEY = b"description"


# ==========================================================
# pyarrow -> canonical
# ==========================================================
def _get_description(field: pa.Field) -> Optional[str]:
    metadata = field.metadata
    if metadata and _DESCRIPTION_KEY in metadata:
        return metadata[_DESCRIPTION_KEY].decode("utf-8")
    return None


def from_arrow_field(field: pa.Field) -> Field:
    return Field(
        name=field.name,
        type=from_arrow_type(field.type),
        nullable=field.nullable,
        description=_get_description(field),
    )


def from_arrow_schema(schema: Iterable[pa.Field]) -> List[Field]:
    """
    Accepts a pyarrow.Schema or any iterable of pyarrow fields.
    """
    return [from_arrow_field(f) for f in schema]


def _from_map(data_type: pa.MapType) -> LogicalType:
    return lt.map_(
        from_arrow_field(data_type.key_field),
        from_arrow_field(data_type.item_field),
        keys_sorted=data_type.keys_sorted,
    )


def _from_union(data_type: pa.UnionType) -> LogicalType:
    members = [
        from_arrow_field(data_type.field(i))
        for i in range(data_type.num_fields)
    ]
    return lt.union(members, mode=data_type.mode)


# Checked in order; first match wins
_FROM_ARROW: List = [
    (pa.types.is_null, lambda t: lt.null()),
    (pa.types.is_boolean, lambda t: lt.boolean()),
    (pa.types.is_int8, lambda t: lt.int8()),
    (pa.types.is_int16, lambda t: lt.int16()),
    (pa.types.is_int32, lambda t: lt.int32()),
    (pa.types.is_int64, lambda t: lt.int64()),
    (pa.types.is_uint8, lambda t: lt.uint8()),
    (pa.types.is_uint16, lambda t: lt.uint16()),
    (pa.types.is_uint32, lambda t: lt.uint32()),
    (pa.types.is_uint64, lambda t: lt.uint64()),
    (pa.types.is_float16, lambda t: lt.float16()),
    (pa.types.is_float32, lambda t: lt.float32()),
    (pa.types.is_float64, lambda t: lt.float64()),
    (pa.types.is_string, lambda t: lt.text()),
    (pa.types.is_large_string, lambda t: lt.large_text()),
    (pa.types.is_string_view, lambda t: lt.text_view()),
    (pa.types.is_map, _from_map),
    (pa.types.is_list, lambda t: lt.list_(from_arrow_field(t.value_field))),
    (pa.types.is_large_list, lambda t: lt.large_list(from_arrow_field(t.value_field))),
    (pa.types.is_fixed_size_list,
     lambda t: lt.fixed_size_list(from_arrow_field(t.value_field), t.list_size)),
    (pa.types.is_list_view, lambda t: lt.list_view(from_arrow_field(t.value_field))),
    (pa.types.is_large_list_view,
     lambda t: lt.large_list_view(from_arrow_field(t.value_field))),
    (pa.types.is_struct, lambda t: lt.struct([from_arrow_field(child) for child in t])),
    (pa.types.is_union, _from_union),
    (pa.types.is_dictionary,
     lambda t: lt.dictionary(from_arrow_type(t.index_type), from_arrow_type(t.value_type), t.ordered)),
    (pa.types.is_decimal, lambda t: lt.decimal(t.precision, t.scale, t.bit_width)),
    (pa.types.is_run_end_encoded,
     lambda t: lt.run_end_encoded(from_arrow_type(t.run_end_type), from_arrow_type(t.value_type))),
    (pa.types.is_timestamp, lambda t: lt.timestamp(t.unit, t.tz)),
    (pa.types.is_date32, lambda t: lt.date32()),
    (pa.types.is_date64, lambda t: lt.date64()),
    (pa.types.is_time32, lambda t: lt.time32(t.unit)),
    (pa.types.is_time64, lambda t: lt.time64(t.unit)),
    (pa.types.is_duration, lambda t: lt.duration(t.unit)),
    (pa.types.is_interval, lambda t: lt.interval()),
    (pa.types.is_binary, lambda t: lt.binary()),
    (pa.types.is_large_binary, lambda t: lt.large_binary()),
    (pa.types.is_fixed_size_binary, lambda t: lt.fixed_size_binary(t.byte_width)),
    (pa.types.is_binary_view, lambda t: lt.binary_view()),
]


def from_arrow_type(data_type: pa.DataType) -> LogicalType:
    if isinstance(data_type, pa.BaseExtensionType):
        return lt.extension(data_type.extension_name, from_arrow_type(data_type.storage_type))

    for predicate, build in _FROM_ARROW:
        if predicate(data_type):
            return build(data_type)

    raise UnsupportedTypeError(str(data_type))


# ==========================================================
# canonical -> pyarrow
# ==========================================================
def to_arrow_field(field: Field) -> pa.Field:
    metadata = None
    if field.description:
        metadata = {_DESCRIPTION_KEY: field.description.encode("utf-8")}
    return pa.field(field.name, to_arrow_type(field.type), field.nullable, metadata=metadata)


def to_arrow_schema(fields: Iterable[Field]) -> pa.Schema:
    return pa.schema([to_arrow_field(f) for f in fields])


def _element(logical_type: LogicalType) -> pa.Field:
    return to_arrow_field(logical_type.element)


def _to_map(logical_type: LogicalType) -> pa.DataType:
    entries = logical_type.children[0].type if len(logical_type.children) == 1 else None
    if entries is None or entries.kind != LogicalKind.STRUCT or len(entries.children) != 2:
        raise MalformedMapEncodingError(str(entries or logical_type))
    key, value = entries.children
    return pa.map_(
        to_arrow_field(key),
        to_arrow_field(value),
        keys_sorted=bool(logical_type.param("keys_sorted", False)),
    )


def _to_extension(logical_type: LogicalType) -> pa.DataType:
    # Extension classes are registered by their owners; only the name survives
    raise UnsupportedTypeError(f"extension<{logical_type.param('name')}>")


_TO_ARROW: Dict[str, Callable[[LogicalType], pa.DataType]] = {
    LogicalKind.NULL: lambda t: pa.null(),
    LogicalKind.BOOLEAN: lambda t: pa.bool_(),
    LogicalKind.INT8: lambda t: pa.int8(),
    LogicalKind.INT16: lambda t: pa.int16(),
    LogicalKind.INT32: lambda t: pa.int32(),
    LogicalKind.INT64: lambda t: pa.int64(),
    LogicalKind.UINT8: lambda t: pa.uint8(),
    LogicalKind.UINT16: lambda t: pa.uint16(),
    LogicalKind.UINT32: lambda t: pa.uint32(),
    LogicalKind.UINT64: lambda t: pa.uint64(),
    LogicalKind.FLOAT16: lambda t: pa.float16(),
    LogicalKind.FLOAT32: lambda t: pa.float32(),
    LogicalKind.FLOAT64: lambda t: pa.float64(),
    LogicalKind.TEXT: lambda t: pa.string(),
    LogicalKind.LARGE_TEXT: lambda t: pa.large_string(),
    LogicalKind.LIST: lambda t: pa.list_(_element(t)),
    LogicalKind.LARGE_LIST: lambda t: pa.large_list(_element(t)),
    LogicalKind.STRUCT: lambda t: pa.struct([to_arrow_field(c) for c in t.children]),
    LogicalKind.MAP: _to_map,
    LogicalKind.TIMESTAMP: lambda t: pa.timestamp(t.param("unit", "us"), tz=t.param("tz")),
    LogicalKind.DATE32: lambda t: pa.date32(),
    LogicalKind.DATE64: lambda t: pa.date64(),
    LogicalKind.TIME32: lambda t: pa.time32(t.param("unit", "ms")),
    LogicalKind.TIME64: lambda t: pa.time64(t.param("unit", "us")),
    LogicalKind.DURATION: lambda t: pa.duration(t.param("unit", "us")),
    LogicalKind.INTERVAL: lambda t: pa.month_day_nano_interval(),
    LogicalKind.BINARY: lambda t: pa.binary(),
    LogicalKind.LARGE_BINARY: lambda t: pa.large_binary(),
    LogicalKind.FIXED_SIZE_BINARY: lambda t: pa.binary(t.param("byte_width")),
    LogicalKind.BINARY_VIEW: lambda t: pa.binary_view(),
    LogicalKind.TEXT_VIEW: lambda t: pa.string_view(),
    LogicalKind.LIST_VIEW: lambda t: pa.list_view(_element(t)),
    LogicalKind.LARGE_LIST_VIEW: lambda t: pa.large_list_view(_element(t)),
    LogicalKind.FIXED_SIZE_LIST: lambda t: pa.list_(_element(t), t.param("list_size")),
    LogicalKind.DICTIONARY: lambda t: pa.dictionary(
        to_arrow_type(t.children[0].type),
        to_arrow_type(t.children[1].type),
        ordered=bool(t.param("ordered", False)),
    ),
    LogicalKind.UNION: lambda t: pa.union(
        [to_arrow_field(c) for c in t.children], mode=t.param("mode", "sparse")
    ),
    LogicalKind.DECIMAL32: lambda t: pa.decimal32(t.param("precision"), t.param("scale", 0)),
    LogicalKind.DECIMAL64: lambda t: pa.decimal64(t.param("precision"), t.param("scale", 0)),
    LogicalKind.DECIMAL128: lambda t: pa.decimal128(t.param("precision"), t.param("scale", 0)),
    LogicalKind.DECIMAL256: lambda t: pa.decimal256(t.param("precision"), t.param("scale", 0)),
    LogicalKind.RUN_END_ENCODED: lambda t: pa.run_end_encoded(
        to_arrow_type(t.children[0].type), to_arrow_type(t.children[1].type)
    ),
    LogicalKind.EXTENSION: _to_extension,
}


def to_arrow_type(logical_type: LogicalType) -> pa.DataType:
    return _TO_ARROW[logical_type.kind](logical_type)

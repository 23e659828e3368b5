from collections.abc import Mapping
from typing import Any, Iterable, List, Sequence

import pyarrow as pa

from arrow_spark.adapters.arrow_adapter import to_arrow_schema
from arrow_spark.canonical.logical_type import Field, LogicalKind, LogicalType
from arrow_spark.pipeline.normalizer import normalize_schema
from arrow_spark.utils.exceptions import SerializationError

_LIST_KINDS = frozenset({
    LogicalKind.LIST,
    LogicalKind.LARGE_LIST,
    LogicalKind.FIXED_SIZE_LIST,
    LogicalKind.LIST_VIEW,
    LogicalKind.LARGE_LIST_VIEW,
})


def _member(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def _to_python(value: Any, logical_type: LogicalType) -> Any:
    """
    Reshape one value into what pyarrow expects for its logical type:
    structs as dicts, maps as (key, value) pairs.
    """
    if value is None:
        return None

    kind = logical_type.kind

    if kind in _LIST_KINDS:
        element_type = logical_type.element.type
        return [_to_python(v, element_type) for v in value]

    if kind == LogicalKind.STRUCT:
        return {
            child.name: _to_python(_member(value, child.name), child.type)
            for child in logical_type.children
        }

    if kind == LogicalKind.MAP:
        key_field, value_field = logical_type.children[0].type.children
        items = value.items() if isinstance(value, Mapping) else value
        return [
            (_to_python(k, key_field.type), _to_python(v, value_field.type))
            for k, v in items
        ]

    return value


def _to_row(record: Any, fields: Sequence[Field]) -> dict:
    return {f.name: _to_python(_member(record, f.name), f.type) for f in fields}


def to_record_batch(records: Iterable[Any], fields: Iterable[Field]) -> pa.RecordBatch:
    """
    Encode records (dataclass instances or mappings) into a RecordBatch.

    The batch is built against the normalized schema, i.e. the same one the
    Spark DDL is rendered from.
    """
    records = list(records)
    normalized: List[Field] = normalize_schema(fields)
    schema = to_arrow_schema(normalized)

    try:
        rows = [_to_row(r, normalized) for r in records]
        return pa.RecordBatch.from_pylist(rows, schema=schema)
    except (pa.ArrowException, TypeError, ValueError) as e:
        record_types = sorted({type(r).__name__ for r in records})
        raise SerializationError(
            f"Failed to convert {len(records)} record(s) of type "
            f"{', '.join(record_types)} to Arrow Record Batch: {e}"
        ) from e

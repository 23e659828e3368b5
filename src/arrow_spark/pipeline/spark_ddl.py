from typing import Callable, Dict, Iterable, Optional

from arrow_spark.canonical.logical_type import Field, LogicalKind, LogicalType
from arrow_spark.config import RenderOptions
from arrow_spark.pipeline.normalizer import TypeNormalizer, normalize_field
from arrow_spark.pipeline.spark_types import SparkSqlType
from arrow_spark.utils.exceptions import (
    InvalidFieldNameError,
    MalformedMapEncodingError,
    NestingTooDeepError,
    UnrepresentableRootTypeError,
    UnsupportedTypeError,
)

_SCALAR_TYPES: Dict[str, str] = {
    LogicalKind.BOOLEAN: SparkSqlType.BOOLEAN,
    LogicalKind.INT8: SparkSqlType.INT,
    LogicalKind.INT16: SparkSqlType.INT,
    LogicalKind.INT32: SparkSqlType.INT,
    LogicalKind.UINT8: SparkSqlType.INT,
    LogicalKind.UINT16: SparkSqlType.INT,
    LogicalKind.UINT32: SparkSqlType.INT,
    LogicalKind.INT64: SparkSqlType.BIGINT,
    LogicalKind.UINT64: SparkSqlType.BIGINT,
    LogicalKind.FLOAT16: SparkSqlType.FLOAT,
    LogicalKind.FLOAT32: SparkSqlType.FLOAT,
    LogicalKind.FLOAT64: SparkSqlType.DOUBLE,
    LogicalKind.TEXT: SparkSqlType.STRING,
}

# Kinds that must never reach the renderer:
# null has no column type, large variants should have been normalized away
_REJECTED = frozenset({
    LogicalKind.NULL,
    LogicalKind.LARGE_TEXT,
    LogicalKind.LARGE_LIST,
})


def _child_path(path: str, name: str) -> str:
    return f"{path}.{name}" if path else name


class _Renderer:
    """
    Recursive LogicalType -> Spark type string.
    Stateless apart from the depth limit.
    """

    def __init__(self, max_depth: int):
        self.max_depth = max_depth
        self._normalizer = TypeNormalizer(max_depth)
        self._rules: Dict[str, Callable[[LogicalType, str, int], str]] = {
            LogicalKind.LIST: self._render_list,
            LogicalKind.STRUCT: self._render_struct,
            LogicalKind.MAP: self._render_map,
        }
        for kind in _SCALAR_TYPES:
            self._rules[kind] = self._render_scalar
        for kind in _REJECTED | LogicalKind.UNSUPPORTED:
            self._rules[kind] = self._render_unsupported

    def render(self, logical_type: LogicalType, path: str, depth: int) -> str:
        if depth > self.max_depth:
            raise NestingTooDeepError(self.max_depth, path)
        return self._rules[logical_type.kind](logical_type, path, depth)

    def _render_scalar(self, logical_type: LogicalType, path: str, depth: int) -> str:
        return _SCALAR_TYPES[logical_type.kind]

    def _render_unsupported(self, logical_type: LogicalType, path: str, depth: int) -> str:
        raise UnsupportedTypeError(logical_type.kind, path)

    def _render_list(self, logical_type: LogicalType, path: str, depth: int) -> str:
        element = logical_type.element
        inner = self.render(element.type, _child_path(path, element.name), depth + 1)
        return SparkSqlType.array(inner)

    def _render_struct(self, logical_type: LogicalType, path: str, depth: int) -> str:
        members = []
        for child in logical_type.children:
            # Structs can be reached below a map value, re-normalize here
            child_path = _child_path(path, child.name)
            child = self._normalizer.field(child, child_path, depth + 1)
            child_type = self.render(child.type, child_path, depth + 1)
            members.append((child.name, child_type))
        return SparkSqlType.struct(members)

    def _render_map(self, logical_type: LogicalType, path: str, depth: int) -> str:
        if len(logical_type.children) != 1:
            raise MalformedMapEncodingError(
                f"{len(logical_type.children)} entry fields", path
            )

        entries = logical_type.children[0].type
        if entries.kind != LogicalKind.STRUCT or len(entries.children) != 2:
            raise MalformedMapEncodingError(str(entries), path)

        key_path = _child_path(path, entries.children[0].name)
        value_path = _child_path(path, entries.children[1].name)
        key_field = self._normalizer.field(entries.children[0], key_path, depth + 1)
        value_field = self._normalizer.field(entries.children[1], value_path, depth + 1)

        key_type = self.render(key_field.type, key_path, depth + 1)
        value_type = self.render(value_field.type, value_path, depth + 1)
        return SparkSqlType.map(key_type, value_type)


def render_type(
    logical_type: LogicalType,
    options: Optional[RenderOptions] = None,
    path: str = "",
) -> str:
    """
    Render a logical type as a Spark SQL type string.

    The type is expected to be normalized already: large text and large
    list are rejected rather than coerced.
    """
    options = options or RenderOptions()
    return _Renderer(options.max_depth).render(logical_type, path, 0)


def field_to_spark(field: Field, options: Optional[RenderOptions] = None) -> str:
    """
    Spark type string for one field, errors located at the field's name.
    """
    return render_type(field.type, options, field.name)


def _quote_name(name: str, strict: bool) -> str:
    # Names are not escaped; strict mode refuses the ones that would break
    if strict and (not name or "`" in name):
        raise InvalidFieldNameError(name)
    return f"`{name}`"


def column_definition(field: Field, options: Optional[RenderOptions] = None) -> str:
    """
    `name` TYPE for one top-level field.
    """
    options = options or RenderOptions()

    if field.type.kind == LogicalKind.NULL:
        raise UnrepresentableRootTypeError(field.name)

    quoted = _quote_name(field.name, options.strict_field_names)
    spark_type = field_to_spark(normalize_field(field, options.max_depth), options)
    return f"{quoted} {spark_type}"


def get_spark_ddl(fields: Iterable[Field], options: Optional[RenderOptions] = None) -> str:
    """
    Spark DDL column list for an ordered schema, e.g.

        `name` STRING, `scores` ARRAY<INT>

    The first failing field aborts the whole fragment.
    """
    options = options or RenderOptions()
    return ", ".join(column_definition(f, options) for f in fields)

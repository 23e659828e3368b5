from dataclasses import dataclass, replace
from typing import Any, Iterable, Optional, Tuple, Union


class LogicalKind:
    """
    Closed catalogue of logical type variants.

    Every consumer (normalizer, renderer, arrow adapter) keeps one rule per
    entry of ALL; adding a kind here means revisiting each of them.
    """

    # Scalar leaves
    NULL = "null"
    BOOLEAN = "boolean"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    FLOAT16 = "float16"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    TEXT = "text"
    LARGE_TEXT = "large-text"

    # Nested containers
    LIST = "list"
    LARGE_LIST = "large-list"
    STRUCT = "struct"
    MAP = "map"

    # Not yet mapped to Spark
    TIMESTAMP = "timestamp"
    DATE32 = "date32"
    DATE64 = "date64"
    TIME32 = "time32"
    TIME64 = "time64"
    DURATION = "duration"
    INTERVAL = "interval"
    BINARY = "binary"
    LARGE_BINARY = "large-binary"
    FIXED_SIZE_BINARY = "fixed-size-binary"
    BINARY_VIEW = "binary-view"
    TEXT_VIEW = "text-view"
    LIST_VIEW = "list-view"
    LARGE_LIST_VIEW = "large-list-view"
    FIXED_SIZE_LIST = "fixed-size-list"
    DICTIONARY = "dictionary"
    UNION = "union"
    DECIMAL32 = "decimal32"
    DECIMAL64 = "decimal64"
    DECIMAL128 = "decimal128"
    DECIMAL256 = "decimal256"
    RUN_END_ENCODED = "run-end-encoded"
    EXTENSION = "extension"

    SCALARS = frozenset({
        NULL, BOOLEAN,
        INT8, INT16, INT32, INT64,
        UINT8, UINT16, UINT32, UINT64,
        FLOAT16, FLOAT32, FLOAT64,
        TEXT, LARGE_TEXT,
    })

    CONTAINERS = frozenset({LIST, LARGE_LIST, STRUCT, MAP})

    UNSUPPORTED = frozenset({
        TIMESTAMP, DATE32, DATE64, TIME32, TIME64, DURATION, INTERVAL,
        BINARY, LARGE_BINARY, FIXED_SIZE_BINARY, BINARY_VIEW, TEXT_VIEW,
        LIST_VIEW, LARGE_LIST_VIEW, FIXED_SIZE_LIST,
        DICTIONARY, UNION,
        DECIMAL32, DECIMAL64, DECIMAL128, DECIMAL256,
        RUN_END_ENCODED, EXTENSION,
    })

    ALL = SCALARS | CONTAINERS | UNSUPPORTED

    @classmethod
    def is_valid(cls, kind: str) -> bool:
        return kind in cls.ALL


@dataclass(frozen=True)
class LogicalType:
    """
    One node of a logical type tree.

    kind     : entry of LogicalKind.ALL
    children : child fields (list element, struct members, map entries,
               union members, ...), in order
    params   : variant parameters as ordered (name, value) pairs
    """

    kind: str
    children: Tuple["Field", ...] = ()
    params: Tuple[Tuple[str, Any], ...] = ()

    def __post_init__(self):
        if not LogicalKind.is_valid(self.kind):
            raise ValueError(f"Unknown logical type kind: {self.kind}")
        object.__setattr__(self, "children", tuple(self.children))
        object.__setattr__(self, "params", tuple(self.params))

    def param(self, name: str, default: Any = None) -> Any:
        for key, value in self.params:
            if key == name:
                return value
        return default

    def with_children(self, children: Iterable["Field"]) -> "LogicalType":
        return replace(self, children=tuple(children))

    @property
    def element(self) -> "Field":
        """Element field of a list-like type."""
        if not self.children:
            raise ValueError(f"{self.kind} has no element field")
        return self.children[0]

    def __str__(self) -> str:
        inner = [f"{c.name}: {c.type}" for c in self.children]
        inner += [f"{k}={v}" for k, v in self.params]
        return f"{self.kind}<{', '.join(inner)}>" if inner else self.kind


@dataclass(frozen=True)
class Field:
    """
    Named, ordered slot of a schema.
    The name is used verbatim as the Spark column / struct member name.
    """

    name: str
    type: LogicalType
    nullable: bool = True
    description: Optional[str] = None

    def with_type(self, logical_type: LogicalType) -> "Field":
        return replace(self, type=logical_type)


FieldLike = Union[Field, LogicalType]


def _as_field(value: FieldLike, name: str, nullable: bool = True) -> Field:
    if isinstance(value, Field):
        return value
    return Field(name, value, nullable)


def _scalar(kind: str):
    def build() -> LogicalType:
        return LogicalType(kind)
    build.__name__ = kind.replace("-", "_")
    return build


# --------------------------------------------------
# Scalar constructors
# --------------------------------------------------
null = _scalar(LogicalKind.NULL)
boolean = _scalar(LogicalKind.BOOLEAN)
int8 = _scalar(LogicalKind.INT8)
int16 = _scalar(LogicalKind.INT16)
int32 = _scalar(LogicalKind.INT32)
int64 = _scalar(LogicalKind.INT64)
uint8 = _scalar(LogicalKind.UINT8)
uint16 = _scalar(LogicalKind.UINT16)
uint32 = _scalar(LogicalKind.UINT32)
uint64 = _scalar(LogicalKind.UINT64)
float16 = _scalar(LogicalKind.FLOAT16)
float32 = _scalar(LogicalKind.FLOAT32)
float64 = _scalar(LogicalKind.FLOAT64)
text = _scalar(LogicalKind.TEXT)
large_text = _scalar(LogicalKind.LARGE_TEXT)
date32 = _scalar(LogicalKind.DATE32)
date64 = _scalar(LogicalKind.DATE64)
interval = _scalar(LogicalKind.INTERVAL)
binary = _scalar(LogicalKind.BINARY)
large_binary = _scalar(LogicalKind.LARGE_BINARY)
binary_view = _scalar(LogicalKind.BINARY_VIEW)
text_view = _scalar(LogicalKind.TEXT_VIEW)


# --------------------------------------------------
# Container constructors
# --------------------------------------------------
def list_(element: FieldLike) -> LogicalType:
    return LogicalType(LogicalKind.LIST, (_as_field(element, "element"),))


def large_list(element: FieldLike) -> LogicalType:
    return LogicalType(LogicalKind.LARGE_LIST, (_as_field(element, "element"),))


def struct(fields: Iterable[Union[Field, Tuple[str, LogicalType]]]) -> LogicalType:
    children = [
        f if isinstance(f, Field) else Field(f[0], f[1])
        for f in fields
    ]
    return LogicalType(LogicalKind.STRUCT, children)


def map_(key: FieldLike, value: FieldLike, keys_sorted: bool = False) -> LogicalType:
    """
    Map modelled as its wire shape: a single "entries" child whose type is
    a struct of key + value.
    """
    entries = struct([
        _as_field(key, "key", nullable=False),
        _as_field(value, "value"),
    ])
    return LogicalType(
        LogicalKind.MAP,
        (Field("entries", entries, nullable=False),),
        (("keys_sorted", keys_sorted),),
    )


# --------------------------------------------------
# Constructors for kinds Spark output does not cover yet
# --------------------------------------------------
def timestamp(unit: str = "us", tz: Optional[str] = None) -> LogicalType:
    return LogicalType(LogicalKind.TIMESTAMP, params=(("unit", unit), ("tz", tz)))


def time32(unit: str = "ms") -> LogicalType:
    return LogicalType(LogicalKind.TIME32, params=(("unit", unit),))


def time64(unit: str = "us") -> LogicalType:
    return LogicalType(LogicalKind.TIME64, params=(("unit", unit),))


def duration(unit: str = "us") -> LogicalType:
    return LogicalType(LogicalKind.DURATION, params=(("unit", unit),))


def fixed_size_binary(byte_width: int) -> LogicalType:
    return LogicalType(LogicalKind.FIXED_SIZE_BINARY, params=(("byte_width", byte_width),))


def fixed_size_list(element: FieldLike, list_size: int) -> LogicalType:
    return LogicalType(
        LogicalKind.FIXED_SIZE_LIST,
        (_as_field(element, "element"),),
        (("list_size", list_size),),
    )


def list_view(element: FieldLike) -> LogicalType:
    return LogicalType(LogicalKind.LIST_VIEW, (_as_field(element, "element"),))


def large_list_view(element: FieldLike) -> LogicalType:
    return LogicalType(LogicalKind.LARGE_LIST_VIEW, (_as_field(element, "element"),))


def decimal(precision: int, scale: int = 0, bit_width: int = 128) -> LogicalType:
    kind = f"decimal{bit_width}"
    if kind not in LogicalKind.ALL:
        raise ValueError(f"Unsupported decimal bit width: {bit_width}")
    return LogicalType(kind, params=(("precision", precision), ("scale", scale)))


def dictionary(index: LogicalType, value: LogicalType, ordered: bool = False) -> LogicalType:
    return LogicalType(
        LogicalKind.DICTIONARY,
        (Field("index", index, nullable=False), Field("value", value)),
        (("ordered", ordered),),
    )


def union(fields: Iterable[Field], mode: str = "sparse") -> LogicalType:
    return LogicalType(LogicalKind.UNION, tuple(fields), (("mode", mode),))


def run_end_encoded(run_end: LogicalType, value: LogicalType) -> LogicalType:
    return LogicalType(
        LogicalKind.RUN_END_ENCODED,
        (Field("run_ends", run_end, nullable=False), Field("values", value)),
    )


def extension(name: str, storage: LogicalType) -> LogicalType:
    return LogicalType(
        LogicalKind.EXTENSION,
        (Field("storage", storage),),
        (("name", name),),
    )

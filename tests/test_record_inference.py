import datetime
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Annotated, Dict, List, Optional, Sequence, Tuple

import pyarrow as pa
import pytest

from arrow_spark.canonical import logical_type as lt
from arrow_spark.canonical.logical_type import Field, LogicalKind
from arrow_spark.inference.record_inference import infer_fields, infer_schema
from arrow_spark.utils.exceptions import SchemaInferenceError


@dataclass
class Point:
    x: float
    y: float


@dataclass
class Reading:
    sensor: str
    value: Optional[float]
    tags: List[str]
    location: Point
    attrs: Dict[str, int] = field(default_factory=dict)


@dataclass
class Narrow:
    small: Annotated[int, lt.int32()]
    single: Annotated[float, pa.float32()]
    maybe: Annotated[Optional[int], lt.int16()]


@dataclass
class Node:
    name: str
    children: List["Node"]


def test_declaration_order_and_tracing_defaults():
    fields = infer_fields(Reading)

    assert [f.name for f in fields] == ["sensor", "value", "tags", "location", "attrs"]
    assert fields[0] == Field("sensor", lt.large_text(), nullable=False)
    assert fields[1] == Field("value", lt.float64(), nullable=True)
    assert fields[2] == Field(
        "tags", lt.large_list(Field("element", lt.large_text(), nullable=False)), nullable=False
    )


def test_nested_dataclass_is_a_struct():
    location = infer_fields(Reading)[3]
    assert location.type == lt.struct([
        Field("x", lt.float64(), nullable=False),
        Field("y", lt.float64(), nullable=False),
    ])


def test_dict_becomes_map():
    attrs = infer_fields(Reading)[4]
    assert attrs.type == lt.map_(
        Field("key", lt.large_text(), nullable=False),
        Field("value", lt.int64(), nullable=False),
    )


def test_annotated_overrides():
    small, single, maybe = infer_fields(Narrow)
    assert small == Field("small", lt.int32(), nullable=False)
    assert single == Field("single", lt.float32(), nullable=False)
    assert maybe == Field("maybe", lt.int16(), nullable=True)


@pytest.mark.parametrize(
    "annotation, kind",
    [
        (bool, LogicalKind.BOOLEAN),
        (int, LogicalKind.INT64),
        (bytes, LogicalKind.LARGE_BINARY),
        (datetime.datetime, LogicalKind.TIMESTAMP),
        (datetime.date, LogicalKind.DATE32),
        (datetime.time, LogicalKind.TIME64),
        (datetime.timedelta, LogicalKind.DURATION),
        (Decimal, LogicalKind.DECIMAL128),
        (Sequence[int], LogicalKind.LARGE_LIST),
        (Tuple[int, ...], LogicalKind.LARGE_LIST),
        (list[str], LogicalKind.LARGE_LIST),
        (dict[str, float], LogicalKind.MAP),
        (int | None, LogicalKind.INT64),
    ],
)
def test_scalar_and_container_annotations(annotation, kind):
    @dataclass
    class Holder:
        value: annotation

    (f,) = infer_fields(Holder)
    assert f.type.kind == kind


def test_pep604_optional_is_nullable():
    @dataclass
    class Holder:
        value: str | None

    assert infer_fields(Holder)[0].nullable is True


@pytest.mark.parametrize(
    "annotation",
    [
        object,
        List,
        Tuple[int, str],
        Optional[int] | str,
        Dict[Optional[str], int],
    ],
)
def test_unsupported_annotations(annotation):
    @dataclass
    class Holder:
        value: annotation

    with pytest.raises(SchemaInferenceError) as exc:
        infer_fields(Holder)
    assert exc.value.field_path.startswith("value")


def test_not_a_dataclass():
    class Plain:
        a: int

    with pytest.raises(SchemaInferenceError, match="not a dataclass"):
        infer_fields(Plain)


def test_recursive_record_rejected():
    with pytest.raises(SchemaInferenceError, match="Recursive"):
        infer_fields(Node)


def test_infer_schema_is_cached():
    assert infer_schema(Reading) is infer_schema(Reading)
    assert list(infer_schema(Reading)) == infer_fields(Reading)

import pytest

from arrow_spark.canonical import logical_type as lt
from arrow_spark.canonical.logical_type import Field, LogicalKind, LogicalType
from arrow_spark.pipeline.normalizer import normalize_field, normalize_schema, normalize_type
from arrow_spark.utils.exceptions import NestingTooDeepError

_LARGE = {LogicalKind.LARGE_TEXT, LogicalKind.LARGE_LIST}


def _kinds(logical_type: LogicalType):
    yield logical_type.kind
    for child in logical_type.children:
        yield from _kinds(child.type)


def test_large_text_becomes_text():
    assert normalize_type(lt.large_text()) == lt.text()


def test_large_list_becomes_list_with_normalized_element():
    result = normalize_type(lt.large_list(lt.large_text()))
    assert result == lt.list_(lt.text())


def test_list_element_is_normalized():
    result = normalize_type(lt.list_(lt.large_list(lt.large_text())))
    assert result == lt.list_(lt.list_(lt.text()))


def test_struct_children_keep_order_names_and_nullability():
    s = lt.struct([
        Field("b", lt.large_text(), nullable=False, description="bee"),
        Field("a", lt.int32()),
    ])
    result = normalize_type(s)
    assert [c.name for c in result.children] == ["b", "a"]
    assert result.children[0] == Field("b", lt.text(), nullable=False, description="bee")
    assert result.children[1] == Field("a", lt.int32())


def test_map_key_and_value_normalized():
    m = lt.map_(lt.large_text(), lt.struct([("tags", lt.large_list(lt.large_text()))]))
    result = normalize_type(m)
    assert result == lt.map_(lt.text(), lt.struct([("tags", lt.list_(lt.text()))]))


@pytest.mark.parametrize(
    "logical_type",
    [
        lt.int8(),
        lt.boolean(),
        lt.null(),
        lt.timestamp("ms", "UTC"),
        lt.large_binary(),
        lt.fixed_size_list(lt.large_text(), 3),
        lt.dictionary(lt.int32(), lt.large_text()),
        lt.decimal(10, 2),
    ],
)
def test_other_kinds_unchanged(logical_type):
    assert normalize_type(logical_type) is logical_type


def test_every_kind_has_a_rule():
    for kind in LogicalKind.ALL:
        # Containers need a child to be well-formed; only check the dispatch
        children = (Field("element", lt.int32()),) if kind in (
            LogicalKind.LIST, LogicalKind.LARGE_LIST
        ) else ()
        if kind == LogicalKind.MAP:
            logical_type = lt.map_(lt.text(), lt.int32())
        else:
            logical_type = LogicalType(kind, children)
        normalize_type(logical_type)


def test_normalize_field_keeps_metadata():
    f = Field("name", lt.large_text(), nullable=False, description="the name")
    result = normalize_field(f)
    assert result == Field("name", lt.text(), nullable=False, description="the name")


def test_normalization_is_idempotent():
    schema = [
        Field("name", lt.large_text(), nullable=False),
        Field("scores", lt.large_list(lt.int32())),
        Field("attrs", lt.map_(lt.large_text(), lt.large_list(lt.large_text()))),
        Field("point", lt.struct([("x", lt.float64()), ("label", lt.large_text())])),
    ]
    once = normalize_schema(schema)
    twice = normalize_schema(once)
    assert once == twice
    for f in once:
        assert not _LARGE & set(_kinds(f.type))


def test_schema_order_preserved():
    schema = [Field(n, lt.large_text()) for n in ("z", "a", "m")]
    assert [f.name for f in normalize_schema(schema)] == ["z", "a", "m"]


def test_normalized_field_is_returned_as_is():
    f = Field("point", lt.struct([("x", lt.float64()), ("tags", lt.list_(lt.text()))]))
    assert normalize_field(f) is f


def test_deep_tree_raises_nesting_error():
    nested = lt.large_text()
    for _ in range(2000):
        nested = lt.large_list(nested)

    with pytest.raises(NestingTooDeepError) as exc:
        normalize_schema([Field("deep", nested)])
    assert exc.value.max_depth == 64

    with pytest.raises(NestingTooDeepError):
        normalize_type(nested, max_depth=10)


def test_depth_limit_is_inclusive():
    nested = lt.large_text()
    for _ in range(3):
        nested = lt.large_list(nested)

    assert normalize_type(nested, max_depth=3) == lt.list_(lt.list_(lt.list_(lt.text())))
    with pytest.raises(NestingTooDeepError):
        normalize_type(nested, max_depth=2)

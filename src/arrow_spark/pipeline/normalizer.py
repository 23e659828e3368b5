from typing import Callable, Dict, Iterable, List

from arrow_spark.canonical.logical_type import Field, LogicalKind, LogicalType
from arrow_spark.config import DEFAULT_MAX_DEPTH
from arrow_spark.utils.exceptions import NestingTooDeepError


def _child_path(path: str, name: str) -> str:
    return f"{path}.{name}" if path else name


class TypeNormalizer:
    """
    Recursive large -> standard rewrite, bounded like the renderer:
    list elements, struct members and map keys/values sit one level below
    their parent, the map "entries" wrapper does not count.
    """

    def __init__(self, max_depth: int):
        self.max_depth = max_depth
        self._rules: Dict[str, Callable[[LogicalType, str, int], LogicalType]] = {
            LogicalKind.LARGE_TEXT: self._large_text,
            LogicalKind.LARGE_LIST: self._large_list,
            LogicalKind.LIST: self._children,
            LogicalKind.STRUCT: self._children,
            LogicalKind.MAP: self._map,
        }
        # Every other kind, including the unsupported catalogue, is left alone
        for kind in LogicalKind.ALL - set(self._rules):
            self._rules[kind] = self._unchanged

    def type(self, logical_type: LogicalType, path: str, depth: int) -> LogicalType:
        if depth > self.max_depth:
            raise NestingTooDeepError(self.max_depth, path)
        return self._rules[logical_type.kind](logical_type, path, depth)

    def field(self, field: Field, path: str, depth: int) -> Field:
        normalized = self.type(field.type, path, depth)
        if normalized is field.type:
            return field
        return field.with_type(normalized)

    def _normalize_children(self, logical_type: LogicalType, path: str, depth: int) -> LogicalType:
        children = [
            self.field(child, _child_path(path, child.name), depth)
            for child in logical_type.children
        ]
        if all(new is old for new, old in zip(children, logical_type.children)):
            return logical_type
        return logical_type.with_children(children)

    def _children(self, logical_type: LogicalType, path: str, depth: int) -> LogicalType:
        return self._normalize_children(logical_type, path, depth + 1)

    def _map(self, logical_type: LogicalType, path: str, depth: int) -> LogicalType:
        # entries is list<struct<key, value>> on the wire; keys/values land at depth + 1
        children = [self.field(child, path, depth) for child in logical_type.children]
        if all(new is old for new, old in zip(children, logical_type.children)):
            return logical_type
        return logical_type.with_children(children)

    def _large_text(self, logical_type: LogicalType, path: str, depth: int) -> LogicalType:
        # Spark has a single STRING type; the 64-bit offsets are never needed
        return LogicalType(LogicalKind.TEXT)

    def _large_list(self, logical_type: LogicalType, path: str, depth: int) -> LogicalType:
        element = logical_type.element
        return LogicalType(
            LogicalKind.LIST,
            (self.field(element, _child_path(path, element.name), depth + 1),),
        )

    def _unchanged(self, logical_type: LogicalType, path: str, depth: int) -> LogicalType:
        return logical_type


def normalize_type(
    logical_type: LogicalType,
    max_depth: int = DEFAULT_MAX_DEPTH,
    path: str = "",
) -> LogicalType:
    """
    Replace large text / large list with their standard counterparts,
    anywhere in the tree. Trees nesting past max_depth raise
    NestingTooDeepError.
    """
    return TypeNormalizer(max_depth).type(logical_type, path, 0)


def normalize_field(field: Field, max_depth: int = DEFAULT_MAX_DEPTH) -> Field:
    """
    Normalize a field's type; name, nullability and description are kept.
    """
    return TypeNormalizer(max_depth).field(field, field.name, 0)


def normalize_schema(fields: Iterable[Field], max_depth: int = DEFAULT_MAX_DEPTH) -> List[Field]:
    normalizer = TypeNormalizer(max_depth)
    return [normalizer.field(f, f.name, 0) for f in fields]

"""Free-function helpers for navigating traversal results.

These operate on an explicit node argument and never mutate it, so results
returned by ``query`` stay plain dicts and lists.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Callable, Iterable, List, Optional, Tuple

from hateoas_query.selector import is_index

__all__ = [
    "resolve_path",
    "get",
    "has",
    "keys",
    "values",
    "find",
    "map_nodes",
    "filter_nodes",
    "reduce_nodes",
    "origin_chain",
    "strip_origin",
]

_NO_INITIAL = object()


def resolve_path(node: Any, path: str) -> Tuple[bool, Any]:
    """Resolve a dotted path through nested mappings and sequences.

    Integer segments index into lists. A key present with a ``None`` value is
    found, which differs from a missing key.

    Args:
        node: Mapping or sequence to resolve against.
        path: Dotted path, e.g. ``"owner.addresses.0.city"``.

    Returns:
        Tuple of ``(found, value)``; ``value`` is None when not found.
    """
    current = node
    for part in path.split("."):
        if isinstance(current, Mapping):
            if part not in current:
                return False, None
            current = current[part]
        elif _is_sequence(current) and is_index(part) and int(part) < len(current):
            current = current[int(part)]
        else:
            return False, None
    return True, current


def get(node: Any, path: str, default: Any = None) -> Any:
    """Return the value at ``path`` or ``default`` when it is missing."""
    found, value = resolve_path(node, path)
    return value if found else default


def has(node: Any, path: str) -> bool:
    return resolve_path(node, path)[0]


def keys(node: Any) -> List[Any]:
    if isinstance(node, Mapping):
        return list(node.keys())
    if _is_sequence(node):
        return list(range(len(node)))
    return []


def values(node: Any) -> List[Any]:
    if isinstance(node, Mapping):
        return list(node.values())
    if _is_sequence(node):
        return list(node)
    return []


def find(nodes: Iterable[Any], predicate: Callable[[Any], bool]) -> Optional[Any]:
    """Return the first node satisfying ``predicate``, or None."""
    for node in nodes or ():
        if predicate(node):
            return node
    return None


def map_nodes(nodes: Iterable[Any], fn: Callable[[Any], Any]) -> List[Any]:
    return [fn(node) for node in nodes or ()]


def filter_nodes(nodes: Iterable[Any], predicate: Callable[[Any], bool]) -> List[Any]:
    return [node for node in nodes or () if predicate(node)]


def reduce_nodes(
    nodes: Iterable[Any],
    fn: Callable[[Any, Any], Any],
    initial: Any = _NO_INITIAL,
) -> Any:
    """Fold nodes left to right.

    Without ``initial`` the first node seeds the accumulator; an empty input
    then returns None.
    """
    iterator = iter(nodes or ())
    if initial is _NO_INITIAL:
        try:
            accumulator = next(iterator)
        except StopIteration:
            return None
    else:
        accumulator = initial
    for node in iterator:
        accumulator = fn(accumulator, node)
    return accumulator


def origin_chain(node: Any, origin_key: str = "_origin") -> List[Any]:
    """Follow origin back-references from ``node`` up to the traversal root.

    Returns:
        Origins ordered nearest first; empty when ``node`` has no origin.
    """
    chain: List[Any] = []
    seen = set()
    current = node
    while isinstance(current, Mapping) and origin_key in current:
        current = current[origin_key]
        if id(current) in seen:
            break
        seen.add(id(current))
        chain.append(current)
    return chain


def strip_origin(value: Any, origin_key: str = "_origin") -> Any:
    """Return a deep copy of ``value`` without origin back-references."""
    if isinstance(value, Mapping):
        return {
            key: strip_origin(item, origin_key)
            for key, item in value.items()
            if key != origin_key
        }
    if _is_sequence(value):
        return [strip_origin(item, origin_key) for item in value]
    return value


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))

"""Flattening of branched traversal output."""

from __future__ import annotations

from typing import Any, List

__all__ = ["concat_reducer"]


def concat_reducer(collection: Any, depth: int = 1) -> Any:
    """Collapse fan-out nesting into a single flat list.

    A list whose first non-``None`` element is itself a list is treated as one
    branch per fanned-out item and concatenated in branch order. Branches that
    are lists are spliced in, ``None`` branches (pruned in lenient mode)
    vanish, and any other value is kept as a single element.

    One fold is applied per fan-out level, so lists found at the leaves keep
    their own structure beyond that.

    Scalars, mappings, ``None`` and already-flat lists are returned unchanged.

    Args:
        collection: Raw output of ``query_isolated``.
        depth: Number of fan-out levels to fold.

    Returns:
        The flattened value.
    """
    for _ in range(depth):
        if not _is_nested(collection):
            break
        collection = _concat_branches(collection)
    return collection


def _is_nested(collection: Any) -> bool:
    if not isinstance(collection, list):
        return False
    first = next((branch for branch in collection if branch is not None), None)
    return isinstance(first, list)


def _concat_branches(branches: List[Any]) -> List[Any]:
    accumulator: List[Any] = []
    for branch in branches:
        if branch is None:
            continue
        if isinstance(branch, list):
            accumulator.extend(branch)
        else:
            accumulator.append(branch)
    return accumulator

"""Configuration classes for hateoas_query traversals."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Awaitable, Callable, Collection, Dict, Optional, Union

# request(descriptor) -> node, collection, or an awaitable of either
RequestFunction = Callable[[Dict[str, Any]], Union[Awaitable[Any], Any]]

# Leaf restriction: a collection of keys or a (key, value) -> bool predicate
OnlySpec = Union[Collection[str], Callable[[str, Any], bool]]


@dataclass(frozen=True)
class QueryConfig:
    """Traversal-wide configuration bound once and reused for every call.

    Attributes:
        request: Transport function called with a request descriptor.
        strict: Raise ``TraversalError`` on unresolved steps instead of
            pruning the branch to ``None``.
        links_key: Node key holding the link mapping.
        actions_key: Node key holding the action mapping.
        items_key: Response key holding a collection's items.
        origin_key: Key set on fanned-out results pointing to their origin node.
        href_key: Key of a link entry holding the resource path.
    """

    request: Optional[RequestFunction] = None
    strict: bool = False
    links_key: str = "links"
    actions_key: str = "actions"
    items_key: str = "items"
    origin_key: str = "_origin"
    href_key: str = "href"

    def with_overrides(self, **overrides: Any) -> "QueryConfig":
        """Return a copy with the given fields replaced."""
        return replace(self, **overrides)


@dataclass(frozen=True)
class QueryOptions:
    """Per-call options.

    Attributes:
        action_params: Parameters forwarded with action requests.
        only: Restricts which keys of the final node are returned.
    """

    action_params: Any = None
    only: Optional[OnlySpec] = None


# Global default configuration instance
DEFAULT_CONFIG = QueryConfig()

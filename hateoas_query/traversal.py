"""Selector-driven traversal of hypermedia nodes.

Usage:
    from hateoas_query import hateoas

    query = hateoas(request=client_request, strict=True)

    # Every invoice of every account of the user, flattened
    invoices = await query(user, "accounts[].invoices[]")

    # Unreduced: one sub-list per account
    per_account = await query.isolated(user, "accounts[].invoices[]")

Each call consumes the head step of the selector, resolves it against the
current node (link, action, then plain attribute), issues at most one request
through the injected transport, and recurses into the response with the
remaining selector. Iterable steps fan out concurrently over the response's
items.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from hateoas_query.config import (
    DEFAULT_CONFIG,
    OnlySpec,
    QueryConfig,
    QueryOptions,
    RequestFunction,
)
from hateoas_query.errors import TraversalError
from hateoas_query.logging import get_logger
from hateoas_query.reduce import concat_reducer
from hateoas_query.selector import Step, is_index, parse_step, split_selector

__all__ = [
    "TraversalContext",
    "query",
    "query_isolated",
    "HateoasQuery",
    "hateoas",
    "create_query",
    "create_isolated",
]

logger = get_logger(__name__)


@dataclass(frozen=True)
class TraversalContext:
    """State threaded through every recursive traversal call.

    Attributes:
        config: Bound traversal configuration.
        options: Per-call options.
        results: Accumulator receiving every response, most recent first.
        selector: Full selector the traversal was started with.
        fan_out_depth: Deepest fan-out level reached by any branch, updated
            as branches run. Tells the reducer how many levels to fold.
    """

    config: QueryConfig
    options: QueryOptions
    results: List[Any]
    selector: str
    fan_out_depth: List[int] = field(default_factory=lambda: [0])


async def query_isolated(
    node: Any,
    selector: Optional[str],
    config: Optional[QueryConfig] = None,
    options: Optional[QueryOptions] = None,
    results: Optional[List[Any]] = None,
) -> Any:
    """Traverse ``node`` along ``selector`` without flattening fan-out results.

    Args:
        node: Root node to start from.
        selector: Dotted selector string.
        config: Traversal configuration; ``DEFAULT_CONFIG`` when omitted.
        options: Per-call options (action parameters, leaf key restriction).
        results: Optional list collecting every intermediate response.

    Returns:
        The final node or value, a list per fan-out level, or ``None`` for a
        branch pruned in lenient mode.

    Raises:
        TraversalError: A step could not be resolved and ``config.strict`` is set.
    """
    raw, _ = await _run(node, selector, config, options, results)
    return raw


async def query(
    node: Any,
    selector: Optional[str],
    config: Optional[QueryConfig] = None,
    options: Optional[QueryOptions] = None,
    results: Optional[List[Any]] = None,
) -> Any:
    """Traverse ``node`` along ``selector`` and flatten fan-out results.

    Same arguments as ``query_isolated``; the result is passed through
    ``concat_reducer`` so fanned-out branches come back as one flat list.
    """
    raw, depth = await _run(node, selector, config, options, results)
    return concat_reducer(raw, depth)


async def _run(
    node: Any,
    selector: Optional[str],
    config: Optional[QueryConfig],
    options: Optional[QueryOptions],
    results: Optional[List[Any]],
) -> Tuple[Any, int]:
    """Run a traversal, returning its raw result and fan-out depth."""
    context = TraversalContext(
        config=config or DEFAULT_CONFIG,
        options=options or QueryOptions(),
        results=results if results is not None else [],
        selector=selector or "",
    )
    raw = await _traverse(node, selector or "", context, 0)
    return raw, context.fan_out_depth[0]


async def _traverse(
    node: Any, selector: str, context: TraversalContext, level: int
) -> Any:
    if not selector:
        return _apply_only(node, context.options.only)

    head, remaining = split_selector(selector)
    step = parse_step(head)
    config = context.config
    descriptor = _request_descriptor(node, step, context)

    if not (descriptor.get("path") or descriptor.get("action")):
        found, item = _get_attribute(node, step.name)
        if not found:
            if config.strict:
                raise TraversalError(context.selector, step.raw)
            logger.debug(
                f"Could not traverse `{context.selector}` at step `{step.raw}`"
            )
            return None

        context.results.insert(0, item)
        response = await _traverse(item, remaining, context, level)
        return _tag_origin(response, node, config.origin_key)

    response = await _send(descriptor, config)
    context.results.insert(0, response)

    if not step.iterable:
        return await _traverse(response, remaining, context, level)

    items = _select_items(response, step, context)
    logger.debug(f"Fanning out `{step.raw}` over {len(items)} item(s)")
    depth = context.fan_out_depth
    depth[0] = max(depth[0], level + 1)
    return await _fan_out(node, items, remaining, context, level + 1)


def _request_descriptor(
    node: Any, step: Step, context: TraversalContext
) -> Dict[str, Any]:
    """Build the request descriptor for a step; empty when nothing matches."""
    config = context.config
    if step.is_action:
        actions = _get_mapping(node, config.actions_key)
        action = actions.get(step.name)
        descriptor = dict(action) if isinstance(action, Mapping) else {}
        descriptor["params"] = context.options.action_params
        return descriptor

    link = _get_mapping(node, config.links_key).get(step.name)
    if isinstance(link, Mapping):
        return {"path": link.get(config.href_key)}
    if isinstance(link, str):
        return {"path": link}
    return {}


async def _send(descriptor: Dict[str, Any], config: QueryConfig) -> Any:
    request: Optional[RequestFunction] = config.request
    if request is None:
        raise TypeError("No request function configured for a link or action step")

    logger.debug(f"Requesting {descriptor}")
    response = request(descriptor)
    if inspect.isawaitable(response):
        response = await response
    return response


def _select_items(response: Any, step: Step, context: TraversalContext) -> List[Any]:
    """Return the items a fan-out step iterates over."""
    if isinstance(response, Mapping):
        items = response.get(context.config.items_key)
    else:
        items = response

    if not _is_sequence(items):
        if context.config.strict:
            raise TraversalError(context.selector, step.raw)
        logger.debug(f"Response for `{step.raw}` exposes no collection")
        return []

    if step.index is None:
        return list(items)
    if step.index < len(items):
        return [items[step.index]]
    return []


async def _fan_out(
    origin: Any,
    items: List[Any],
    remaining: str,
    context: TraversalContext,
    level: int,
) -> List[Any]:
    """Traverse every item concurrently; the first failure cancels the rest."""
    tasks = [
        asyncio.ensure_future(_traverse(item, remaining, context, level))
        for item in items
    ]
    try:
        responses = await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            if not task.done():
                task.cancel()
        raise
    origin_key = context.config.origin_key
    return [_tag_origin(response, origin, origin_key) for response in responses]


def _tag_origin(response: Any, origin: Any, origin_key: str) -> Any:
    """Return a copy of a mapping result carrying a back-reference to ``origin``.

    Lists keep the origins set on their own elements; scalars and ``None``
    cannot carry one and are returned as is.
    """
    if isinstance(response, Mapping):
        tagged = dict(response)
        tagged[origin_key] = origin
        return tagged
    return response


def _apply_only(node: Any, only: Optional[OnlySpec]) -> Any:
    if only is None or not isinstance(node, Mapping):
        return node
    if callable(only):
        return {key: value for key, value in node.items() if only(key, value)}
    wanted = {only} if isinstance(only, str) else set(only)
    return {key: value for key, value in node.items() if key in wanted}


def _get_mapping(node: Any, key: str) -> Mapping:
    if isinstance(node, Mapping):
        value = node.get(key)
        if isinstance(value, Mapping):
            return value
    return {}


def _get_attribute(node: Any, name: str) -> Tuple[bool, Any]:
    """Look up a plain attribute; present keys count even when falsy or None."""
    if isinstance(node, Mapping):
        if name in node:
            return True, node[name]
        return False, None
    if _is_sequence(node) and is_index(name):
        index = int(name)
        if index < len(node):
            return True, node[index]
    return False, None


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


class HateoasQuery:
    """Traversal bound to a request function and strictness.

    Calling the instance runs ``query``; ``isolated`` runs ``query_isolated``.

    Example:
        query = hateoas(request=fetch, strict=True)
        ids = [invoice["id"] for invoice in await query(user, "invoices[]")]
    """

    def __init__(self, config: QueryConfig) -> None:
        self.config = config

    async def __call__(
        self,
        node: Any,
        selector: Optional[str],
        action_params: Any = None,
        only: Optional[OnlySpec] = None,
        results: Optional[List[Any]] = None,
    ) -> Any:
        return await self.query(node, selector, action_params, only, results)

    async def query(
        self,
        node: Any,
        selector: Optional[str],
        action_params: Any = None,
        only: Optional[OnlySpec] = None,
        results: Optional[List[Any]] = None,
    ) -> Any:
        """Flattened traversal, see ``query``."""
        options = QueryOptions(action_params=action_params, only=only)
        return await query(node, selector, self.config, options, results)

    async def isolated(
        self,
        node: Any,
        selector: Optional[str],
        action_params: Any = None,
        only: Optional[OnlySpec] = None,
        results: Optional[List[Any]] = None,
    ) -> Any:
        """Unreduced traversal, see ``query_isolated``."""
        options = QueryOptions(action_params=action_params, only=only)
        return await query_isolated(node, selector, self.config, options, results)

    def __repr__(self) -> str:
        return f"HateoasQuery(strict={self.config.strict!r})"


def hateoas(
    request: Optional[RequestFunction] = None,
    strict: bool = False,
    **config_overrides: Any,
) -> HateoasQuery:
    """Bind a request function and strictness into a reusable traversal.

    Args:
        request: Transport called with each request descriptor.
        strict: Raise on unresolved steps instead of pruning them.
        **config_overrides: Other ``QueryConfig`` fields (e.g. ``links_key``).

    Returns:
        A ``HateoasQuery`` instance.
    """
    config = DEFAULT_CONFIG.with_overrides(
        request=request, strict=strict, **config_overrides
    )
    return HateoasQuery(config)


def create_query(
    request: Optional[RequestFunction] = None,
    strict: bool = False,
    **config_overrides: Any,
):
    """Return the bound flattening traversal function."""
    return hateoas(request, strict, **config_overrides).query


def create_isolated(
    request: Optional[RequestFunction] = None,
    strict: bool = False,
    **config_overrides: Any,
):
    """Return the bound unreduced traversal function."""
    return hateoas(request, strict, **config_overrides).isolated

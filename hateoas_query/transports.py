"""Ready-made request functions.

A request function receives a descriptor ``{"path": ..., "action": ...,
"params": ...}`` and returns (or resolves to) the next node. The traversal
propagates any error these raise without wrapping it.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from hateoas_query.errors import TransportError
from hateoas_query.logging import get_logger

__all__ = ["fixture_transport", "http_transport"]

logger = get_logger(__name__)

Transport = Callable[[Dict[str, Any]], Awaitable[Any]]


def fixture_transport(
    responses: Mapping[str, Any],
    actions: Optional[Mapping[str, Any]] = None,
) -> Transport:
    """Serve canned responses keyed by link path and action identifier.

    Args:
        responses: Mapping of link path to response node.
        actions: Mapping of action identifier to response node.

    Returns:
        Coroutine function usable as ``QueryConfig.request``.
    """
    action_responses = actions or {}

    async def request(descriptor: Dict[str, Any]) -> Any:
        action = descriptor.get("action")
        if action:
            if action not in action_responses:
                raise TransportError(f"No fixture for action '{action}'")
            return action_responses[action]

        path = descriptor.get("path")
        if path not in responses:
            raise TransportError(f"No fixture for path '{path}'")
        return responses[path]

    return request


def http_transport(
    client: httpx.AsyncClient,
    base_url: Optional[str] = None,
) -> Transport:
    """Send request descriptors over HTTP with an httpx client.

    Links are fetched with GET, ``params`` going to the query string. Actions
    use the descriptor's ``method`` (POST by default) against its ``href`` or
    ``path`` and send ``params`` as a JSON body.

    Args:
        client: Client owning connection pooling, timeouts and auth.
        base_url: Prefix joined with relative paths. Absolute URLs are used as is.

    Returns:
        Coroutine function returning the decoded JSON body.
    """

    async def request(descriptor: Dict[str, Any]) -> Any:
        action = descriptor.get("action")
        params = descriptor.get("params")
        target = descriptor.get("path") or descriptor.get("href")
        if not target:
            raise TransportError(f"Descriptor has no URL: {descriptor!r}")
        url = _join_url(base_url, target)

        if action:
            method = str(descriptor.get("method") or "POST").upper()
            logger.debug(f"{method} {url} (action '{action}')")
            response = await client.request(method, url, json=params)
        else:
            logger.debug(f"GET {url}")
            response = await client.get(url, params=params)

        response.raise_for_status()
        return response.json()

    return request


def _join_url(base_url: Optional[str], target: str) -> str:
    if base_url is None or "://" in target:
        return target
    return base_url.rstrip("/") + "/" + target.lstrip("/")

"""hateoas_query: selector-driven traversal of hypermedia APIs.

Follow links, actions and attributes of HATEOAS-style responses with a dotted
selector instead of issuing each request by hand.

Primary API:
    hateoas() - Bind a request function and strictness into a traversal
    query() / query_isolated() - Flattened / unreduced traversal coroutines
    QueryConfig, QueryOptions - Traversal configuration
    parse_selector() - Selector Parser
    concat_reducer() - Result Reducer

Example:
    from hateoas_query import hateoas

    query = hateoas(request=fetch, strict=True)
    invoices = await query(user, "accounts[].invoices[]")
    await query(order, "@cancel", action_params={"reason": "duplicate"})
"""

from __future__ import annotations

from hateoas_query import accessors, cli, logging
from hateoas_query._version import __version__
from hateoas_query.config import DEFAULT_CONFIG, QueryConfig, QueryOptions
from hateoas_query.errors import TransportError, TraversalError
from hateoas_query.reduce import concat_reducer
from hateoas_query.selector import (
    ActionStep,
    AttributeStep,
    Step,
    format_selector,
    parse_selector,
    parse_step,
    split_selector,
)
from hateoas_query.transports import fixture_transport, http_transport
from hateoas_query.traversal import (
    HateoasQuery,
    create_isolated,
    create_query,
    hateoas,
    query,
    query_isolated,
)

__all__ = [
    # Version
    "__version__",
    # Traversal (primary API)
    "hateoas",
    "HateoasQuery",
    "create_query",
    "create_isolated",
    "query",
    "query_isolated",
    # Configuration
    "QueryConfig",
    "QueryOptions",
    "DEFAULT_CONFIG",
    # Selectors
    "Step",
    "AttributeStep",
    "ActionStep",
    "split_selector",
    "parse_step",
    "parse_selector",
    "format_selector",
    # Results
    "concat_reducer",
    # Errors
    "TraversalError",
    "TransportError",
    # Transports
    "fixture_transport",
    "http_transport",
    # Utilities
    "accessors",
    "cli",
    "logging",
]

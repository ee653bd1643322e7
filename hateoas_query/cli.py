"""Command-line interface for hateoas_query."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from time import perf_counter
from typing import Any, List, Optional

import httpx

from hateoas_query.accessors import strip_origin
from hateoas_query.config import QueryConfig, QueryOptions, RequestFunction
from hateoas_query.loader import load_document, load_fixtures
from hateoas_query.logging import get_logger, set_global_log_level
from hateoas_query.selector import parse_selector
from hateoas_query.transports import fixture_transport, http_transport
from hateoas_query.traversal import query, query_isolated

logger = get_logger(__name__)


def _format_duration(seconds: float) -> str:
    """Return a concise human-readable duration string.

    Examples:
        0.123 -> "123.0 ms"; 1.234 -> "1.23 s".
    """
    if seconds < 1.0:
        return f"{seconds * 1000.0:.1f} ms"
    return f"{seconds:.2f} s"


async def _traverse(
    node: Any,
    selector: str,
    config: QueryConfig,
    options: QueryOptions,
    isolated: bool,
    base_url: Optional[str],
) -> Any:
    """Run one traversal, opening an HTTP client when a base URL is given."""
    runner = query_isolated if isolated else query
    if base_url is None:
        return await runner(node, selector, config, options)

    async with httpx.AsyncClient() as client:
        config = config.with_overrides(request=http_transport(client, base_url))
        return await runner(node, selector, config, options)


def _run_query(
    node_path: Path,
    selector: str,
    fixtures: Optional[Path] = None,
    base_url: Optional[str] = None,
    strict: bool = False,
    isolated: bool = False,
    only: Optional[List[str]] = None,
    action_params: Optional[str] = None,
    output: Optional[Path] = None,
) -> None:
    """Traverse a root node loaded from disk and emit the result as JSON.

    Args:
        node_path: YAML/JSON file holding the root node.
        selector: Selector to follow.
        fixtures: Optional fixture file answering link and action requests.
        base_url: Optional API base URL; requests go over HTTP when set.
        strict: Fail on unresolved steps.
        isolated: Skip flattening of fan-out results.
        only: Keys to keep on the final node(s).
        action_params: JSON text forwarded as action parameters.
        output: Write JSON here instead of stdout.
    """
    logger.info(f"Loading root node from: {node_path}")
    _start_time = perf_counter()

    try:
        node = load_document(node_path.read_text())

        request: Optional[RequestFunction] = None
        if fixtures is not None:
            responses, actions = load_fixtures(fixtures.read_text())
            logger.info(
                f"Loaded {len(responses)} response and {len(actions)} action fixture(s)"
            )
            request = fixture_transport(responses, actions)

        params = json.loads(action_params) if action_params is not None else None
        config = QueryConfig(request=request, strict=strict)
        options = QueryOptions(action_params=params, only=only)

        logger.info(f"Traversing `{selector}`")
        result = asyncio.run(
            _traverse(node, selector, config, options, isolated, base_url)
        )
        json_str = json.dumps(
            strip_origin(result, config.origin_key), indent=2, default=str
        )

        if output is not None:
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(json_str)
            logger.info(f"Result written to: {output}")
        else:
            print(json_str)

        _elapsed = perf_counter() - _start_time
        logger.info(f"Traversal completed in {_format_duration(_elapsed)}")

    except FileNotFoundError as e:
        logger.error(f"File not found: {e.filename}")
        print(f"ERROR: File not found: {e.filename}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        logger.error(f"Failed to traverse: {type(e).__name__}: {e}")
        print(f"ERROR: Failed to traverse: {type(e).__name__}: {e}", file=sys.stderr)
        sys.exit(1)


def _parse(selector: str) -> None:
    """Print the classification of every step of a selector."""
    steps = parse_selector(selector)
    if not steps:
        print("(empty selector)")
        return
    for position, step in enumerate(steps):
        kind = "action" if step.is_action else "attribute"
        if step.is_filtered:
            fan_out = f"item {step.index}"
        elif step.iterable:
            fan_out = "all items"
        else:
            fan_out = "-"
        print(f"{position}: {kind:<9} {step.name!r} fan-out={fan_out}")


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the ``hateoas-query`` command.

    Args:
        argv: Optional list of command-line arguments. If ``None``, ``sys.argv``
            is used.
    """
    parser = argparse.ArgumentParser(
        prog="hateoas-query",
        description="Follow selectors through hypermedia API responses.",
    )

    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--quiet", action="store_true", help="Only log warnings and errors"
    )

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
        title="Available commands",
        metavar="{run,parse}",
        help="Available commands",
    )

    run_parser = subparsers.add_parser("run", help="Traverse a selector")
    run_parser.add_argument("node", type=Path, help="Root node (YAML or JSON)")
    run_parser.add_argument("selector", help="Selector, e.g. 'accounts[].invoices[]'")
    transport_group = run_parser.add_mutually_exclusive_group()
    transport_group.add_argument(
        "--fixtures",
        "-f",
        type=Path,
        default=None,
        help="Fixture file with canned 'responses' and 'actions'",
    )
    transport_group.add_argument(
        "--base-url",
        default=None,
        help="Send link and action requests over HTTP relative to this URL",
    )
    run_parser.add_argument(
        "--strict", action="store_true", help="Fail on unresolved steps"
    )
    run_parser.add_argument(
        "--isolated",
        action="store_true",
        help="Keep one nested list per fan-out instead of flattening",
    )
    run_parser.add_argument(
        "--only", nargs="+", default=None, help="Keys to keep on the final node(s)"
    )
    run_parser.add_argument(
        "--action-params",
        default=None,
        help="JSON value forwarded as parameters of action steps",
    )
    run_parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Write the JSON result to this file instead of stdout",
    )

    parse_parser = subparsers.add_parser(
        "parse", help="Show how a selector is split into steps"
    )
    parse_parser.add_argument("selector", help="Selector to parse")

    effective_args = sys.argv[1:] if argv is None else argv

    if not effective_args:
        parser.print_help()
        raise SystemExit(0)

    args = parser.parse_args(effective_args)

    if args.verbose:
        set_global_log_level(logging.DEBUG)
        logger.debug("Debug logging enabled")
    elif args.quiet:
        set_global_log_level(logging.WARNING)
    else:
        set_global_log_level(logging.INFO)

    if args.command == "run":
        _run_query(
            node_path=args.node,
            selector=args.selector,
            fixtures=args.fixtures,
            base_url=args.base_url,
            strict=args.strict,
            isolated=args.isolated,
            only=args.only,
            action_params=args.action_params,
            output=args.output,
        )
    elif args.command == "parse":
        _parse(args.selector)


if __name__ == "__main__":
    main()

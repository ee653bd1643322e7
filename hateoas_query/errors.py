"""Exceptions raised by hateoas_query.

Transport failures raised by a caller-supplied request function are never
wrapped; these types cover the engine's own failures and the bundled
transports.
"""

from __future__ import annotations

from typing import Optional

__all__ = ["TraversalError", "TransportError"]


class TraversalError(LookupError):
    """A selector step matched no link, action, or attribute in strict mode.

    Attributes:
        selector: The full selector the traversal was started with.
        step: Raw text of the step that could not be resolved, when known.
    """

    def __init__(self, selector: str, step: Optional[str] = None) -> None:
        self.selector = selector
        self.step = step
        super().__init__(f"[Strict mode] Could not traverse `{selector}`")


class TransportError(RuntimeError):
    """A bundled transport could not answer a request descriptor."""

"""Selector parsing.

A selector is a dotted path such as ``accounts[].invoices[0].@cancel``. Each
dot-separated step is either an attribute/link step (bare name) or an action
step (``@`` prefix), optionally followed by an iterable marker ``[]`` or an
indexed marker ``[N]``.

Traversal only needs the head step at each level, so ``split_selector`` keeps
the tail as an unparsed string for the next recursive call.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

__all__ = [
    "Step",
    "AttributeStep",
    "ActionStep",
    "split_selector",
    "parse_step",
    "parse_selector",
    "format_selector",
    "is_index",
]

ACTION_PREFIX = "@"
STEP_SEPARATOR = "."

_BRACKET_SUFFIX = re.compile(r"\[(?P<content>[^\]]*)\]$")
_INDEX = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class Step:
    """A single classified selector step.

    Attributes:
        raw: Step text exactly as written in the selector.
        name: Base name used to look up links, actions and attributes.
        iterable: Whether the step fans out over a collection.
        index: Zero-based item index when the step is filtered.
    """

    raw: str
    name: str
    iterable: bool = False
    index: Optional[int] = None

    @property
    def is_action(self) -> bool:
        return False

    @property
    def is_filtered(self) -> bool:
        return self.iterable and self.index is not None


@dataclass(frozen=True)
class AttributeStep(Step):
    """Step resolved through a link, falling back to a plain attribute."""


@dataclass(frozen=True)
class ActionStep(Step):
    """Step resolved through an action descriptor (``@name``)."""

    @property
    def is_action(self) -> bool:
        return True


def is_index(text: str) -> bool:
    """True for a non-negative ASCII integer such as ``"0"`` or ``"12"``."""
    return _INDEX.fullmatch(text) is not None


def split_selector(selector: Optional[str]) -> Tuple[str, str]:
    """Split off the head step, keeping the remainder unparsed.

    Args:
        selector: Dotted selector string, possibly empty or ``None``.

    Returns:
        Tuple of ``(head, tail)``; ``tail`` is empty on the last step.
    """
    if not selector:
        return "", ""
    head, _, tail = selector.partition(STEP_SEPARATOR)
    return head, tail


def parse_step(text: str) -> Step:
    """Classify raw step text.

    Bracket content that is not a non-negative integer (``[abc]``, ``[-1]``)
    still marks the step iterable but selects every item.

    Args:
        text: Raw step text, e.g. ``"@cancel"`` or ``"items[2]"``.

    Returns:
        ``ActionStep`` when the text starts with ``@``, else ``AttributeStep``.
    """
    is_action = text.startswith(ACTION_PREFIX)
    name = text[len(ACTION_PREFIX) :] if is_action else text

    iterable = False
    index: Optional[int] = None
    match = _BRACKET_SUFFIX.search(name)
    if match is not None:
        iterable = True
        content = match.group("content")
        if is_index(content):
            index = int(content)
        name = name[: match.start()]

    step_cls = ActionStep if is_action else AttributeStep
    return step_cls(raw=text, name=name, iterable=iterable, index=index)


def parse_selector(selector: Optional[str]) -> List[Step]:
    """Parse a whole selector into its ordered steps."""
    head, tail = split_selector(selector)
    if not selector:
        return []
    return [parse_step(head)] + parse_selector(tail)


def format_selector(steps: Iterable[Step]) -> str:
    """Render steps back into selector text."""
    parts = []
    for step in steps:
        text = (ACTION_PREFIX if step.is_action else "") + step.name
        if step.iterable:
            text += "[]" if step.index is None else f"[{step.index}]"
        parts.append(text)
    return STEP_SEPARATOR.join(parts)

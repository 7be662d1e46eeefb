"""Fit a primary message and a list of secondary items under one byte ceiling.

Fragments are placed in priority order: the primary message first, then each
item. Every fragment pays for the separator that will precede it. Items that
no longer fit whole are summarised by a single "N more" placeholder.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from marktrim.budget import DEFAULT_BOUNDARY_WINDOW, DEFAULT_OMISSION, MeasureBy, TruncationBudget
from marktrim.entities import byte_size
from marktrim.nodes import Node, TextNode, as_node
from marktrim.serialize import serialize, serialized_size, text_content
from marktrim.truncate import MarkupTruncator

logger = logging.getLogger(__name__)

DEFAULT_LEAD_SEPARATOR = " "
DEFAULT_ITEM_SEPARATOR = ", "
DEFAULT_MORE_FORMAT = "[{count} more]"


@dataclass(frozen=True, slots=True)
class ComposedMessage:
    """Fragments that survived budgeting, in display order."""

    primary: Node | None = None
    items: tuple[Node, ...] = field(default_factory=tuple)
    placeholder: TextNode | None = None
    omitted: int = 0
    lead_separator: str = DEFAULT_LEAD_SEPARATOR
    separator: str = DEFAULT_ITEM_SEPARATOR
    measure_by: MeasureBy = MeasureBy.SERIALIZED

    def fragments(self) -> tuple[Node, ...]:
        head = (self.primary,) if self.primary is not None else ()
        tail = (self.placeholder,) if self.placeholder is not None else ()
        return head + self.items + tail

    def render(self) -> str:
        return self._join(serialize)

    @property
    def size(self) -> int:
        if self.measure_by is MeasureBy.CONTENT:
            return byte_size(self._join(text_content))
        return byte_size(self.render())

    def _join(self, render) -> str:
        secondary = [*self.items, *([self.placeholder] if self.placeholder is not None else [])]
        parts: list[str] = []
        if self.primary is not None:
            parts.append(render(self.primary))
        if secondary:
            parts.append(self.separator.join(render(node) for node in secondary))
        return self.lead_separator.join(parts)


def compose_message(
    primary: Node | str | None,
    items: Sequence[Node | str],
    max_bytes: int,
    *,
    lead_separator: str = DEFAULT_LEAD_SEPARATOR,
    separator: str = DEFAULT_ITEM_SEPARATOR,
    more_format: str = DEFAULT_MORE_FORMAT,
    omission: str = DEFAULT_OMISSION,
    measure_by: MeasureBy | str = MeasureBy.SERIALIZED,
    word_boundary: str | None = None,
    boundary_window: int = DEFAULT_BOUNDARY_WINDOW,
) -> ComposedMessage:
    """Budget ``primary`` and ``items`` under ``max_bytes``.

    A fragment that cannot be represented at all is omitted; this never fails
    the message as a whole.
    """

    measure = MeasureBy(measure_by)
    budget = TruncationBudget(
        max_bytes=max_bytes,
        omission=omission,
        measure_by=measure,
        word_boundary=word_boundary,
        boundary_window=boundary_window,
    )
    remaining = budget.max_bytes

    primary_node = as_node(primary) if primary is not None else None
    if primary_node is not None and not serialize(primary_node):
        # Renders to nothing, so no lead separator either.
        primary_node = None

    placed_primary: Node | None = None
    if primary_node is not None:
        placed_primary = _fit(primary_node, remaining, budget)
        if placed_primary is None:
            logger.debug("primary message dropped; %d bytes available", remaining)
        else:
            remaining -= serialized_size(placed_primary, measure)

    nodes = [as_node(item) for item in items]
    placed: list[Node] = []
    placeholder: TextNode | None = None
    omitted = 0

    for index, item in enumerate(nodes):
        if placed:
            joint = separator
        elif placed_primary is not None:
            joint = lead_separator
        else:
            joint = ""
        available = remaining - byte_size(joint)
        size = serialized_size(item, measure)
        if size <= available:
            placed.append(item)
            remaining = available - size
            continue

        left = len(nodes) - index
        omitted = left
        if left == 1:
            last = _fit(item, available, budget)
            if last is not None:
                placed.append(last)
                omitted = 0
            break

        candidate = TextNode(more_format.format(count=left))
        if serialized_size(candidate, measure) <= available:
            placeholder = candidate
        else:
            logger.debug("no room for placeholder covering %d items", left)
        break

    return ComposedMessage(
        primary=placed_primary,
        items=tuple(placed),
        placeholder=placeholder,
        omitted=omitted,
        lead_separator=lead_separator,
        separator=separator,
        measure_by=measure,
    )


def _fit(node: Node, limit: int, budget: TruncationBudget) -> Node | None:
    if limit < 0:
        return None
    return MarkupTruncator(budget.model_copy(update={"max_bytes": limit})).truncate(node)


__all__ = [
    "ComposedMessage",
    "DEFAULT_ITEM_SEPARATOR",
    "DEFAULT_LEAD_SEPARATOR",
    "DEFAULT_MORE_FORMAT",
    "compose_message",
]

"""Byte-budgeted truncation of node trees.

The truncator walks the tree depth-first and hands each node whatever budget
is left. Nodes that fit are reused as-is (the tree is immutable, so sharing is
safe); text is cut between units so no character or character reference is
ever split; element shells are kept intact and only their children pruned.
A ``None`` result means the node cannot be represented within the budget.

Each element visit is a generator that yields ``(child, limit)`` requests and
receives the child's result back, so the walk runs on an explicit stack and
deep trees never hit the interpreter's recursion limit. Subtree sizes are
measured once per call and cached.
"""

from __future__ import annotations

import logging
from collections.abc import Generator

from marktrim.budget import DEFAULT_BOUNDARY_WINDOW, DEFAULT_OMISSION, MeasureBy, TruncationBudget
from marktrim.entities import content_units, fit_units, join_units, word_boundary_cut
from marktrim.nodes import ElementNode, Node, TextNode, ensure_node
from marktrim.serialize import own_size, serialized_size, shell_size

logger = logging.getLogger(__name__)

Visit = Generator[tuple[Node, int], Node | None, Node | None]


class MarkupTruncator:
    """Truncate node trees to the byte budget it was created with."""

    def __init__(self, budget: TruncationBudget) -> None:
        self.budget = budget
        self.omission = budget.omission
        self.omission_size = serialized_size(TextNode(budget.omission), budget.measure_by)
        # id(node) -> (node, size, trailing text); the node is kept so ids stay unique.
        self._measured: dict[int, tuple[Node, int, str]] = {}

    def truncate(self, root: Node) -> Node | None:
        node = ensure_node(root)
        self._measured = {}
        try:
            result = self._run(node, self.budget.max_bytes)
        finally:
            self._measured = {}
        if result is None:
            logger.debug("nothing fits in %d bytes", self.budget.max_bytes)
        return result

    def size(self, node: Node) -> int:
        return self._measure(node)[0]

    def _run(self, node: Node, limit: int) -> Node | None:
        stack: list[Visit] = [self._visit(node, limit)]
        result: Node | None = None
        while stack:
            try:
                child, child_limit = stack[-1].send(result)
            except StopIteration as stop:
                stack.pop()
                result = stop.value
                continue
            stack.append(self._visit(child, child_limit))
            result = None
        return result

    def _visit(self, node: Node, limit: int) -> Visit:
        if self.size(node) <= limit:
            return node
        if isinstance(node, TextNode):
            return self._truncate_text(node, limit)
        if not node.children:
            return None
        if len(node.children) == 1 and isinstance(node.children[0], TextNode):
            return self._truncate_single_text(node, limit)
        return (yield from self._truncate_children(node, limit))

    def _truncate_text(self, node: TextNode, limit: int) -> TextNode | None:
        available = limit - self.omission_size
        if available < 0:
            return None
        units = content_units(node.content, escaped=self.budget.measure_by is MeasureBy.SERIALIZED)
        count = fit_units(units, available)
        count = word_boundary_cut(units, count, self.budget.word_boundary, self.budget.window)
        logger.debug("cut text after %d of %d characters", count, len(units))
        return TextNode(join_units(units[:count]) + self.omission)

    def _truncate_single_text(self, node: ElementNode, limit: int) -> ElementNode | None:
        remaining = limit - shell_size(node, self.budget.measure_by)
        if remaining <= 0:
            return None
        # The element does not fit, so neither does its only child.
        text = self._truncate_text(node.children[0], remaining)
        if text is None or not text.content:
            logger.debug("no room for text inside <%s>", node.tag)
            return None
        return node.with_children((text,))

    def _truncate_children(self, node: ElementNode, limit: int) -> Visit:
        remaining = limit - shell_size(node, self.budget.measure_by)
        if remaining < 0:
            return None

        accepted: list[Node] = []
        has_omission = False
        for child in node.children:
            if remaining <= self.omission_size:
                break
            result = yield child, remaining
            if result is None:
                if not accepted:
                    logger.debug("first child of <%s> does not fit", node.tag)
                    return None
                break
            size = self.size(result)
            if size > remaining:
                if not accepted:
                    return None
                break
            accepted.append(result)
            remaining -= size
            has_omission = self._ends_with_omission(result)
            if result is not child:
                break

        if not has_omission and remaining >= self.omission_size and self.omission:
            accepted.append(TextNode(self.omission))
        if not accepted:
            return None
        return node.with_children(accepted)

    def _ends_with_omission(self, node: Node) -> bool:
        return bool(self.omission) and self._measure(node)[1].endswith(self.omission)

    def _measure(self, node: Node) -> tuple[int, str]:
        """Size of ``node`` and the last few characters of its text.

        Only as many trailing characters as the omission has are kept, which
        is all ``_ends_with_omission`` needs. Unmeasured descendants are filled
        in bottom-up, so every node is measured once per call.
        """

        known = self._measured.get(id(node))
        if known is None:
            measure_by = self.budget.measure_by
            keep = len(self.omission)
            pending: list[tuple[Node, bool]] = [(node, False)]
            while pending:
                current, expanded = pending.pop()
                if id(current) in self._measured:
                    continue
                if isinstance(current, ElementNode) and not expanded:
                    pending.append((current, True))
                    pending.extend((child, False) for child in current.children)
                    continue
                size = own_size(current, measure_by)
                tail = current.content if isinstance(current, TextNode) else ""
                if isinstance(current, ElementNode):
                    for child in reversed(current.children):
                        _, child_size, child_tail = self._measured[id(child)]
                        size += child_size
                        if len(tail) < keep:
                            tail = child_tail + tail
                self._measured[id(current)] = (current, size, tail[-keep:] if keep else "")
            known = self._measured[id(node)]
        return known[1], known[2]


def truncate(
    root: Node,
    max_bytes: int,
    *,
    omission: str = DEFAULT_OMISSION,
    measure_by: MeasureBy | str = MeasureBy.SERIALIZED,
    word_boundary: str | None = None,
    boundary_window: int = DEFAULT_BOUNDARY_WINDOW,
) -> Node | None:
    """Return the largest prefix of ``root`` that fits in ``max_bytes``.

    The result is ``root`` itself when it already fits and ``None`` when not
    even the omission marker fits.
    """

    budget = TruncationBudget(
        max_bytes=max_bytes,
        omission=omission,
        measure_by=MeasureBy(measure_by),
        word_boundary=word_boundary,
        boundary_window=boundary_window,
    )
    return MarkupTruncator(budget).truncate(root)


__all__ = ["MarkupTruncator", "truncate"]

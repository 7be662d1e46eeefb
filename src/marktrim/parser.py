"""Parse HTML fragments into node trees."""

from __future__ import annotations

import logging
import warnings
from collections.abc import Iterator

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning, NavigableString, Tag
from bs4.element import CData, Comment, Declaration, Doctype, PageElement, ProcessingInstruction

from marktrim.nodes import ElementNode, Node, TextNode

logger = logging.getLogger(__name__)

# Markup that has no visible rendering and no place in a truncated fragment.
_SKIPPED_STRINGS = (Comment, CData, Declaration, Doctype, ProcessingInstruction)


def parse_fragment(markup: str) -> tuple[Node, ...]:
    """Parse ``markup`` and return its top-level nodes.

    Character references are decoded into plain characters; the serializer
    re-escapes the markup-significant ones.
    """

    with warnings.catch_warnings():
        # Short fragments such as "index.html" are content here, not file names.
        warnings.simplefilter("ignore", MarkupResemblesLocatorWarning)
        soup = BeautifulSoup(markup, "html.parser")
    return tuple(_convert_tree(soup))


def parse_wrapped(markup: str, tag: str = "div") -> ElementNode:
    """Parse ``markup`` as the children of a ``tag`` element."""

    return ElementNode(tag=tag, children=parse_fragment(markup))


def _convert_tree(root: Tag) -> list[Node]:
    # Each frame holds an open tag, the iterator over its children and the
    # nodes converted so far; an element is built once its children run out.
    top: list[Node] = []
    stack: list[tuple[Tag, Iterator[PageElement], list[Node]]] = [(root, iter(root.children), top)]
    while stack:
        tag, children, converted = stack[-1]
        child = next(children, None)
        if child is None:
            stack.pop()
            if stack:
                stack[-1][2].append(
                    ElementNode(tag=tag.name, attributes=_attributes(tag), children=tuple(converted))
                )
            continue
        if isinstance(child, _SKIPPED_STRINGS):
            logger.debug("skipping %s in fragment", type(child).__name__)
        elif isinstance(child, NavigableString):
            converted.append(TextNode(str(child)))
        elif isinstance(child, Tag):
            stack.append((child, iter(child.children), []))
    return top


def _attributes(tag: Tag) -> tuple[tuple[str, str], ...]:
    return tuple((name, _attribute_value(value)) for name, value in tag.attrs.items())


def _attribute_value(value: object) -> str:
    # Multi-valued attributes such as class come back as lists.
    if isinstance(value, list | tuple):
        return " ".join(str(part) for part in value)
    if value is None:
        return ""
    return str(value)


__all__ = ["parse_fragment", "parse_wrapped"]

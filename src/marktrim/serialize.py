"""Render node trees back to markup and measure them."""

from __future__ import annotations

from marktrim.budget import MeasureBy
from marktrim.entities import byte_size, escape_attribute, escape_text
from marktrim.nodes import ElementNode, MalformedNodeError, Node, TextNode, ensure_node, walk

VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)


def serialize(node: Node) -> str:
    """Return the markup for ``node`` with text and attribute values escaped."""

    parts: list[str] = []
    # Closing tags are pushed as plain strings between the pending nodes.
    stack: list[Node | str] = [ensure_node(node)]
    while stack:
        item = stack.pop()
        if isinstance(item, str):
            parts.append(item)
        elif isinstance(item, TextNode):
            parts.append(escape_text(item.content))
        elif isinstance(item, ElementNode):
            parts.append(open_tag(item))
            stack.append(close_tag(item))
            stack.extend(reversed(item.children))
        else:
            raise MalformedNodeError(f"unsupported node type {type(item).__name__}")
    return "".join(parts)


def open_tag(node: ElementNode) -> str:
    attrs = "".join(f' {name}="{escape_attribute(value)}"' for name, value in node.attributes)
    return f"<{node.tag}{attrs}>"


def close_tag(node: ElementNode) -> str:
    if node.tag.lower() in VOID_ELEMENTS and not node.children:
        return ""
    return f"</{node.tag}>"


def text_content(node: Node) -> str:
    """Visible text of ``node`` with no markup and no escaping."""

    return "".join(item.content for item in walk(node) if isinstance(item, TextNode))


def own_size(node: Node, measure_by: MeasureBy = MeasureBy.SERIALIZED) -> int:
    """Bytes ``node`` contributes by itself, not counting its children."""

    if isinstance(node, TextNode):
        if measure_by is MeasureBy.CONTENT:
            return byte_size(node.content)
        return byte_size(escape_text(node.content))
    if isinstance(node, ElementNode):
        if measure_by is MeasureBy.CONTENT:
            return 0
        return byte_size(open_tag(node)) + byte_size(close_tag(node))
    raise MalformedNodeError(f"unsupported node type {type(node).__name__}")


def serialized_size(node: Node, measure_by: MeasureBy = MeasureBy.SERIALIZED) -> int:
    return sum(own_size(item, measure_by) for item in walk(node))


def shell_size(node: ElementNode, measure_by: MeasureBy = MeasureBy.SERIALIZED) -> int:
    """Bytes an element costs before any children are added."""

    if measure_by is MeasureBy.CONTENT:
        return 0
    return byte_size(open_tag(node)) + byte_size(f"</{node.tag}>")


__all__ = [
    "VOID_ELEMENTS",
    "close_tag",
    "open_tag",
    "own_size",
    "serialize",
    "serialized_size",
    "shell_size",
    "text_content",
]

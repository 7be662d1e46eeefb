"""Tree model for marked-up text: text leaves and element nodes."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import TypeAlias


class MalformedNodeError(Exception):
    """Raised when a tree contains something other than a text or element node."""


@dataclass(frozen=True, slots=True)
class TextNode:
    """Raw character data; escaping happens at serialization time."""

    content: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.content, str):
            raise MalformedNodeError(f"text content must be str, got {type(self.content).__name__}")


@dataclass(frozen=True, slots=True)
class ElementNode:
    """Element with a tag, ordered attributes and ordered children."""

    tag: str
    attributes: tuple[tuple[str, str], ...] = field(default_factory=tuple)
    children: tuple[Node, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.tag or not self.tag.strip():
            raise ValueError("tag cannot be empty")
        for child in self.children:
            if not isinstance(child, TextNode | ElementNode):
                raise MalformedNodeError(f"unsupported node type {type(child).__name__}")

    @classmethod
    def build(
        cls,
        tag: str,
        attributes: Mapping[str, str] | Iterable[tuple[str, str]] | None = None,
        children: Iterable[Node | str] = (),
    ) -> ElementNode:
        """Convenience constructor accepting a mapping and bare strings as text."""

        if attributes is None:
            attrs: tuple[tuple[str, str], ...] = ()
        elif isinstance(attributes, Mapping):
            attrs = tuple((str(k), str(v)) for k, v in attributes.items())
        else:
            attrs = tuple((str(k), str(v)) for k, v in attributes)
        kids = tuple(TextNode(c) if isinstance(c, str) else c for c in children)
        return cls(tag=tag, attributes=attrs, children=kids)

    def with_children(self, children: Iterable[Node]) -> ElementNode:
        return ElementNode(tag=self.tag, attributes=self.attributes, children=tuple(children))


Node: TypeAlias = TextNode | ElementNode


def ensure_node(value: object) -> Node:
    """Return ``value`` if it is a node, raising ``MalformedNodeError`` otherwise."""

    if isinstance(value, TextNode | ElementNode):
        return value
    raise MalformedNodeError(f"unsupported node type {type(value).__name__}")


def walk(node: Node) -> Iterator[Node]:
    """Yield ``node`` and its descendants in document order.

    Uses an explicit stack, so arbitrarily deep trees are fine.
    """

    stack: list[Node] = [node]
    while stack:
        current = stack.pop()
        if isinstance(current, ElementNode):
            stack.extend(reversed(current.children))
        elif not isinstance(current, TextNode):
            raise MalformedNodeError(f"unsupported node type {type(current).__name__}")
        yield current


def as_node(value: Node | str) -> Node:
    """Coerce plain strings to text nodes."""

    if isinstance(value, str):
        return TextNode(value)
    return ensure_node(value)


__all__ = [
    "ElementNode",
    "MalformedNodeError",
    "Node",
    "TextNode",
    "as_node",
    "ensure_node",
    "walk",
]

"""Byte-budgeted truncation of HTML fragments and text."""

from __future__ import annotations

from marktrim.budget import MeasureBy, TruncationBudget
from marktrim.compose import ComposedMessage, compose_message
from marktrim.html import html_truncate
from marktrim.nodes import ElementNode, MalformedNodeError, Node, TextNode
from marktrim.parser import parse_fragment, parse_wrapped
from marktrim.serialize import serialize, serialized_size, text_content
from marktrim.text import truncate_text
from marktrim.truncate import MarkupTruncator, truncate

__version__ = "0.1.0"

__all__ = [
    "ComposedMessage",
    "ElementNode",
    "MalformedNodeError",
    "MarkupTruncator",
    "MeasureBy",
    "Node",
    "TextNode",
    "TruncationBudget",
    "__version__",
    "compose_message",
    "html_truncate",
    "parse_fragment",
    "parse_wrapped",
    "serialize",
    "serialized_size",
    "text_content",
    "truncate",
    "truncate_text",
]

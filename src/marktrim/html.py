"""String-level truncation of HTML fragments and plain text.

Since a fragment may be a sequence of elements or just text with character
references, it is wrapped in a ``<div>`` before parsing so the tree always has
a single root. The wrapper is stripped again after serialization.
"""

from __future__ import annotations

import logging
import re

from marktrim.budget import DEFAULT_BOUNDARY_WINDOW, DEFAULT_MAX_BYTES, DEFAULT_OMISSION, MeasureBy
from marktrim.entities import byte_size
from marktrim.parser import parse_wrapped
from marktrim.serialize import close_tag, open_tag, serialize, shell_size
from marktrim.text import truncate_text
from marktrim.truncate import truncate

logger = logging.getLogger(__name__)

WRAPPER_TAG = "div"


def html_truncate(
    markup: str,
    max_bytes: int | None = None,
    *,
    omission: str | None = None,
    separator: str | None = None,
    content: bool = False,
    html: bool = True,
    boundary_window: int = DEFAULT_BOUNDARY_WINDOW,
) -> str:
    """Truncate an HTML fragment (or plain text when ``html`` is false).

    ``content`` budgets only the visible text instead of the full markup.
    Returns ``markup`` untouched when it already fits and ``""`` when nothing
    fits.
    """

    length = DEFAULT_MAX_BYTES if max_bytes is None else max(max_bytes, 0)
    omission = DEFAULT_OMISSION if omission is None else omission
    if byte_size(markup) <= length:
        return markup

    if not html:
        return truncate_text(
            markup, length, omission=omission, separator=separator, boundary_window=boundary_window
        ) or ""

    measure_by = MeasureBy.CONTENT if content else MeasureBy.SERIALIZED
    root = parse_wrapped(markup.strip(), WRAPPER_TAG)
    result = truncate(
        root,
        length + shell_size(root, measure_by),
        omission=omission,
        measure_by=measure_by,
        word_boundary=separator,
        boundary_window=boundary_window,
    )
    if result is None:
        logger.debug("fragment of %d bytes dropped entirely", byte_size(markup))
        return ""

    rendered = serialize(result)
    rendered = rendered.removeprefix(open_tag(root)).removesuffix(close_tag(root))
    return collapse_omission(rendered, omission)


def collapse_omission(text: str, omission: str) -> str:
    """Replace runs of adjacent omission markers with a single marker."""

    if not omission:
        return text
    return re.sub(f"(?:{re.escape(omission)}){{2,}}", lambda _: omission, text)


__all__ = ["WRAPPER_TAG", "collapse_omission", "html_truncate"]

"""Character references, escaping, and splitting text into atomic units.

A *unit* is the smallest piece of text that may end up on either side of a cut:
a single code point, or a whole character reference such as ``&amp;`` or
``&#169;``. Cutting only between units guarantees that no UTF-8 sequence and
no reference is ever split.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import NamedTuple

TEXT_ESCAPES: dict[str, str] = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    "\xa0": "&nbsp;",
}

ATTRIBUTE_ESCAPES: dict[str, str] = {**TEXT_ESCAPES, '"': "&quot;"}

CHARACTER_REFERENCE = re.compile(r"&(?:#[0-9]{1,7}|#[xX][0-9a-fA-F]{1,6}|[A-Za-z][A-Za-z0-9]{1,31});")

_TEXT_PATTERN = re.compile("[" + re.escape("".join(TEXT_ESCAPES)) + "]")
_ATTRIBUTE_PATTERN = re.compile("[" + re.escape("".join(ATTRIBUTE_ESCAPES)) + "]")


class Unit(NamedTuple):
    text: str
    size: int


def byte_size(text: str) -> int:
    return len(text.encode("utf-8"))


def escape_text(text: str) -> str:
    return _TEXT_PATTERN.sub(lambda m: TEXT_ESCAPES[m.group(0)], text)


def escape_attribute(value: str) -> str:
    return _ATTRIBUTE_PATTERN.sub(lambda m: ATTRIBUTE_ESCAPES[m.group(0)], value)


def content_units(content: str, *, escaped: bool) -> list[Unit]:
    """Split decoded text content into one unit per code point.

    With ``escaped`` each unit is sized by its serialized form, so ``&`` costs
    the five bytes of ``&amp;``; otherwise by its own UTF-8 length.
    """

    units: list[Unit] = []
    for char in content:
        rendered = TEXT_ESCAPES.get(char, char) if escaped else char
        units.append(Unit(char, byte_size(rendered)))
    return units


def raw_units(text: str, *, entities: bool = True) -> list[Unit]:
    """Split a flat string, keeping literal character references whole."""

    if not entities:
        return [Unit(char, byte_size(char)) for char in text]

    units: list[Unit] = []
    position = 0
    for match in CHARACTER_REFERENCE.finditer(text):
        units.extend(Unit(char, byte_size(char)) for char in text[position : match.start()])
        units.append(Unit(match.group(0), byte_size(match.group(0))))
        position = match.end()
    units.extend(Unit(char, byte_size(char)) for char in text[position:])
    return units


def fit_units(units: Sequence[Unit], budget: int) -> int:
    """Return how many leading units fit within ``budget`` bytes."""

    used = 0
    for index, unit in enumerate(units):
        if used + unit.size > budget:
            return index
        used += unit.size
    return len(units)


def word_boundary_cut(units: Sequence[Unit], count: int, separator: str | None, window: int) -> int:
    """Move a cut back to just before ``separator`` if one starts within ``window`` bytes.

    The cut never moves to zero and the scan never looks further back than
    ``window`` bytes; without a nearby separator the original cut is kept.
    """

    if not separator or count <= 0:
        return count

    lowest = count
    dropped = 0
    while lowest > 1 and dropped + units[lowest - 1].size <= window:
        lowest -= 1
        dropped += units[lowest].size

    width = len(separator)
    for index in range(count, lowest - 1, -1):
        following = "".join(unit.text for unit in units[index : index + width])
        if following.startswith(separator):
            return index
    return count


def join_units(units: Sequence[Unit]) -> str:
    return "".join(unit.text for unit in units)


__all__ = [
    "ATTRIBUTE_ESCAPES",
    "CHARACTER_REFERENCE",
    "TEXT_ESCAPES",
    "Unit",
    "byte_size",
    "content_units",
    "escape_attribute",
    "escape_text",
    "fit_units",
    "join_units",
    "raw_units",
    "word_boundary_cut",
]

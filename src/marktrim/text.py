"""Byte-budgeted truncation for flat strings."""

from __future__ import annotations

import logging

from marktrim.budget import DEFAULT_BOUNDARY_WINDOW, DEFAULT_OMISSION
from marktrim.entities import byte_size, fit_units, join_units, raw_units, word_boundary_cut

logger = logging.getLogger(__name__)


def truncate_text(
    text: str,
    max_bytes: int,
    *,
    omission: str = DEFAULT_OMISSION,
    separator: str | None = None,
    entities: bool = True,
    boundary_window: int = DEFAULT_BOUNDARY_WINDOW,
) -> str | None:
    """Truncate ``text`` so its UTF-8 size, omission included, fits ``max_bytes``.

    - Never splits a code point; with ``entities`` literal references such as
      ``&amp;`` or ``&#169;`` are kept whole or dropped whole.
    - With ``separator`` the cut moves back to the last separator within
      ``boundary_window`` bytes (plus the omission size) when there is one.
    - Returns ``text`` unchanged when it fits and ``None`` when the omission
      alone does not fit.
    """

    max_bytes = max(max_bytes, 0)
    if byte_size(text) <= max_bytes:
        return text

    omission_size = byte_size(omission)
    available = max_bytes - omission_size
    if available < 0:
        return None

    units = raw_units(text, entities=entities)
    count = fit_units(units, available)
    count = word_boundary_cut(units, count, separator, omission_size + boundary_window)
    logger.debug("truncated %d-byte text at unit %d of %d", byte_size(text), count, len(units))
    return join_units(units[:count]) + omission


def truncate_output(
    text: str, *, max_bytes: int = 8_192, max_lines: int = 200, marker: str = "[truncated]"
) -> tuple[str, bool]:
    """Truncate text by bytes and lines, returning (result, was_truncated).

    - Enforces both byte and line limits; whichever triggers first stops output.
    - A line that straddles the byte limit is cut between characters.
    - Appends a marker on a new line when truncation occurs.
    """

    truncated = False
    lines = text.splitlines(keepends=True)
    collected: list[str] = []
    bytes_used = 0

    for idx, line in enumerate(lines):
        if idx >= max_lines:
            truncated = True
            break

        size = byte_size(line)
        if bytes_used + size > max_bytes:
            units = raw_units(line, entities=False)
            collected.append(join_units(units[: fit_units(units, max_bytes - bytes_used)]))
            truncated = True
            break

        collected.append(line)
        bytes_used += size

    result = "".join(collected)
    if truncated:
        if result and not result.endswith("\n"):
            result += "\n"
        result += marker
    return result, truncated


__all__ = ["truncate_output", "truncate_text"]

"""Locate the brace-delimited body that follows a declaration header."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Body:
    """Offsets of the opening/closing braces and the text between them."""

    open: int
    close: int
    text: str


def extract_body(text: str, offset: int, alias: bool = False) -> Optional[Body]:
    """Return the body starting at the first `{` at or after `offset`.

    Returns None when there is no brace, when the header was already
    terminated before one (`;` or `}` in between; for aliases anything other
    than `=`), or when the braces never balance. Brace characters inside
    strings and comments are counted like any other.
    """
    start = text.find("{", offset)
    if start == -1:
        return None
    gap = text[offset:start]
    if alias:
        if gap.strip() not in {"", "="}:
            return None
    elif ";" in gap or "}" in gap:
        return None

    depth = 0
    for index in range(start, len(text)):
        char = text[index]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return Body(open=start, close=index, text=text[start + 1 : index])
    return None


__all__ = ["Body", "extract_body"]

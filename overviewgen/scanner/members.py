"""Line-based member scanner for type bodies."""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from ..models import AnnotationRecord, MemberRecord
from .annotations import find_closing
from .dialects import Dialect, is_lifecycle_hook

ANNOTATION_LOOKBACK = 12
MAX_CONTINUATION_LINES = 40

INTERFACE_LIKE = frozenset({"interface", "type-alias"})


def scan_enum_values(body: str, dialect: Dialect) -> Tuple[str, ...]:
    """Return `Name` / `Name = 5` entries for each enum constant in `body`."""
    values: List[str] = []
    for raw in body.splitlines():
        line = _strip_trailing_comment(raw.strip())
        if not line or dialect.is_comment(line):
            continue
        _, line = dialect.peel_annotations(line)
        for part in line.split(","):
            match = dialect.enum_value_pattern.match(part.strip())
            if not match:
                continue
            name = match.group("name")
            value = match.group("value")
            values.append(f"{name} = {value}" if value is not None else name)
    return tuple(values)


def scan_members(
    body: str, type_name: str, kind: str, dialect: Dialect
) -> Tuple[MemberRecord, ...]:
    """Scan the depth-0 lines of `body` for member declarations.

    Lines nested inside member bodies are never candidates. Unrecognised
    lines are skipped without a trace.
    """
    interface_like = kind in INTERFACE_LIKE
    lines = body.splitlines()
    members: List[MemberRecord] = []
    depth = 0
    index = 0
    while index < len(lines):
        position = index
        line = _strip_trailing_comment(lines[index].strip())
        index += 1
        if not line or dialect.is_comment(line):
            continue
        line_depth = depth
        depth = max(0, depth + _brace_delta(line))
        if line_depth != 0:
            continue

        inline, rest = dialect.peel_annotations(line)
        if not rest or not dialect.is_member_candidate(rest, interface_like):
            continue
        # Nested type headers are not members; their bodies are skipped by depth.
        if dialect.declaration_pattern.match(rest):
            continue

        text = rest
        tokens = dialect.tokenize(text)
        if tokens is None:
            continue
        if tokens.open_paren != -1 and find_closing(text, tokens.open_paren) == -1:
            continued = _continue_signature(text, lines, index, tokens.open_paren)
            if continued is None:
                continue
            text, consumed = continued
            for extra in lines[index:consumed]:
                depth = max(0, depth + _brace_delta(_strip_trailing_comment(extra.strip())))
            index = consumed

        member = _build_member(
            text,
            annotations=_preceding_annotations(lines, position, dialect) + tuple(inline),
            interface_like=interface_like,
            accessor_follows=_next_line_opens_block(lines, index),
            dialect=dialect,
        )
        if member is None:
            continue
        if not interface_like and _is_suppressed(member.name, type_name):
            continue
        members.append(member)
    return tuple(members)


def _build_member(
    text: str,
    annotations: Tuple[AnnotationRecord, ...],
    interface_like: bool,
    accessor_follows: bool,
    dialect: Dialect,
) -> Optional[MemberRecord]:
    tokens = dialect.tokenize(text)
    if tokens is None:
        return None
    if tokens.open_paren != -1:
        close = find_closing(text, tokens.open_paren)
        if close == -1:
            return None
        signature = dialect.finish_method(text, close, interface_like)
    else:
        signature = dialect.finish_value(text, tokens)

    # Name and type come from the finished signature so they re-tokenize identically.
    final = dialect.tokenize(signature)
    if final is None:
        return None
    follows = accessor_follows and tokens.terminator == ""
    return MemberRecord(
        name=final.name,
        member_kind=dialect.member_kind(tokens, annotations, follows),
        declared_type=final.declared_type,
        signature=signature,
        annotations=annotations,
    )


def _continue_signature(
    text: str, lines: Sequence[str], start: int, open_paren: int
) -> Optional[Tuple[str, int]]:
    # Appends following lines until the parameter list closes; returns the
    # joined text and the index of the first unconsumed line.
    index = start
    while index < len(lines) and index - start < MAX_CONTINUATION_LINES:
        extra = _strip_trailing_comment(lines[index].strip())
        index += 1
        if not extra:
            continue
        text = f"{text} {extra}"
        if find_closing(text, open_paren) != -1:
            return text, index
    return None


def _preceding_annotations(
    lines: Sequence[str], position: int, dialect: Dialect
) -> Tuple[AnnotationRecord, ...]:
    blocks: List[List[AnnotationRecord]] = []
    lower = max(0, position - ANNOTATION_LOOKBACK)
    for index in range(position - 1, lower - 1, -1):
        line = _strip_trailing_comment(lines[index].strip())
        if not line or dialect.is_comment(line):
            continue
        annotations, rest = dialect.peel_annotations(line)
        if not annotations or rest:
            break
        blocks.append(annotations)
    ordered: List[AnnotationRecord] = []
    for block in reversed(blocks):
        ordered.extend(block)
    return tuple(ordered)


def _next_line_opens_block(lines: Sequence[str], index: int) -> bool:
    for raw in lines[index:]:
        line = raw.strip()
        if line:
            return line.startswith("{")
    return False


def _is_suppressed(name: str, type_name: str) -> bool:
    if name == type_name:
        return True
    return name.startswith("_") and not is_lifecycle_hook(name)


def _brace_delta(line: str) -> int:
    return line.count("{") - line.count("}")


def _strip_trailing_comment(line: str) -> str:
    # Drops a `//` comment that sits outside string literals.
    if "//" not in line:
        return line
    quote: Optional[str] = None
    index = 0
    while index < len(line):
        char = line[index]
        if quote:
            if char == "\\":
                index += 2
                continue
            if char == quote:
                quote = None
        elif char in "\"'`":
            quote = char
        elif line.startswith("//", index):
            return line[:index].rstrip()
        index += 1
    return line


__all__ = [
    "ANNOTATION_LOOKBACK",
    "INTERFACE_LIKE",
    "MAX_CONTINUATION_LINES",
    "scan_enum_values",
    "scan_members",
]

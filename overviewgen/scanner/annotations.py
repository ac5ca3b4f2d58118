"""Lexical helpers for annotations, argument lists and string literals."""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Tuple, Union

from ..models import AnnotationRecord

_OPENERS = {"(": ")", "[": "]", "{": "}", "<": ">"}
_CLOSERS = {value: key for key, value in _OPENERS.items()}
_QUOTES = {'"', "'", "`"}
_NAMED_ARGUMENT = re.compile(r"^(?P<key>[A-Za-z_]\w*)\s*(?:=(?!=|>)|:)\s*(?P<value>.+)$", re.DOTALL)


def split_top_level(text: str, separator: str = ",") -> Optional[List[str]]:
    """Split `text` on `separator` outside brackets and string literals.

    Returns None when brackets or quotes are unbalanced.
    """
    parts: List[str] = []
    stack: List[str] = []
    quote: Optional[str] = None
    current: List[str] = []
    index = 0
    while index < len(text):
        char = text[index]
        if quote:
            current.append(char)
            if char == "\\" and index + 1 < len(text):
                current.append(text[index + 1])
                index += 2
                continue
            if char == quote:
                quote = None
            index += 1
            continue
        if char in _QUOTES:
            quote = char
        elif char in _OPENERS:
            stack.append(_OPENERS[char])
        elif char in _CLOSERS:
            # `=>` and comparison operators are not generic brackets.
            if char == ">" and (not stack or stack[-1] != ">"):
                current.append(char)
                index += 1
                continue
            if not stack or stack[-1] != char:
                return None
            stack.pop()
        elif char == separator and not stack:
            parts.append("".join(current).strip())
            current = []
            index += 1
            continue
        current.append(char)
        index += 1
    if quote or stack:
        return None
    tail = "".join(current).strip()
    if tail or parts:
        parts.append(tail)
    return parts


def find_closing(text: str, start: int, opener: str = "(", closer: str = ")") -> int:
    """Return the index of the bracket closing the one at `start`, or -1."""
    depth = 0
    quote: Optional[str] = None
    index = start
    while index < len(text):
        char = text[index]
        if quote:
            if char == "\\":
                index += 2
                continue
            if char == quote:
                quote = None
        elif char in _QUOTES:
            quote = char
        elif char == opener:
            depth += 1
        elif char == closer:
            depth -= 1
            if depth == 0:
                return index
        index += 1
    return -1


def unquote(value: str) -> Optional[str]:
    """Return the contents of a string literal, or None if `value` is not one."""
    value = value.strip()
    if value[:2] in {'@"', '$"'}:
        value = value[1:]
    if len(value) >= 2 and value[0] in _QUOTES and value[-1] == value[0]:
        return value[1:-1]
    return None


def parse_arguments(arguments: str) -> Union[Dict[str, str], str]:
    """Decompose an argument list into positional/named parts.

    Positional arguments are keyed by their index ("0", "1", ...). When the
    list cannot be decomposed the raw text is returned unchanged.
    """
    arguments = arguments.strip()
    if not arguments:
        return {}
    parts = split_top_level(arguments)
    if parts is None or any(not part for part in parts):
        return arguments
    result: Dict[str, str] = {}
    position = 0
    for part in parts:
        named = _NAMED_ARGUMENT.match(part)
        if named and unquote(part) is None:
            result[named.group("key")] = named.group("value").strip()
        else:
            result[str(position)] = part
            position += 1
    return result


def first_string_argument(annotation: AnnotationRecord, *names: str) -> Optional[str]:
    """Return the first positional string literal, else a named one from `names`."""
    arguments = annotation.raw_arguments
    if not isinstance(arguments, dict):
        return None
    index = 0
    while str(index) in arguments:
        literal = unquote(arguments[str(index)])
        if literal is not None:
            return literal
        index += 1
    lowered = {name.lower() for name in names}
    for key, value in arguments.items():
        if key.lower() in lowered:
            literal = unquote(value)
            if literal is not None:
                return literal
    return None


def _read_invocation(text: str, start: int) -> Tuple[str, int]:
    # Reads `Name` or `Name(args)` starting at `start`; returns (raw, end).
    match = re.compile(r"[A-Za-z_][\w.]*").match(text, start)
    if not match:
        return "", start
    end = match.end()
    probe = end
    while probe < len(text) and text[probe] in " \t":
        probe += 1
    if probe < len(text) and text[probe] == "(":
        closing = find_closing(text, probe)
        if closing == -1:
            return "", start
        end = closing + 1
    return text[start:end], end


def build_annotation(raw: str, strip_suffix: str = "") -> Optional[AnnotationRecord]:
    """Build an AnnotationRecord from `Name` or `Name(args)` text."""
    raw = raw.strip()
    match = re.match(r"^(?:(?:return|assembly|field|property|method|param|type)\s*:\s*)?([A-Za-z_][\w.]*)\s*(?:\((.*)\))?$", raw, re.DOTALL)
    if not match:
        return None
    name = match.group(1).split(".")[-1]
    if strip_suffix and name.endswith(strip_suffix) and name != strip_suffix:
        name = name[: -len(strip_suffix)]
    arguments = parse_arguments(match.group(2) or "")
    return AnnotationRecord(name=name, raw_arguments=arguments, text=raw)


def peel_bracket_annotations(text: str) -> Tuple[List[AnnotationRecord], str]:
    """Split leading `[A][B(x), C]` groups off `text`."""
    annotations: List[AnnotationRecord] = []
    rest = text.lstrip()
    while rest.startswith("["):
        closing = find_closing(rest, 0, "[", "]")
        if closing == -1:
            break
        group = rest[1:closing]
        parts = split_top_level(group)
        if not parts:
            break
        built = [build_annotation(part, strip_suffix="Attribute") for part in parts]
        if any(item is None for item in built):
            break
        annotations.extend(item for item in built if item is not None)
        rest = rest[closing + 1 :].lstrip()
    return annotations, rest


def peel_decorators(text: str) -> Tuple[List[AnnotationRecord], str]:
    """Split leading `@Name` / `@Name(args)` decorators off `text`."""
    annotations: List[AnnotationRecord] = []
    rest = text.lstrip()
    while rest.startswith("@"):
        raw, end = _read_invocation(rest, 1)
        if not raw:
            break
        annotation = build_annotation(raw)
        if annotation is None:
            break
        annotations.append(annotation)
        rest = rest[end:].lstrip()
    return annotations, rest


__all__ = [
    "build_annotation",
    "find_closing",
    "first_string_argument",
    "parse_arguments",
    "peel_bracket_annotations",
    "peel_decorators",
    "split_top_level",
    "unquote",
]

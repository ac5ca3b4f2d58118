"""Find type declarations in source text by pattern matching."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from ..models import AnnotationRecord
from .annotations import first_string_argument
from .dialects import Dialect

PREFIX_LOOKBACK = 10
_CONTROLLER_TOKEN = "[controller]"


@dataclass(frozen=True)
class Declaration:
    """A located type header with the offsets of its match."""

    keyword: str
    kind: str
    name: str
    start: int
    end: int
    base_types: Tuple[str, ...] = ()
    implemented_interfaces: Tuple[str, ...] = ()
    annotations: Tuple[AnnotationRecord, ...] = ()
    route_prefix: str = ""


def locate_declarations(text: str, dialect: Dialect) -> List[Declaration]:
    """Return every declaration header in `text`, in source order.

    A match only counts when it begins a statement: the text before it on
    the same line may hold indentation or annotations, nothing else. This
    keeps `class` inside comments, strings and constraint clauses out.
    """
    declarations: List[Declaration] = []
    for match in dialect.declaration_pattern.finditer(text):
        line_start = text.rfind("\n", 0, match.start()) + 1
        same_line = text[line_start : match.start()]
        if not dialect.starts_statement(same_line):
            continue
        kind, name, base_types, interfaces = dialect.declaration_parts(match)
        annotations = preceding_annotations(text, line_start, same_line, dialect)
        declarations.append(
            Declaration(
                keyword=match.group("keyword"),
                kind=kind,
                name=name,
                start=match.start(),
                end=match.end(),
                base_types=base_types,
                implemented_interfaces=interfaces,
                annotations=annotations,
                route_prefix=resolve_route_prefix(kind, name, annotations, dialect),
            )
        )
    return declarations


def preceding_annotations(
    text: str, line_start: int, same_line: str, dialect: Dialect
) -> Tuple[AnnotationRecord, ...]:
    """Collect the annotation block above a declaration.

    Looks at no more than PREFIX_LOOKBACK non-blank lines, the partial line
    before the match included, and stops at the first line that is neither an
    annotation nor a comment.
    """
    inline, _ = dialect.peel_annotations(same_line)
    budget = PREFIX_LOOKBACK - 1 if same_line.strip() else PREFIX_LOOKBACK
    blocks: List[List[AnnotationRecord]] = []
    for raw in reversed(text[:line_start].splitlines()):
        if budget <= 0:
            break
        line = raw.strip()
        if not line:
            continue
        budget -= 1
        if dialect.is_comment(line):
            continue
        annotations, rest = dialect.peel_annotations(line)
        if not annotations or rest:
            break
        blocks.append(annotations)
    ordered: List[AnnotationRecord] = []
    for block in reversed(blocks):
        ordered.extend(block)
    ordered.extend(inline)
    return tuple(ordered)


def resolve_route_prefix(
    kind: str, name: str, annotations: Sequence[AnnotationRecord], dialect: Dialect
) -> str:
    """Route prefix for a controller-like type, empty for everything else."""
    if kind != "class":
        return ""
    stem = name
    suffix = dialect.controller_suffix
    if name.endswith(suffix) and name != suffix:
        stem = name[: -len(suffix)]
    for annotation in annotations:
        if annotation.name.lower() not in dialect.container_route_annotations:
            continue
        value = first_string_argument(annotation, "template", "path")
        if value:
            return value.replace(_CONTROLLER_TOKEN, stem)
    return stem if stem != name else ""


__all__ = [
    "Declaration",
    "PREFIX_LOOKBACK",
    "locate_declarations",
    "preceding_annotations",
    "resolve_route_prefix",
]

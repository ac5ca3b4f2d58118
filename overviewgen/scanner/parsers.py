"""Built-in parsers for C#, TypeScript and GDScript sources."""

from __future__ import annotations

import re
from pathlib import PurePosixPath
from typing import List, Optional, Tuple

from ..models import (
    UNKNOWN_TYPE,
    AnnotationRecord,
    EndpointRecord,
    FileMetadata,
    MemberRecord,
    SourceFile,
    TypeRecord,
)
from .annotations import find_closing, peel_decorators
from .base import FileParser
from .body import Body, extract_body
from .declarations import Declaration, locate_declarations
from .dialects import CSHARP, TYPESCRIPT, Dialect, is_lifecycle_hook
from .endpoints import extract_endpoints
from .members import scan_enum_values, scan_members


class BraceParser(FileParser):
    """Locates declarations, extracts bodies, then scans members and endpoints."""

    dialect: Dialect

    def parse(self, source: SourceFile) -> FileMetadata:
        types: List[TypeRecord] = []
        endpoints: List[EndpointRecord] = []
        cursor = 0
        for declaration in locate_declarations(source.text, self.dialect):
            if declaration.start < cursor:
                continue
            body = extract_body(
                source.text, declaration.end, alias=declaration.kind == "type-alias"
            )
            if body is None:
                continue
            cursor = body.close + 1
            record = self._build_type(declaration, body)
            types.append(record)
            endpoints.extend(extract_endpoints(record, self.dialect))
        return FileMetadata(
            path=source.path,
            extension=source.extension,
            types=tuple(types),
            endpoints=tuple(endpoints),
        )

    def _build_type(self, declaration: Declaration, body: Body) -> TypeRecord:
        members: Tuple[MemberRecord, ...] = ()
        enum_values: Tuple[str, ...] = ()
        if declaration.kind == "enum":
            enum_values = scan_enum_values(body.text, self.dialect)
        else:
            members = scan_members(body.text, declaration.name, declaration.kind, self.dialect)
        return TypeRecord(
            name=declaration.name,
            kind=declaration.kind,
            base_types=declaration.base_types,
            implemented_interfaces=declaration.implemented_interfaces,
            members=members,
            enum_values=enum_values,
            annotations=declaration.annotations,
            route_prefix=declaration.route_prefix,
        )


class CSharpParser(BraceParser):
    name = "csharp"
    extensions = (".cs",)
    dialect = CSHARP


class TypeScriptParser(BraceParser):
    name = "typescript"
    extensions = (".ts", ".tsx")
    dialect = TYPESCRIPT


_GD_CLASS_NAME = re.compile(r"^class_name\s+(?P<name>\w+)")
_GD_EXTENDS = re.compile(r"^extends\s+(?P<base>[\w.]+|\"[^\"]+\"|'[^']+')")
_GD_FUNC = re.compile(r"^(?:static\s+)?func\s+(?P<name>\w+)\s*\(")
_GD_SIGNAL = re.compile(r"^signal\s+(?P<name>\w+)")
_GD_VARIABLE = re.compile(
    r"^(?:static\s+)?(?P<keyword>var|const)\s+(?P<name>\w+)\s*(?::\s*(?P<type>[^=:]+?))?\s*(?::?=|:|$)"
)
_GD_ENUM = re.compile(r"^enum\s+(?P<name>\w+)")
_GD_RETURN = re.compile(r"^\s*->\s*(?P<type>[^:]+?)\s*:?\s*$")


class GDScriptParser(FileParser):
    """Indentation-based scripts: one class per file, top-level members only."""

    name = "gdscript"
    extensions = (".gd",)

    def parse(self, source: SourceFile) -> FileMetadata:
        lines = source.text.splitlines()
        class_name: Optional[str] = None
        base_types: Tuple[str, ...] = ()
        type_annotations: List[AnnotationRecord] = []
        pending: List[AnnotationRecord] = []
        members: List[MemberRecord] = []

        index = 0
        while index < len(lines):
            raw = lines[index]
            index += 1
            if not raw.strip() or raw[0] in " \t" or raw.startswith("#"):
                continue
            annotations, line = peel_decorators(_strip_comment(raw))
            pending.extend(annotations)
            if not line:
                continue

            match = _GD_CLASS_NAME.match(line)
            if match:
                class_name = match.group("name")
                type_annotations.extend(pending)
                pending = []
                # `class_name X extends Y` may share one line.
                inline = _GD_EXTENDS.match(line[match.end() :].strip())
                if inline:
                    base_types = (inline.group("base").strip("\"'"),)
                continue
            match = _GD_EXTENDS.match(line)
            if match:
                base_types = (match.group("base").strip("\"'"),)
                type_annotations.extend(pending)
                pending = []
                continue

            member, index = self._member(line, lines, index, tuple(pending))
            pending = []
            if member is None:
                continue
            if member.name.startswith("_") and not is_lifecycle_hook(member.name):
                continue
            members.append(member)

        name = class_name or PurePosixPath(source.path).stem
        record = TypeRecord(
            name=name,
            kind="class",
            base_types=base_types,
            members=tuple(members),
            annotations=tuple(type_annotations),
        )
        return FileMetadata(path=source.path, extension=source.extension, types=(record,))

    def _member(
        self,
        line: str,
        lines: List[str],
        index: int,
        annotations: Tuple[AnnotationRecord, ...],
    ) -> Tuple[Optional[MemberRecord], int]:
        match = _GD_FUNC.match(line)
        if match:
            name = match.group("name")
            open_paren = match.end() - 1
            text, index = _join_parameters(line, lines, index, open_paren)
            close = find_closing(text, open_paren)
            if close == -1:
                return None, index
            returns = _GD_RETURN.match(text[close + 1 :])
            declared = returns.group("type") if returns else UNKNOWN_TYPE
            signature = text[: close + 1]
            if returns:
                signature += f" -> {declared}"
            kind = "constructor" if name == "_init" else "method"
            return MemberRecord(name, kind, declared, signature, annotations), index

        match = _GD_SIGNAL.match(line)
        if match:
            signature = line.rstrip(":").rstrip()
            name = match.group("name")
            return MemberRecord(name, "signal", UNKNOWN_TYPE, signature, annotations), index

        match = _GD_VARIABLE.match(line)
        if match:
            name = match.group("name")
            declared = (match.group("type") or "").strip() or UNKNOWN_TYPE
            signature = f"{match.group('keyword')} {name}"
            if declared != UNKNOWN_TYPE:
                signature += f": {declared}"
            kind = "readonly" if match.group("keyword") == "const" else "property"
            return MemberRecord(name, kind, declared, signature, annotations), index

        match = _GD_ENUM.match(line)
        if match:
            name = match.group("name")
            return MemberRecord(name, "field", UNKNOWN_TYPE, f"enum {name}", annotations), index
        return None, index


def _join_parameters(line: str, lines: List[str], index: int, open_paren: int) -> Tuple[str, int]:
    # Multi-line parameter lists continue on indented lines.
    text = line
    while find_closing(text, open_paren) == -1 and index < len(lines):
        text = f"{text} {lines[index].strip()}"
        index += 1
    return text, index


def _strip_comment(line: str) -> str:
    # A `#` after a quote may sit inside a string literal; keep such lines whole.
    head, hash_mark, _ = line.partition("#")
    if hash_mark and "\"" not in head and "'" not in head:
        return head.rstrip()
    return line.rstrip()


__all__ = ["BraceParser", "CSharpParser", "GDScriptParser", "TypeScriptParser"]

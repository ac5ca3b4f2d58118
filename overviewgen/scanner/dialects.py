"""Source dialects: the per-syntax lexical rules the scanner is parameterized by.

Two dialects are supported:

* ``CSharpDialect``: attribute-annotated sources (``[HttpGet("{id}")]``),
  ``:`` inheritance clauses, prefix type annotations (``int Count``).
* ``TypeScriptDialect``: decorator-annotated, structurally typed sources
  (``@Get(':id')``), ``extends``/``implements`` clauses, postfix type
  annotations (``count: number``).

Everything here is lexical. Nothing is resolved, and malformed input yields
``None``/empty results rather than exceptions.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Sequence, Tuple

from ..models import HTTP_METHODS, UNKNOWN_TYPE, AnnotationRecord
from .annotations import (
    find_closing,
    peel_bracket_annotations,
    peel_decorators,
    split_top_level,
)

_LIFECYCLE_HOOKS = frozenset(
    {
        "_ready",
        "_process",
        "_physicsprocess",
        "_input",
        "_unhandledinput",
        "_unhandledkeyinput",
        "_entertree",
        "_exittree",
        "_draw",
        "_notification",
        "_init",
    }
)


def is_lifecycle_hook(name: str) -> bool:
    """True for engine callbacks such as `_Ready` or `_physics_process`."""
    if not name.startswith("_"):
        return False
    return "_" + name[1:].replace("_", "").lower() in _LIFECYCLE_HOOKS


@dataclass(frozen=True)
class SignatureTokens:
    """Name, declared type and terminator recovered from a member header."""

    name: str
    declared_type: str
    terminator: str
    name_start: int
    modifiers: Tuple[str, ...] = ()
    open_paren: int = -1


@dataclass(frozen=True)
class Parameter:
    """A single entry of a parameter list."""

    name: str
    declared_type: str
    annotations: Tuple[AnnotationRecord, ...] = ()


class Dialect:
    """Base class holding the rules shared by both dialects."""

    name = "base"
    comment_prefixes: Tuple[str, ...] = ("//", "/*", "*")
    declaration_pattern: re.Pattern[str]
    kind_by_keyword: dict[str, str] = {}
    container_route_annotations: FrozenSet[str] = frozenset()
    route_annotations: FrozenSet[str] = frozenset({"route"})
    binding_annotations: FrozenSet[str] = frozenset()
    primitive_types: FrozenSet[str] = frozenset()
    action_result_markers: FrozenSet[str] = frozenset()
    controller_suffix = "Controller"
    enum_value_pattern = re.compile(r"^(?P<name>[A-Za-z_]\w*)\s*(?:=\s*(?P<value>-?(?:0[xX][0-9A-Fa-f]+|\d+)))?\s*,?")

    # -- lines -----------------------------------------------------------

    def is_comment(self, line: str) -> bool:
        return line.startswith(self.comment_prefixes)

    def peel_annotations(self, text: str) -> Tuple[List[AnnotationRecord], str]:
        raise NotImplementedError

    def starts_statement(self, prefix: str) -> bool:
        """True when `prefix` (text before a match on its line) is only indentation or annotations."""
        if not prefix.strip():
            return True
        _, rest = self.peel_annotations(prefix)
        return not rest.strip()

    # -- declarations ----------------------------------------------------

    def declaration_parts(self, match: re.Match[str]) -> Tuple[str, str, Tuple[str, ...], Tuple[str, ...]]:
        """Return (kind, name, base_types, implemented_interfaces) for a match."""
        raise NotImplementedError

    @staticmethod
    def split_type_list(text: Optional[str]) -> Tuple[str, ...]:
        if not text or not text.strip():
            return ()
        parts = split_top_level(text.strip())
        if parts is None:
            parts = text.split(",")
        return tuple(" ".join(part.split()) for part in parts if part.strip())

    # -- members ---------------------------------------------------------

    def is_member_candidate(self, line: str, interface_like: bool) -> bool:
        raise NotImplementedError

    def tokenize(self, signature: str) -> Optional[SignatureTokens]:
        raise NotImplementedError

    def finish_method(self, text: str, close: int, interface_like: bool) -> str:
        raise NotImplementedError

    def finish_value(self, text: str, tokens: SignatureTokens) -> str:
        raise NotImplementedError

    def member_kind(
        self,
        tokens: SignatureTokens,
        annotations: Sequence[AnnotationRecord],
        accessor_follows: bool = False,
    ) -> str:
        raise NotImplementedError

    def parameters(self, signature: str) -> List[Parameter]:
        tokens = self.tokenize(signature)
        if tokens is None or tokens.open_paren == -1:
            return []
        close = find_closing(signature, tokens.open_paren)
        if close == -1:
            return []
        inner = signature[tokens.open_paren + 1 : close].strip()
        if not inner:
            return []
        parts = split_top_level(inner)
        if parts is None:
            return []
        parameters: List[Parameter] = []
        for part in parts:
            parameter = self._parameter(part)
            if parameter is not None:
                parameters.append(parameter)
        return parameters

    def _parameter(self, text: str) -> Optional[Parameter]:
        raise NotImplementedError

    # -- endpoints -------------------------------------------------------

    def http_verb(self, annotation: AnnotationRecord) -> Optional[str]:
        raise NotImplementedError

    def is_primitive(self, type_name: str) -> bool:
        return normalise_type(type_name) in self.primitive_types


def normalise_type(type_name: str) -> str:
    """Strip nullability, array suffixes and a `System.` qualifier."""
    value = type_name.strip()
    while value.endswith(("?", "[]", "!")):
        value = value[:-2] if value.endswith("[]") else value[:-1]
    if value.startswith("System."):
        value = value[len("System.") :]
    return value


def _trailing_type(prefix: str) -> str:
    # Walks back from the end of `prefix` over one type token, keeping generics intact.
    index = len(prefix)
    depth = 0
    while index > 0:
        char = prefix[index - 1]
        if char == ">" and index > 1 and prefix[index - 2] == "=":
            break
        if char == ">":
            depth += 1
        elif char == "<":
            if depth == 0:
                break
            depth -= 1
        elif depth == 0 and not (char.isalnum() or char in "_?[].@"):
            break
        index -= 1
    return prefix[index:]


def _read_type_annotation(text: str, start: int) -> str:
    # Reads a TypeScript type expression starting at `start` until a top-level
    # terminator (`;`, `,`, `=` that is not `=>`, or a body-opening `{`).
    depth = 0
    quote: Optional[str] = None
    collected: List[str] = []
    index = start
    while index < len(text):
        char = text[index]
        if quote:
            collected.append(char)
            if char == quote:
                quote = None
            index += 1
            continue
        if char in "'\"`":
            quote = char
        elif char in "<([":
            depth += 1
        elif char in ">)]" and not (char == ">" and index > 0 and text[index - 1] == "="):
            if depth == 0:
                break
            depth -= 1
        elif char == "{":
            if depth == 0 and "".join(collected).strip():
                break
            depth += 1
        elif char == "}":
            if depth == 0:
                break
            depth -= 1
        elif depth == 0 and char in ";,":
            break
        elif depth == 0 and char == "=" and not text.startswith("=>", index):
            break
        collected.append(char)
        index += 1
    return " ".join("".join(collected).split())


# ---------------------------------------------------------------------------
# C# (attribute-annotated)
# ---------------------------------------------------------------------------

_CS_ACCESS = re.compile(r"^(?:public|private|protected|internal)\b")
_CS_MODIFIERS = frozenset(
    {
        "public",
        "private",
        "protected",
        "internal",
        "static",
        "virtual",
        "override",
        "abstract",
        "sealed",
        "async",
        "readonly",
        "const",
        "new",
        "extern",
        "unsafe",
        "volatile",
        "event",
        "partial",
        "required",
    }
)
_CS_NAME = re.compile(
    r"(?<![\w@])(?P<name>@?[A-Za-z_]\w*)\s*(?:<[^()=;{}]*>)?\s*(?P<term>\(|\{|;|=>|=|$)"
)
_CS_INDEXER = re.compile(r"(?<![\w@.])(?P<name>this)\s*(?P<term>\[)")
_CS_OPERATOR = re.compile(r"(?<![\w@])(?P<name>operator\s*[^\w\s(]+)\s*(?P<term>\()")
_CS_ACCESSORS_ONLY = re.compile(
    r"^\s*(?:(?:public|private|protected|internal)\s+)*(?:get|set|init)\s*;"
    r"(?:\s*(?:(?:public|private|protected|internal)\s+)*(?:get|set|init)\s*;)*\s*$"
)
_CS_PARAMETER_MODIFIERS = frozenset({"this", "ref", "out", "in", "params", "scoped", "readonly"})
_CS_VERB = re.compile(r"^Http(Get|Post|Put|Delete|Patch|Options|Head)$", re.IGNORECASE)


def _split_assignment(signature: str) -> Tuple[str, str]:
    # Returns the text before the first top-level `=>` or `=`, and that operator.
    depth = 0
    quote: Optional[str] = None
    index = 0
    while index < len(signature):
        char = signature[index]
        if quote:
            if char == "\\":
                index += 2
                continue
            if char == quote:
                quote = None
        elif char in "\"'":
            quote = char
        elif char in "([{":
            depth += 1
        elif char in ")]}":
            depth = max(0, depth - 1)
        elif char == "=" and depth == 0:
            if signature.startswith("=>", index):
                return signature[:index], "=>"
            if signature.startswith("==", index):
                index += 2
                continue
            if index == 0 or signature[index - 1] not in "!<>":
                return signature[:index], "="
        index += 1
    return signature, ""


def _special_member(head: str) -> Optional[re.Match[str]]:
    # Indexers and operator overloads, looked for only in the header before
    # the parameter list or body opens.
    stop = len(head)
    for char in "({":
        found = head.find(char)
        if found != -1:
            stop = min(stop, found)
    return _CS_INDEXER.search(head, 0, stop) or _CS_OPERATOR.search(head, 0, stop + 1)


class CSharpDialect(Dialect):
    """Attribute-annotated syntax: `[Route("x")] public class A : B`."""

    name = "csharp"
    comment_prefixes = ("//", "/*", "*", "#")
    declaration_pattern = re.compile(
        r"(?<![\w.])(?:(?:public|internal|protected|private|static|abstract|sealed|partial|readonly|unsafe|new|file)\s+)*"
        r"\b(?P<keyword>class|interface|enum|record)\s+(?:(?:class|struct)\s+)?"
        r"(?P<name>[A-Za-z_]\w*)"
        r"(?:\s*<[^<>{};]*(?:<[^<>{};]*>[^<>{};]*)*>)?"
        r"(?:\s*\([^)]*\))?"
        r"(?:\s*:\s*(?P<bases>[^{;]+?))?"
        r"(?=\s*(?:\{|;|\bwhere\b|$))",
        re.MULTILINE,
    )
    kind_by_keyword = {"class": "class", "interface": "interface", "enum": "enum", "record": "record"}
    container_route_annotations = frozenset({"route", "routeprefix"})
    binding_annotations = frozenset({"frombody", "fromform", "fromquery", "fromroute", "fromheader"})
    primitive_types = frozenset(
        {
            "int",
            "uint",
            "short",
            "ushort",
            "long",
            "ulong",
            "byte",
            "sbyte",
            "char",
            "string",
            "String",
            "bool",
            "Boolean",
            "object",
            "dynamic",
            "double",
            "float",
            "decimal",
            "Guid",
            "DateTime",
            "DateTimeOffset",
            "DateOnly",
            "TimeOnly",
            "TimeSpan",
            "Int32",
            "Int64",
            "void",
            "CancellationToken",
        }
    )
    action_result_markers = frozenset({"IActionResult", "ActionResult", "IResult"})

    def peel_annotations(self, text: str) -> Tuple[List[AnnotationRecord], str]:
        return peel_bracket_annotations(text)

    def declaration_parts(self, match: re.Match[str]) -> Tuple[str, str, Tuple[str, ...], Tuple[str, ...]]:
        kind = self.kind_by_keyword[match.group("keyword")]
        return kind, match.group("name"), self.split_type_list(match.group("bases")), ()

    def is_member_candidate(self, line: str, interface_like: bool) -> bool:
        if interface_like:
            return (
                "(" in line
                or "{ get" in line
                or "{get" in line
                or "{ set" in line
                or (" " in line and (";" in line or line.endswith("}")))
            )
        return bool(_CS_ACCESS.match(line))

    def tokenize(self, signature: str) -> Optional[SignatureTokens]:
        head, operator = _split_assignment(signature)
        match = _special_member(head) or _CS_NAME.search(head)
        if not match:
            return None
        name = match.group("name")
        term = match.group("term") or operator
        prefix = signature[: match.start("name")].rstrip()
        declared = _trailing_type(prefix)
        modifiers = tuple(word for word in prefix.split() if word in _CS_MODIFIERS)
        if not declared or declared in _CS_MODIFIERS:
            declared = UNKNOWN_TYPE
        open_paren = match.start("term") if term == "(" else -1
        return SignatureTokens(
            name=name,
            declared_type=declared,
            terminator=term,
            name_start=match.start("name"),
            modifiers=modifiers,
            open_paren=open_paren,
        )

    def finish_method(self, text: str, close: int, interface_like: bool) -> str:
        signature = text[: close + 1].rstrip()
        if interface_like and text[close + 1 :].lstrip().startswith(";"):
            signature += ";"
        return signature

    def finish_value(self, text: str, tokens: SignatureTokens) -> str:
        term_index = text.find(tokens.terminator, tokens.name_start + len(tokens.name)) if tokens.terminator else -1
        if tokens.terminator == "[" and term_index != -1:
            close = find_closing(text, term_index, "[", "]")
            if close != -1:
                return text[: close + 1].rstrip()
        if tokens.terminator == "{" and term_index != -1:
            close = find_closing(text, term_index, "{", "}")
            if close != -1 and _CS_ACCESSORS_ONLY.match(text[term_index + 1 : close]):
                return text[: close + 1].rstrip()
        if term_index == -1:
            return text.rstrip(" ;")
        return text[:term_index].rstrip()

    def member_kind(
        self,
        tokens: SignatureTokens,
        annotations: Sequence[AnnotationRecord],
        accessor_follows: bool = False,
    ) -> str:
        if "event" in tokens.modifiers or any(item.name.lower() == "signal" for item in annotations):
            return "signal"
        if tokens.terminator == "(":
            return "method"
        if "const" in tokens.modifiers or "readonly" in tokens.modifiers:
            return "readonly"
        if tokens.terminator in {"{", "=>", "["} or accessor_follows:
            return "property"
        return "field"

    def _parameter(self, text: str) -> Optional[Parameter]:
        annotations, rest = self.peel_annotations(text)
        default = split_top_level(rest, "=")
        if default:
            rest = default[0]
        words = rest.split()
        while words and words[0] in _CS_PARAMETER_MODIFIERS:
            words.pop(0)
        if not words:
            return None
        rest = " ".join(words)
        name = _trailing_type(rest)
        if not name or name == rest:
            return Parameter(name=rest, declared_type=UNKNOWN_TYPE, annotations=tuple(annotations))
        declared = rest[: len(rest) - len(name)].strip()
        return Parameter(name=name, declared_type=declared or UNKNOWN_TYPE, annotations=tuple(annotations))

    def http_verb(self, annotation: AnnotationRecord) -> Optional[str]:
        match = _CS_VERB.match(annotation.name)
        return match.group(1).upper() if match else None


# ---------------------------------------------------------------------------
# TypeScript (decorator-annotated, structurally typed)
# ---------------------------------------------------------------------------

_TS_MODIFIER_WORDS = (
    "public",
    "private",
    "protected",
    "readonly",
    "static",
    "async",
    "abstract",
    "override",
    "declare",
    "accessor",
    "get",
    "set",
)
_TS_MODIFIERS = r"(?:(?:" + "|".join(_TS_MODIFIER_WORDS) + r")\s+)"
_TS_ACCESS = re.compile(r"^" + _TS_MODIFIERS)
_TS_MEMBER_SHAPE = re.compile(r"^(?:async\s+)?[A-Za-z_$#][\w$]*\s*[?!]?\s*(?:<[^()]*>\s*)?(?:\(|:|=(?![=>])|;|$)")
_TS_NAME = re.compile(
    r"^(?P<mods>" + _TS_MODIFIERS + r"*)(?P<name>[A-Za-z_$#][\w$]*)\s*(?P<opt>[?!])?\s*"
    r"(?:<[^()]*?>)?\s*(?P<term>\(|:|=>|=|;|,|\{|$)"
)
_TS_STATEMENT_WORDS = frozenset(
    {
        "if",
        "for",
        "while",
        "switch",
        "return",
        "else",
        "case",
        "default",
        "import",
        "export",
        "const",
        "let",
        "var",
        "function",
        "new",
        "throw",
        "try",
        "catch",
        "finally",
        "type",
        "interface",
        "class",
        "enum",
        "await",
        "yield",
        "super",
        "this",
    }
)
_TS_PARAMETER_MODIFIERS = frozenset({"public", "private", "protected", "readonly", "override"})
_TS_ACCESSOR_MARKER = re.compile(r"^[A-Za-z_$][\w$]*\s*[?!]?\s*:")


class TypeScriptDialect(Dialect):
    """Decorator-annotated syntax: `@Controller('x') export class A extends B`."""

    name = "typescript"
    declaration_pattern = re.compile(
        r"(?<![\w.$])(?:(?:export|default|declare|abstract|const)\s+)*"
        r"\b(?P<keyword>class|interface|enum|type)\s+(?P<name>[A-Za-z_$][\w$]*)"
        r"(?:\s*<[^{};]*?>)?"
        r"(?:\s+extends\s+(?P<bases>[^{;=]+?))?"
        r"(?:\s+implements\s+(?P<interfaces>[^{;=]+?))?"
        r"(?=\s*(?:\{|=|;|$))",
        re.MULTILINE,
    )
    kind_by_keyword = {"class": "class", "interface": "interface", "enum": "enum", "type": "type-alias"}
    container_route_annotations = frozenset({"controller", "route"})
    binding_annotations = frozenset({"body", "query", "param", "headers", "header"})
    primitive_types = frozenset(
        {
            "string",
            "number",
            "boolean",
            "bigint",
            "symbol",
            "any",
            "unknown",
            "object",
            "never",
            "void",
            "null",
            "undefined",
            "Date",
            "String",
            "Number",
            "Boolean",
            "AbortSignal",
        }
    )

    def peel_annotations(self, text: str) -> Tuple[List[AnnotationRecord], str]:
        return peel_decorators(text)

    def declaration_parts(self, match: re.Match[str]) -> Tuple[str, str, Tuple[str, ...], Tuple[str, ...]]:
        kind = self.kind_by_keyword[match.group("keyword")]
        return (
            kind,
            match.group("name"),
            self.split_type_list(match.group("bases")),
            self.split_type_list(match.group("interfaces")),
        )

    def is_member_candidate(self, line: str, interface_like: bool) -> bool:
        if interface_like:
            return (
                "(" in line
                or bool(_TS_ACCESSOR_MARKER.match(line))
                or (" " in line and (";" in line or line.endswith("}")))
            )
        if _TS_ACCESS.match(line):
            return True
        first_word = re.match(r"[A-Za-z_$#][\w$]*", line)
        if not first_word or first_word.group(0) in _TS_STATEMENT_WORDS:
            return False
        return bool(_TS_MEMBER_SHAPE.match(line))

    def tokenize(self, signature: str) -> Optional[SignatureTokens]:
        match = _TS_NAME.match(signature)
        if not match:
            return None
        name = match.group("name")
        term = match.group("term")
        modifiers = tuple(match.group("mods").split())
        declared = ""
        open_paren = -1
        if term == "(":
            open_paren = match.start("term")
            close = find_closing(signature, open_paren)
            if close != -1:
                rest = signature[close + 1 :]
                colon = re.match(r"\s*:\s*", rest)
                if colon:
                    declared = _read_type_annotation(signature, close + 1 + colon.end())
        elif term == ":":
            declared = _read_type_annotation(signature, match.end("term"))
        return SignatureTokens(
            name=name,
            declared_type=declared or UNKNOWN_TYPE,
            terminator=term,
            name_start=match.start("name"),
            modifiers=modifiers,
            open_paren=open_paren,
        )

    def finish_method(self, text: str, close: int, interface_like: bool) -> str:
        signature = text[: close + 1].rstrip()
        rest = text[close + 1 :]
        colon = re.match(r"\s*:\s*", rest)
        if colon:
            annotation = _read_type_annotation(text, close + 1 + colon.end())
            if annotation:
                signature += f": {annotation}"
        if interface_like and rest.rstrip().endswith(";"):
            signature += ";"
        return signature

    def finish_value(self, text: str, tokens: SignatureTokens) -> str:
        head = text[: tokens.name_start + len(tokens.name)]
        optional = re.match(r"\s*([?!])", text[len(head) :])
        if optional:
            head += optional.group(1)
        if tokens.terminator == ":" and tokens.declared_type != UNKNOWN_TYPE:
            return f"{head}: {tokens.declared_type}"
        return head.rstrip()

    def member_kind(
        self,
        tokens: SignatureTokens,
        annotations: Sequence[AnnotationRecord],
        accessor_follows: bool = False,
    ) -> str:
        if tokens.name == "constructor":
            return "constructor"
        if tokens.terminator == "(":
            return "method"
        if "readonly" in tokens.modifiers:
            return "readonly"
        if tokens.terminator == ":":
            return "property"
        return "field"

    def _parameter(self, text: str) -> Optional[Parameter]:
        annotations, rest = self.peel_annotations(text)
        default = split_top_level(rest, "=")
        if default:
            rest = default[0]
        words = rest.split()
        while len(words) > 1 and words[0] in _TS_PARAMETER_MODIFIERS:
            words.pop(0)
        if not words:
            return None
        rest = " ".join(words)
        match = re.match(r"^(?:\.\.\.)?(?P<name>[A-Za-z_$][\w$]*)\s*\??\s*(?::\s*(?P<type>.+))?$", rest, re.DOTALL)
        if not match:
            return None
        declared = " ".join((match.group("type") or "").split())
        return Parameter(
            name=match.group("name"),
            declared_type=declared or UNKNOWN_TYPE,
            annotations=tuple(annotations),
        )

    def http_verb(self, annotation: AnnotationRecord) -> Optional[str]:
        verb = annotation.name.upper()
        return verb if verb in HTTP_METHODS else None


CSHARP = CSharpDialect()
TYPESCRIPT = TypeScriptDialect()


__all__ = [
    "CSHARP",
    "CSharpDialect",
    "Dialect",
    "Parameter",
    "SignatureTokens",
    "TYPESCRIPT",
    "TypeScriptDialect",
    "is_lifecycle_hook",
    "normalise_type",
]

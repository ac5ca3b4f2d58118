"""File parser implementations and discovery utilities."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Set

from ..models import FileMetadata, SourceFile
from .base import FileParser
from .parsers import CSharpParser, GDScriptParser, TypeScriptParser

_ENTRY_POINT_GROUP = "overviewgen.parsers"

_BUILTIN_FACTORIES: dict[str, Callable[[], FileParser]] = {
    "csharp": CSharpParser,
    "typescript": TypeScriptParser,
    "gdscript": GDScriptParser,
}


def discover_parsers() -> List[FileParser]:
    """Return the built-in parsers followed by any registered through entry points."""

    parsers: List[FileParser] = []
    seen: Set[str] = set()

    def _add(name: str, factory: Callable[[], FileParser]) -> None:
        key = name.lower()
        if key in seen:
            return
        instance = factory()
        if not isinstance(instance, FileParser):
            raise TypeError(f"Parser factory for '{name}' did not return a FileParser instance")
        parsers.append(instance)
        seen.add(key)

    for name, factory in _BUILTIN_FACTORIES.items():
        _add(name, factory)

    for entry in _iter_entry_points():
        name = entry.name
        try:
            loaded = entry.load()
        except Exception as exc:
            raise RuntimeError(f"Failed to load parser entry point '{name}': {exc}") from exc

        def _factory(obj: object = loaded) -> FileParser:
            return _coerce_parser(obj)

        _add(name, _factory)

    return parsers


class ParserRegistry:
    """Maps file extensions to the first parser that supports them."""

    def __init__(self, parsers: Sequence[FileParser] | None = None) -> None:
        self._parsers: List[FileParser] = (
            list(parsers) if parsers is not None else discover_parsers()
        )
        self._by_extension: Dict[str, FileParser] = {}
        for parser in self._parsers:
            for extension in parser.extensions:
                self._by_extension.setdefault(extension.lower(), parser)

    @property
    def parsers(self) -> List[FileParser]:
        return list(self._parsers)

    def extensions(self) -> List[str]:
        return sorted(self._by_extension)

    def parser_for(self, extension: str) -> Optional[FileParser]:
        return self._by_extension.get(extension.lower())

    def parse(self, source: SourceFile) -> Optional[FileMetadata]:
        """Scan `source`, or return None when no parser handles its extension."""
        parser = self.parser_for(source.extension)
        if parser is None:
            return None
        return parser.parse(source)


def _coerce_parser(obj: object) -> FileParser:
    if isinstance(obj, FileParser):
        return obj
    if isinstance(obj, type) and issubclass(obj, FileParser):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, FileParser):
            return instance
    raise TypeError("Parser entry point must be a FileParser subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__ = [
    "CSharpParser",
    "FileParser",
    "GDScriptParser",
    "ParserRegistry",
    "TypeScriptParser",
    "discover_parsers",
]

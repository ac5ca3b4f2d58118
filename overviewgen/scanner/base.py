"""Base classes for file parser plugins."""

from abc import ABC, abstractmethod
from typing import Tuple

from ..models import FileMetadata, SourceFile


class FileParser(ABC):
    """Contract for parsers that turn one source file into FileMetadata."""

    name: str = ""
    extensions: Tuple[str, ...] = ()

    def supports(self, extension: str) -> bool:
        """Return True when this parser handles files with `extension`."""
        return extension.lower() in self.extensions

    @abstractmethod
    def parse(self, source: SourceFile) -> FileMetadata:
        """Scan `source`; malformed constructs are skipped, never raised."""

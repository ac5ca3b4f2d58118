"""Category matching: assign each scanned file to at most one category."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Tuple

from .config import CategoryRule
from .logging import get_logger
from .models import FileMetadata

logger = get_logger("classification")

_MATCH_ALL = {"*", "**", "*/*", "**/*"}


@dataclass(frozen=True)
class Conflict:
    """A file together with every category it matched."""

    path: str
    categories: Tuple[str, ...]

    def describe(self) -> str:
        names = ", ".join(self.categories)
        return f"File '{self.path}' matches multiple categories: {names}."


class ClassificationConflict(RuntimeError):
    """Raised when one or more files match more than one category."""

    def __init__(self, conflicts: Sequence[Conflict]) -> None:
        if not conflicts:
            raise ValueError("ClassificationConflict requires at least one conflict")
        self.conflicts: Tuple[Conflict, ...] = tuple(conflicts)
        lines = [conflict.describe() for conflict in self.conflicts]
        lines.append(
            "Each file must belong to exactly one category. "
            "Adjust paths, patterns or extensions so the categories do not overlap."
        )
        super().__init__("\n".join(lines))

    @property
    def path(self) -> str:
        return self.conflicts[0].path

    @property
    def categories(self) -> Tuple[str, ...]:
        return self.conflicts[0].categories


def normalise_extension(extension: str) -> str:
    value = extension.strip().lower().lstrip("*")
    if value and not value.startswith("."):
        value = f".{value}"
    return value


def path_matches(path: str, pattern: str) -> bool:
    """Case-insensitive containment match with `*` / `*/X` shorthands."""
    path = path.replace("\\", "/").lower()
    pattern = pattern.replace("\\", "/").lower().strip()
    if not pattern:
        return False
    if pattern in _MATCH_ALL:
        return True
    if pattern.startswith("*/"):
        suffix = pattern[2:]
        return f"/{suffix}" in path or path.endswith(suffix)
    return pattern.rstrip("*") in path


def name_matches(path: str, pattern: str) -> bool:
    pattern = pattern.strip().lower()
    return bool(pattern) and pattern in path.replace("\\", "/").lower()


class CategoryMatchingEngine:
    """Evaluates every category rule independently against a file path."""

    def __init__(self, rules: Sequence[CategoryRule]) -> None:
        self._rules: List[CategoryRule] = list(rules)

    def rule_matches(self, rule: CategoryRule, path: str, extension: str) -> bool:
        if rule.extensions:
            wanted = {normalise_extension(item) for item in rule.extensions}
            if normalise_extension(extension) not in wanted:
                return False
        if rule.include_paths and not any(path_matches(path, item) for item in rule.include_paths):
            return False
        if any(path_matches(path, item) for item in rule.exclude_paths):
            return False
        if rule.include_name_patterns and not any(
            name_matches(path, item) for item in rule.include_name_patterns
        ):
            return False
        if any(name_matches(path, item) for item in rule.exclude_name_patterns):
            return False
        return True

    def match(self, path: str, extension: str) -> List[str]:
        """Names of every rule the file satisfies, in configuration order."""
        return [rule.name for rule in self._rules if self.rule_matches(rule, path, extension)]

    def classify(self, path: str, extension: str) -> str:
        """Return the single matching category, or "" when none matches."""
        matches = self.match(path, extension)
        if len(matches) > 1:
            raise ClassificationConflict([Conflict(path=path, categories=tuple(matches))])
        return matches[0] if matches else ""

    def classify_all(self, files: Iterable[FileMetadata]) -> Dict[str, str]:
        """Classify the whole file set, raising once with every conflict found."""
        result: Dict[str, str] = {}
        conflicts: List[Conflict] = []
        for file in files:
            matches = self.match(file.path, file.extension)
            if len(matches) > 1:
                conflicts.append(Conflict(path=file.path, categories=tuple(matches)))
                continue
            result[file.path] = matches[0] if matches else ""
        if conflicts:
            for conflict in conflicts:
                logger.error(conflict.describe())
            raise ClassificationConflict(conflicts)
        unclassified = sum(1 for category in result.values() if not category)
        if unclassified:
            logger.debug("%d file(s) matched no category", unclassified)
        return result


__all__ = [
    "CategoryMatchingEngine",
    "ClassificationConflict",
    "Conflict",
    "name_matches",
    "normalise_extension",
    "path_matches",
]

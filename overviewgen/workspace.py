"""Workspace discovery: walk a source tree and read the files the scanner handles."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, Iterator, List, Sequence

from .logging import get_logger
from .models import SourceFile

logger = get_logger("workspace")

EXCLUDED_DIRS = frozenset(
    {
        "bin",
        "obj",
        "node_modules",
        ".git",
        ".hg",
        ".svn",
        ".vs",
        ".idea",
        ".vscode",
        ".venv",
        ".godot",
        "__pycache__",
        "dist",
        "PROJECT_OVERVIEW",
    }
)


@dataclass
class IgnoreRule:
    """A single .gitignore pattern."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        if self.anchored or self.has_slash:
            if fnmatchcase(rel_path, self.pattern):
                return True
            return self.directory_only and rel_path.startswith(f"{self.pattern}/")

        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def build_ignore_rule(pattern: str, negate: bool = False) -> IgnoreRule | None:
    pattern = pattern.strip().replace("\\", "/")
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern.rstrip("/")

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern.lstrip("/")

    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash="/" in pattern,
    )


def load_gitignore(root: Path) -> List[IgnoreRule]:
    path = root / ".gitignore"
    if not path.is_file():
        return []

    rules: List[IgnoreRule] = []
    for raw_line in path.read_text(encoding="utf-8", errors="replace").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        negate = line.startswith("!")
        if negate:
            line = line[1:]
        rule = build_ignore_rule(line, negate=negate)
        if rule is not None:
            rules.append(rule)
    return rules


def is_ignored(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    # Later rules win, so a negation can re-include an earlier match.
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


def iter_workspace(root: Path, rules: Sequence[IgnoreRule] = ()) -> Iterator[str]:
    """Yield `/`-separated relative paths of every file under `root`."""
    for dirpath, dirnames, filenames in os.walk(root):
        current_dir = Path(dirpath)
        rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

        kept = []
        for name in sorted(dirnames):
            if name in EXCLUDED_DIRS:
                continue
            rel_path = f"{rel_dir}/{name}" if rel_dir else name
            if is_ignored(rel_path, True, rules):
                continue
            kept.append(name)
        dirnames[:] = kept

        for filename in sorted(filenames):
            rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
            if is_ignored(rel_path, False, rules):
                continue
            yield rel_path


def resolve_root(root: str | Path) -> Path:
    root_path = Path(root).expanduser().resolve()
    if not root_path.exists():
        raise FileNotFoundError(f"Workspace path not found: {root}")
    if not root_path.is_dir():
        raise NotADirectoryError(f"Workspace path is not a directory: {root}")
    return root_path


class WorkspaceScanner:
    """Collects the source files whose extension has a registered parser."""

    def __init__(self, extensions: Iterable[str]) -> None:
        self.extensions = frozenset(extension.lower() for extension in extensions)

    def scan(self, root: str | Path) -> List[SourceFile]:
        """Return SourceFiles sorted by relative path."""
        root_path = resolve_root(root)
        rules = load_gitignore(root_path)

        files: List[SourceFile] = []
        for rel_path in iter_workspace(root_path, rules):
            extension = Path(rel_path).suffix.lower()
            if extension not in self.extensions:
                continue
            try:
                text = (root_path / rel_path).read_text(encoding="utf-8", errors="replace")
            except OSError as exc:
                # Kept with no text so the scan reports it as unparsed.
                logger.warning("Could not read %s: %s", rel_path, exc)
                text = ""
            files.append(SourceFile(path=rel_path, extension=extension, text=text))

        files.sort(key=lambda item: item.path)
        logger.debug("Discovered %d source file(s) under %s", len(files), root_path)
        return files


__all__ = [
    "EXCLUDED_DIRS",
    "IgnoreRule",
    "WorkspaceScanner",
    "build_ignore_rule",
    "is_ignored",
    "iter_workspace",
    "load_gitignore",
    "resolve_root",
]

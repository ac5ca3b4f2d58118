"""Directory tree rendering for the project structure report."""

from __future__ import annotations

from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Dict, Iterable, List, Sequence

from ..classification import normalise_extension
from ..config import ProjectStructureConfig
from ..workspace import iter_workspace, load_gitignore

_BRANCH = "├── "
_LAST = "└── "
_PIPE = "│   "
_SPACE = "    "


@dataclass
class _Node:
    name: str
    children: Dict[str, "_Node"] = field(default_factory=dict)


def _excluded_directory(rel_path: str, patterns: Sequence[str]) -> bool:
    lowered = rel_path.lower()
    name = lowered.rsplit("/", 1)[-1]
    for raw in patterns:
        pattern = raw.replace("\\", "/").strip().lstrip("*/").rstrip("/").lower()
        if not pattern:
            continue
        if "/" in pattern:
            if lowered == pattern or lowered.endswith(f"/{pattern}"):
                return True
        elif fnmatchcase(name, pattern):
            return True
    return False


def collect_tree_paths(root: Path, config: ProjectStructureConfig | None = None) -> List[str]:
    """Relative file paths shown in the tree, honouring the structure exclusions."""
    excluded_paths = list(config.excluded_paths) if config else []
    excluded_extensions = {
        normalise_extension(item) for item in (config.excluded_extensions if config else [])
    }

    paths: List[str] = []
    for rel_path in iter_workspace(root, load_gitignore(root)):
        directories = rel_path.split("/")[:-1]
        prefixes = ["/".join(directories[: index + 1]) for index in range(len(directories))]
        if any(_excluded_directory(prefix, excluded_paths) for prefix in prefixes):
            continue
        if Path(rel_path).suffix.lower() in excluded_extensions:
            continue
        paths.append(rel_path)
    return paths


def render_tree(root_name: str, paths: Iterable[str]) -> str:
    """Render `paths` as a box-drawing tree; directories sort before files."""
    root = _Node(root_name)
    for path in paths:
        node = root
        for part in path.split("/"):
            node = node.children.setdefault(part, _Node(part))

    lines = [f"{root_name}/"]
    _render_children(root, "", lines)
    return "\n".join(lines)


def _render_children(node: _Node, indent: str, lines: List[str]) -> None:
    children = sorted(
        node.children.values(), key=lambda child: (not child.children, child.name.lower())
    )
    for index, child in enumerate(children):
        last = index == len(children) - 1
        suffix = "/" if child.children else ""
        lines.append(f"{indent}{_LAST if last else _BRANCH}{child.name}{suffix}")
        if child.children:
            _render_children(child, indent + (_SPACE if last else _PIPE), lines)


__all__ = ["collect_tree_paths", "render_tree"]

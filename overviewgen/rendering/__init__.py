"""Markdown rendering for overview reports."""

from .lint import MarkdownLinter
from .markdown import API_ENDPOINTS_FILE, PROJECT_STRUCTURE_FILE, MarkdownRenderer
from .tree import collect_tree_paths, render_tree

__all__ = [
    "API_ENDPOINTS_FILE",
    "MarkdownLinter",
    "MarkdownRenderer",
    "PROJECT_STRUCTURE_FILE",
    "collect_tree_paths",
    "render_tree",
]

"""Whitespace normalisation for generated markdown reports."""

from __future__ import annotations

import re
from typing import List

_HEADING = re.compile(r"^#{1,6}\s")


class MarkdownLinter:
    """Collapses blank lines and spaces out headings, leaving code blocks alone."""

    def lint(self, markdown: str) -> str:
        normalized = markdown.replace("\r\n", "\n").replace("\r", "\n")
        cleaned: List[str] = []
        in_code = False

        for line in normalized.split("\n"):
            stripped = line.rstrip()
            if self._toggles_code(stripped, in_code):
                in_code = not in_code
                cleaned.append(stripped)
                continue
            if in_code:
                cleaned.append(stripped)
                continue

            if not stripped:
                # Drop leading and repeated blank lines.
                if cleaned and cleaned[-1] != "":
                    cleaned.append("")
                continue

            heading = bool(_HEADING.match(stripped))
            if heading and cleaned and cleaned[-1] != "":
                cleaned.append("")
            cleaned.append(stripped)
            if heading:
                cleaned.append("")

        while cleaned and cleaned[-1] == "":
            cleaned.pop()

        return "\n".join(cleaned) + "\n"

    @staticmethod
    def _toggles_code(line: str, in_code: bool) -> bool:
        if line.startswith("```"):
            return True
        return line == ("</pre>" if in_code else "<pre>")


__all__ = ["MarkdownLinter"]

"""Writing rendered reports to disk."""

from __future__ import annotations

from pathlib import Path

from .logging import get_logger

OVERVIEW_DIRNAME = "PROJECT_OVERVIEW"

logger = get_logger("output")


class OutputWriter:
    """Writes UTF-8 report files, creating the target directory on demand."""

    def write(self, directory: Path, name: str, content: str) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        target = directory / name
        target.write_text(content, encoding="utf-8")
        logger.info("Wrote %s", target)
        return target


__all__ = ["OVERVIEW_DIRNAME", "OutputWriter"]

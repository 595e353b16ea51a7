from __future__ import annotations

import logging
from pathlib import Path


def configure_logging(verbose: bool = False) -> None:
    """Configure a simple console logger."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(message)s",
    )


def read_markdown(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def offset_to_line_col(source: str, offset: int) -> tuple[int, int]:
    """Translate a character offset into a 1-based (line, column) pair."""
    offset = max(0, min(offset, len(source)))
    line = source.count("\n", 0, offset) + 1
    line_start = source.rfind("\n", 0, offset) + 1
    return line, offset - line_start + 1

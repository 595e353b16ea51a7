from __future__ import annotations

from typing import Iterable

from .utils import offset_to_line_col


class MarkSpanError(Exception):
    """Base class for every error raised by MarkSpan."""


class ParseError(MarkSpanError):
    """A recognizer could not accept the input at ``offset``.

    ``expected`` names the recognizer(s) that were tried there.
    """

    def __init__(self, message: str, offset: int, expected: Iterable[str] = ()) -> None:
        self.message = message
        self.offset = offset
        self.expected = tuple(expected)
        super().__init__(f"{message} at offset {offset}")

    def locate(self, source: str) -> tuple[int, int]:
        """Return the 1-based (line, column) of the error inside ``source``."""
        return offset_to_line_col(source, self.offset)


class RecognizerMismatch(ParseError):
    """A single recognizer did not match; the caller tries the next one."""


class UnparseableRegion(ParseError):
    """No recognizer in the priority list matched at the offset."""


class IncompleteConstruct(ParseError):
    """A fence, bracket or header was opened but never closed."""


class FrontmatterError(ParseError):
    """The frontmatter header could not be tokenized or assembled."""

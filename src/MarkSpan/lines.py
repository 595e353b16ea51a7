"""Line and literal primitives shared by every recognizer.

Each primitive works on ``source[pos:end]`` and returns the new position, or
raises :class:`RecognizerMismatch` without consuming anything.
"""

from __future__ import annotations

import re

from .errors import RecognizerMismatch
from .model import Span

BLANK_LINE_RE = re.compile(r"\r?\n\r?\n")


def line_ending(source: str, pos: int, end: int) -> int:
    """Consume one ``\\n`` or ``\\r\\n`` terminator."""
    if source.startswith("\n", pos, end):
        return pos + 1
    if source.startswith("\r\n", pos, end):
        return pos + 2
    raise RecognizerMismatch("expected a line ending", pos, ("line_ending",))


def _line_content_end(source: str, pos: int, end: int) -> int:
    newline = source.find("\n", pos, end)
    if newline == -1:
        return end
    if newline > pos and source[newline - 1] == "\r":
        return newline - 1
    return newline


def parse_line(source: str, pos: int, end: int) -> tuple[Span, int]:
    """Return the line starting at ``pos`` and the position past its terminator.

    The terminator is required.
    """
    content_end = _line_content_end(source, pos, end)
    if content_end == end:
        raise RecognizerMismatch("expected a terminated line", pos, ("line",))
    return Span(source, pos, content_end), line_ending(source, content_end, end)


def parse_line_optional(source: str, pos: int, end: int) -> tuple[Span, int]:
    """Like :func:`parse_line`, but the last line of the input may lack a terminator.

    At the end of the input this yields an empty line without consuming anything.
    """
    content_end = _line_content_end(source, pos, end)
    if content_end == end:
        return Span(source, pos, end), end
    return Span(source, pos, content_end), line_ending(source, content_end, end)


def tag(source: str, pos: int, end: int, literal: str) -> int:
    if not source.startswith(literal, pos, end):
        raise RecognizerMismatch(f"expected {literal!r}", pos, (repr(literal),))
    return pos + len(literal)


def take_while1(source: str, pos: int, end: int, predicate, name: str) -> int:
    """Consume one or more characters accepted by ``predicate``."""
    cursor = pos
    while cursor < end and predicate(source[cursor]):
        cursor += 1
    if cursor == pos:
        raise RecognizerMismatch(f"expected {name}", pos, (name,))
    return cursor


def find_blank_line(source: str, pos: int, end: int) -> re.Match[str] | None:
    return BLANK_LINE_RE.search(source, pos, end)

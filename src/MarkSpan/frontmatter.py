"""Frontmatter header: splitting, token lexing and value-tree assembly.

A header looks like::

    ---
    title: the title
    keywords:
      - item 1
      - item 2
    ---

The lexer yields a flat stream of ``Key``, ``ListItem``, ``Indent``,
``LineBreak`` and ``Text`` tokens; :func:`build` turns that stream into
``Scalar`` / ``ListValue`` / ``MapValue`` nodes by indentation depth.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, List, Optional, Union

import yaml

from .config import FRONTMATTER_DELIMITER, FRONTMATTER_INDENT, MetadataBackend
from .errors import FrontmatterError, IncompleteConstruct
from .model import Span

logger = logging.getLogger(__name__)

OPEN_RE = re.compile(re.escape(FRONTMATTER_DELIMITER) + r"[ \t]*\r?\n")
CLOSE_RE = re.compile(r"^" + re.escape(FRONTMATTER_DELIMITER) + r"[ \t]*(?:\r?\n|\Z)", re.MULTILINE)
KEY_RE = re.compile(r"([^:\r\n]+):(?:[ \t]+|(?=\r?\n)|\Z)")
TEXT_RE = re.compile(r"(?:[^\r\n]|\r(?!\n))+")


@dataclass
class Key:
    name: Span
    span: Span


@dataclass
class ListItem:
    span: Span


@dataclass
class Indent:
    span: Span


@dataclass
class LineBreak:
    span: Span


@dataclass
class Text:
    content: Span

    @property
    def span(self) -> Span:
        return self.content


Token = Union[Key, ListItem, Indent, LineBreak, Text]


def tokenize(source: str, pos: int = 0, end: int | None = None) -> list[Token]:
    """Lex ``source[pos:end]`` into frontmatter tokens.

    Keys, indents, list markers and ``#`` comments are only recognized at the
    start of a line, so a value such as ``a: b: c`` lexes as one key and one
    text run. Comment lines produce no tokens besides their line break.
    """
    end = len(source) if end is None else end
    tokens: List[Token] = []
    line_start = True
    while pos < end:
        if source.startswith("\n", pos, end) or source.startswith("\r\n", pos, end):
            size = 1 if source[pos] == "\n" else 2
            tokens.append(LineBreak(Span(source, pos, pos + size)))
            pos += size
            line_start = True
            continue
        if line_start and source.startswith(FRONTMATTER_INDENT, pos, end):
            tokens.append(Indent(Span(source, pos, pos + len(FRONTMATTER_INDENT))))
            pos += len(FRONTMATTER_INDENT)
            continue
        if line_start and source.startswith("- ", pos, end):
            tokens.append(ListItem(Span(source, pos, pos + 2)))
            pos += 2
            continue
        if line_start and source.startswith("#", pos, end):
            # full-line comment, dropped
            pos = TEXT_RE.match(source, pos, end).end()
            continue
        if line_start:
            match = KEY_RE.match(source, pos, end)
            if match is not None:
                name = Span(source, match.start(1), match.end(1)).strip()
                tokens.append(Key(name=name, span=Span(source, pos, match.end())))
                pos = match.end()
                line_start = False
                continue
        match = TEXT_RE.match(source, pos, end)
        if match is None:
            raise FrontmatterError("no frontmatter token matches", pos, ("line_break", "indent", "list_item", "key", "text"))
        tokens.append(Text(Span(source, pos, match.end())))
        pos = match.end()
        line_start = False
    return tokens


@dataclass
class Value:
    """Base class for assembled frontmatter values."""

    def to_python(self) -> Any:
        raise NotImplementedError


@dataclass
class Scalar(Value):
    text: Span

    def to_python(self) -> Optional[str]:
        value = self.text.text.strip()
        return value or None


@dataclass
class ListValue(Value):
    items: List[Value] = field(default_factory=list)

    def to_python(self) -> list:
        return [item.to_python() for item in self.items]


@dataclass
class MapValue(Value):
    entries: List[tuple[Span, Value]] = field(default_factory=list)

    def to_python(self) -> dict:
        return {key.text: value.to_python() for key, value in self.entries}

    def get(self, name: str) -> Optional[Value]:
        for key, value in reversed(self.entries):
            if key == name:
                return value
        return None


@dataclass
class _Line:
    indent: int
    tokens: List[Token]
    offset: int


def _group_lines(tokens: list[Token]) -> list[_Line]:
    lines: List[_Line] = []
    indent = 0
    content: List[Token] = []
    for token in tokens:
        if isinstance(token, LineBreak):
            if content:
                lines.append(_Line(indent, content, content[0].span.start))
            indent, content = 0, []
        elif isinstance(token, Indent) and not content:
            indent += 1
        else:
            content.append(token)
    if content:
        lines.append(_Line(indent, content, content[0].span.start))
    return lines


def build(tokens: list[Token]) -> Value:
    """Assemble a token stream into a value tree."""
    lines = _group_lines(tokens)
    if not lines:
        return MapValue()
    value, index = _parse_node(lines, 0, lines[0].indent)
    if index < len(lines):
        raise FrontmatterError("unexpected indentation", lines[index].offset, ("key", "list_item"))
    return value


def _empty_after(token: Token) -> Scalar:
    return Scalar(Span(token.span.source, token.span.end, token.span.end))


def _opens_child(line: _Line, indent: int) -> bool:
    return line.indent > indent or (line.indent == indent and isinstance(line.tokens[0], ListItem))


def _parse_node(lines: list[_Line], index: int, indent: int) -> tuple[Value, int]:
    first = lines[index].tokens[0]
    if isinstance(first, ListItem):
        return _parse_list(lines, index, indent)
    if isinstance(first, Key):
        return _parse_map(lines, index, indent)
    return Scalar(first.span), index + 1


def _parse_map(lines: list[_Line], index: int, indent: int) -> tuple[MapValue, int]:
    mapping = MapValue()
    while index < len(lines) and lines[index].indent == indent and isinstance(lines[index].tokens[0], Key):
        key, *rest = lines[index].tokens
        index += 1
        if rest:
            value: Value = Scalar(rest[0].span)
        elif index < len(lines) and _opens_child(lines[index], indent):
            value, index = _parse_node(lines, index, lines[index].indent)
        else:
            value = _empty_after(key)
        mapping.entries.append((key.name, value))
    return mapping, index


def _parse_list(lines: list[_Line], index: int, indent: int) -> tuple[ListValue, int]:
    items = ListValue()
    while index < len(lines) and lines[index].indent == indent and isinstance(lines[index].tokens[0], ListItem):
        marker, *rest = lines[index].tokens
        if not rest:
            index += 1
            if index < len(lines) and lines[index].indent > indent:
                value, index = _parse_node(lines, index, lines[index].indent)
            else:
                value = _empty_after(marker)
        elif isinstance(rest[0], (Key, ListItem)):
            # "- name: x" opens a nested node whose siblings sit one level deeper
            lines[index] = _Line(indent + 1, rest, rest[0].span.start)
            value, index = _parse_node(lines, index, indent + 1)
        else:
            value = Scalar(rest[0].span)
            index += 1
        items.items.append(value)
    return items, index


@dataclass
class Frontmatter:
    span: Span
    content: Span
    tokens: List[Token]

    @cached_property
    def value(self) -> Value:
        """The builtin value tree, assembled on first access."""
        return build(self.tokens)


def split_frontmatter(source: str) -> tuple[Optional[Span], Optional[Span]]:
    """Locate a ``---`` header at the very start of ``source``.

    Returns ``(header_span, content_span)`` or ``(None, None)`` when the
    document has no header.
    """
    opening = OPEN_RE.match(source)
    if opening is None:
        return None, None
    closing = CLOSE_RE.search(source, opening.end())
    if closing is None:
        raise IncompleteConstruct("frontmatter header is never closed", 0, ("frontmatter",))
    return Span(source, 0, closing.end()), Span(source, opening.end(), closing.start())


def parse_frontmatter(source: str) -> Optional[Frontmatter]:
    header, content = split_frontmatter(source)
    if header is None:
        return None
    tokens = tokenize(source, content.start, content.end)
    logger.debug("frontmatter at 0-%d with %d tokens", header.end, len(tokens))
    return Frontmatter(span=header, content=content, tokens=tokens)


def load_metadata(frontmatter: Frontmatter, backend: MetadataBackend = "builtin") -> dict[str, Any]:
    """Turn a parsed header into a plain mapping."""
    if backend == "yaml":
        try:
            data = yaml.safe_load(frontmatter.content.text) or {}
        except yaml.YAMLError as exc:
            raise FrontmatterError(f"invalid YAML header: {exc}", frontmatter.content.start) from exc
    else:
        data = frontmatter.value.to_python() or {}
    if not isinstance(data, dict):
        raise FrontmatterError("frontmatter root must be a mapping", frontmatter.content.start)
    return data

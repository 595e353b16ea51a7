from __future__ import annotations

import logging
import re
from typing import Callable, List, Sequence, Tuple, TypeVar

from .config import (
    BULLET_PREFIX,
    CODE_FENCE,
    DEFAULT_OPTIONS,
    FOOTNOTE_CONTINUATION,
    FOOTNOTE_OPEN,
    HEADING_MARKER,
    ORDERED_SEPARATOR,
    TASK_COMPLETED_PREFIX,
    TASK_INCOMPLETE_PREFIX,
    TEXT_STOP_CHARS,
    ParseOptions,
)
from .errors import IncompleteConstruct, RecognizerMismatch, UnparseableRegion
from .lines import find_blank_line, line_ending, parse_line, parse_line_optional, tag, take_while1
from .model import (
    Block,
    CodeBlock,
    Document,
    Footnote,
    FootnoteRef,
    Heading,
    Image,
    InlineCode,
    InlineElement,
    Link,
    Newline,
    OrderedList,
    Span,
    Task,
    TaskList,
    Text,
    TextBlock,
    UnorderedList,
)

logger = logging.getLogger(__name__)

N = TypeVar("N")
Recognizer = Callable[[str, int, int, ParseOptions], Tuple[N, int]]

TEXT_RE = re.compile("[^" + re.escape(TEXT_STOP_CHARS) + "]+")
DIGITS = frozenset("0123456789")


def parse_markdown(text: str, options: ParseOptions | None = None) -> Document:
    """Parse a Markdown body (no frontmatter) into a Document."""
    return Document(source=text, blocks=parse_blocks(text, options=options))


def parse_blocks(
    source: str, pos: int = 0, end: int | None = None, options: ParseOptions | None = None
) -> list[Block]:
    """Consume ``source[pos:end]`` one block at a time, in priority order.

    Raises UnparseableRegion when no recognizer accepts the current position.
    """
    options = options or DEFAULT_OPTIONS
    end = len(source) if end is None else end
    blocks: List[Block] = []
    while pos < end:
        block, new_pos = _first_match(BLOCK_PARSERS, source, pos, end, options, what="block")
        logger.debug("%s at %d-%d", block.kind, pos, new_pos)
        blocks.append(block)
        pos = new_pos
    return blocks


def parse_inline(source: str, pos: int, end: int, options: ParseOptions | None = None) -> list[InlineElement]:
    """Decompose ``source[pos:end]`` completely into inline items."""
    options = options or DEFAULT_OPTIONS
    parsers = (INLINE_PARSERS + (parse_inline_code,)) if options.inline_code else INLINE_PARSERS
    items: List[InlineElement] = []
    while pos < end:
        item, pos = _first_match(parsers, source, pos, end, options, what="inline item")
        items.append(item)
    return items


def _first_match(parsers: Sequence[Recognizer], source: str, pos: int, end: int, options: ParseOptions, what: str):
    for parser in parsers:
        try:
            node, new_pos = parser(source, pos, end, options)
        except RecognizerMismatch:
            continue
        if new_pos <= pos:
            raise RuntimeError(f"{parser.__name__} succeeded without consuming input at {pos}")
        return node, new_pos
    raise UnparseableRegion(f"no {what} matches", pos, [recognizer_name(p) for p in parsers])


def recognizer_name(parser: Callable) -> str:
    return parser.__name__.removeprefix("parse_")


def _many1(item_parser: Recognizer[N], source: str, pos: int, end: int, options: ParseOptions) -> tuple[list[N], int]:
    items: List[N] = []
    while pos < end:
        try:
            item, pos = item_parser(source, pos, end, options)
        except RecognizerMismatch:
            if not items:
                raise
            break
        items.append(item)
    if not items:
        raise RecognizerMismatch("expected at least one item", pos, (recognizer_name(item_parser),))
    return items, pos


# Leaf block recognizers


def parse_heading(source: str, pos: int, end: int, options: ParseOptions = DEFAULT_OPTIONS) -> tuple[Heading, int]:
    rest = take_while1(source, pos, end, lambda c: c == HEADING_MARKER, "heading marker")
    level = rest - pos
    if options.max_heading_level is not None and level > options.max_heading_level:
        raise RecognizerMismatch(f"heading level {level} is above the limit", pos, ("heading",))
    line, rest = parse_line_optional(source, rest, end)
    return Heading(level=level, text=line.strip(), span=Span(source, pos, rest)), rest


def parse_code_block(source: str, pos: int, end: int, options: ParseOptions = DEFAULT_OPTIONS) -> tuple[CodeBlock, int]:
    rest = tag(source, pos, end, CODE_FENCE)
    try:
        language, rest = parse_line(source, rest, end)
    except RecognizerMismatch:
        raise IncompleteConstruct("code fence is never closed", pos, ("code_block",)) from None
    language = language.strip()

    body_start = rest
    closing = source.find(CODE_FENCE, body_start, end)
    if closing == -1:
        raise IncompleteConstruct("code fence is never closed", pos, ("code_block",))
    # The whole body, minus the line ending in front of the closing fence.
    body_end = closing
    if closing - 2 >= body_start and source.startswith("\r\n", closing - 2, closing):
        body_end = closing - 2
    elif closing - 1 >= body_start and source.startswith("\n", closing - 1, closing):
        body_end = closing - 1

    rest = closing + len(CODE_FENCE)
    if source.startswith("\n", rest, end) or source.startswith("\r\n", rest, end):
        rest = line_ending(source, rest, end)
    block = CodeBlock(
        language=language or None,
        contents=Span(source, body_start, body_end),
        span=Span(source, pos, rest),
    )
    return block, rest


def _bracket_pair(source: str, pos: int, end: int, opener: str, what: str) -> tuple[Span, Span, int]:
    """Read ``<opener>first](second)`` and return both inner spans."""
    rest = tag(source, pos, end, opener)
    close = source.find("]", rest, end)
    if close == -1:
        raise IncompleteConstruct(f"{what} bracket is never closed", pos, (what,))
    first = Span(source, rest, close)
    rest = tag(source, close + 1, end, "(")
    close = source.find(")", rest, end)
    if close == -1:
        raise IncompleteConstruct(f"{what} parenthesis is never closed", pos, (what,))
    return first, Span(source, rest, close), close + 1


def parse_link(source: str, pos: int, end: int, options: ParseOptions = DEFAULT_OPTIONS) -> tuple[Link, int]:
    if source.startswith(FOOTNOTE_OPEN, pos, end):
        raise RecognizerMismatch("footnote bracket is not a link", pos, ("link",))
    text, url, rest = _bracket_pair(source, pos, end, "[", "link")
    if not text or not url:
        raise RecognizerMismatch("link text and url must not be empty", pos, ("link",))
    return Link(text=text, url=url, span=Span(source, pos, rest)), rest


def parse_image(source: str, pos: int, end: int, options: ParseOptions = DEFAULT_OPTIONS) -> tuple[Image, int]:
    alt, src, rest = _bracket_pair(source, pos, end, "![", "image")
    return Image(alt=alt, source=src, span=Span(source, pos, rest)), rest


def _ordered_item(source: str, pos: int, end: int, options: ParseOptions) -> tuple[Span, int]:
    rest = take_while1(source, pos, end, DIGITS.__contains__, "digits")
    rest = tag(source, rest, end, ORDERED_SEPARATOR)
    line, rest = parse_line_optional(source, rest, end)
    return line.strip(), rest


def _is_task_line(source: str, pos: int, end: int) -> bool:
    return source.startswith(TASK_INCOMPLETE_PREFIX, pos, end) or source.startswith(TASK_COMPLETED_PREFIX, pos, end)


def _unordered_item(source: str, pos: int, end: int, options: ParseOptions) -> tuple[Span, int]:
    # Task lines belong to TaskList even though they also fit "- " + text.
    if _is_task_line(source, pos, end):
        raise RecognizerMismatch("task line is not a list item", pos, ("unordered_item",))
    rest = tag(source, pos, end, BULLET_PREFIX)
    line, rest = parse_line_optional(source, rest, end)
    return line.strip(), rest


def parse_ordered_list(source: str, pos: int, end: int, options: ParseOptions = DEFAULT_OPTIONS) -> tuple[OrderedList, int]:
    items, rest = _many1(_ordered_item, source, pos, end, options)
    return OrderedList(items=items, span=Span(source, pos, rest)), rest


def parse_unordered_list(
    source: str, pos: int, end: int, options: ParseOptions = DEFAULT_OPTIONS
) -> tuple[UnorderedList, int]:
    items, rest = _many1(_unordered_item, source, pos, end, options)
    return UnorderedList(items=items, span=Span(source, pos, rest)), rest


def parse_task(source: str, pos: int, end: int, options: ParseOptions = DEFAULT_OPTIONS) -> tuple[Task, int]:
    """Parse one task line; the input must include the leading ``-``."""
    if source.startswith(TASK_COMPLETED_PREFIX, pos, end):
        completed, rest = True, pos + len(TASK_COMPLETED_PREFIX)
    elif source.startswith(TASK_INCOMPLETE_PREFIX, pos, end):
        completed, rest = False, pos + len(TASK_INCOMPLETE_PREFIX)
    else:
        raise RecognizerMismatch("expected a task prefix", pos, ("task",))
    line, rest = parse_line_optional(source, rest, end)
    return Task(text=line.strip(), completed=completed, span=Span(source, pos, rest)), rest


def parse_task_list(source: str, pos: int, end: int, options: ParseOptions = DEFAULT_OPTIONS) -> tuple[TaskList, int]:
    tasks, rest = _many1(parse_task, source, pos, end, options)
    return TaskList(tasks=tasks, span=Span(source, pos, rest)), rest


def _footnote_name(source: str, pos: int, end: int, what: str) -> tuple[Span, int]:
    rest = tag(source, pos, end, FOOTNOTE_OPEN)
    close = source.find("]", rest, end)
    if close == -1:
        raise IncompleteConstruct("footnote bracket is never closed", pos, (what,))
    name = Span(source, rest, close)
    if not name or "\n" in name.text:
        raise RecognizerMismatch("footnote name must be a non-empty single line", pos, (what,))
    return name, close + 1


def parse_footnote(source: str, pos: int, end: int, options: ParseOptions = DEFAULT_OPTIONS) -> tuple[Footnote, int]:
    name, rest = _footnote_name(source, pos, end, "footnote")
    rest = tag(source, rest, end, ":")
    first, rest = parse_line_optional(source, rest, end)
    lines = [first.strip()]
    while source.startswith(FOOTNOTE_CONTINUATION, rest, end):
        line, rest = parse_line_optional(source, rest + len(FOOTNOTE_CONTINUATION), end)
        lines.append(line)
    return Footnote(name=name, text=lines, span=Span(source, pos, rest)), rest


def parse_newline(source: str, pos: int, end: int, options: ParseOptions = DEFAULT_OPTIONS) -> tuple[Newline, int]:
    rest = line_ending(source, pos, end)
    return Newline(span=Span(source, pos, rest)), rest


# Inline recognizers


def parse_text(source: str, pos: int, end: int, options: ParseOptions = DEFAULT_OPTIONS) -> tuple[Text, int]:
    match = TEXT_RE.match(source, pos, end)
    if match is None:
        raise RecognizerMismatch("expected text", pos, ("text",))
    return Text(Span(source, pos, match.end())), match.end()


def parse_footnote_ref(
    source: str, pos: int, end: int, options: ParseOptions = DEFAULT_OPTIONS
) -> tuple[FootnoteRef, int]:
    name, rest = _footnote_name(source, pos, end, "footnote_ref")
    if source.startswith(":", rest, end):
        raise RecognizerMismatch("footnote definition is not a reference", pos, ("footnote_ref",))
    return FootnoteRef(name=name, span=Span(source, pos, rest)), rest


def parse_inline_code(source: str, pos: int, end: int, options: ParseOptions = DEFAULT_OPTIONS) -> tuple[InlineCode, int]:
    rest = tag(source, pos, end, "`")
    close = source.find("`", rest, end)
    if close == -1:
        raise IncompleteConstruct("inline code is never closed", pos, ("inline_code",))
    return InlineCode(code=Span(source, rest, close), span=Span(source, pos, close + 1)), close + 1


def parse_text_block(source: str, pos: int, end: int, options: ParseOptions = DEFAULT_OPTIONS) -> tuple[TextBlock, int]:
    """Parse a paragraph that runs up to the next blank line.

    Everything before the blank line must decompose into inline items; the
    blank line and any further line endings belong to the block.
    """
    if source.startswith("\n", pos, end) or source.startswith("\r\n", pos, end):
        raise RecognizerMismatch("text block cannot start with a line ending", pos, ("text_block",))
    blank = find_blank_line(source, pos, end)
    if blank is None:
        raise RecognizerMismatch("text block is not followed by a blank line", pos, ("text_block",))
    contents_end = blank.start()
    rest = contents_end
    while True:
        try:
            rest = line_ending(source, rest, end)
        except RecognizerMismatch:
            break
    contents = parse_inline(source, pos, contents_end, options)
    return TextBlock(contents=contents, span=Span(source, pos, rest)), rest


INLINE_PARSERS: tuple[Recognizer, ...] = (
    parse_text,
    parse_footnote_ref,
    parse_link,
)

# First match wins. TaskList sits ahead of UnorderedList because every task
# line is also shaped like a bullet item.
BLOCK_PARSERS: tuple[Recognizer, ...] = (
    parse_heading,
    parse_code_block,
    parse_link,
    parse_image,
    parse_ordered_list,
    parse_task_list,
    parse_unordered_list,
    parse_footnote,
    parse_text_block,
    parse_newline,
)

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar, Iterator, List, Optional

if TYPE_CHECKING:
    from .frontmatter import Frontmatter


@dataclass(frozen=True, eq=False)
class Span:
    """A read-only view of ``source[start:end]``.

    A span compares equal to another span over the same region and to a plain
    string holding the same text.
    """

    source: str = field(repr=False)
    start: int
    end: int

    @property
    def text(self) -> str:
        return self.source[self.start : self.end]

    def strip(self) -> "Span":
        text = self.text
        stripped = text.strip()
        if not stripped:
            return Span(self.source, self.start, self.start)
        start = self.start + len(text) - len(text.lstrip())
        end = self.end - (len(text) - len(text.rstrip()))
        return Span(self.source, start, end)

    def __len__(self) -> int:
        return self.end - self.start

    def __bool__(self) -> bool:
        return self.end > self.start

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"Span({self.start}:{self.end} {self.text!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, str):
            return self.text == other
        if isinstance(other, Span):
            return (self.start, self.end) == (other.start, other.end) and self.text == other.text
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.text)


@dataclass
class Block:
    """Base class for block-level nodes."""

    @property
    def kind(self) -> str:
        return type(self).__name__


@dataclass
class InlineElement:
    """Base class for inline nodes found inside a text block."""

    @property
    def kind(self) -> str:
        return type(self).__name__


@dataclass
class Heading(Block):
    level: int
    text: Span
    span: Span


@dataclass
class CodeBlock(Block):
    language: Optional[Span]
    contents: Span
    span: Span


@dataclass
class Link(Block, InlineElement):
    text: Span
    url: Span
    span: Span


@dataclass
class Image(Block):
    alt: Span
    source: Span
    span: Span


@dataclass
class ListBlock(Block):
    items: List[Span]
    span: Span

    ordered: ClassVar[bool] = False

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, index: int) -> Span:
        return self.items[index]

    def __iter__(self) -> Iterator[Span]:
        return iter(self.items)


@dataclass
class OrderedList(ListBlock):
    ordered: ClassVar[bool] = True


@dataclass
class UnorderedList(ListBlock):
    ordered: ClassVar[bool] = False


@dataclass
class Task:
    text: Span
    completed: bool
    span: Span


@dataclass
class TaskList(Block):
    tasks: List[Task]
    span: Span

    def __len__(self) -> int:
        return len(self.tasks)

    def __getitem__(self, index: int) -> Task:
        return self.tasks[index]

    def __iter__(self) -> Iterator[Task]:
        return iter(self.tasks)


@dataclass
class FootnoteRef(InlineElement):
    """A reference to a footnote, written ``[^name]``."""

    name: Span
    span: Span


@dataclass
class Footnote(Block):
    """A footnote definition, written ``[^name]: text``.

    Every further line of the definition is indented by two spaces.
    """

    name: Span
    text: List[Span]
    span: Span


@dataclass
class Text(InlineElement):
    content: Span

    @property
    def span(self) -> Span:
        return self.content


@dataclass
class InlineCode(InlineElement):
    code: Span
    span: Span


@dataclass
class TextBlock(Block):
    contents: List[InlineElement]
    span: Span

    def __len__(self) -> int:
        return len(self.contents)


@dataclass
class Newline(Block):
    span: Span


@dataclass
class Document:
    source: str = field(repr=False)
    blocks: List[Block]
    frontmatter: Optional["Frontmatter"] = None
    metadata: dict[str, Any] | None = None

    def spans(self) -> Iterator[Span]:
        """Yield the consumed region of the header and of every block, in order."""
        if self.frontmatter is not None:
            yield self.frontmatter.span
        for block in self.blocks:
            yield block.span

    def covered_text(self) -> str:
        return "".join(span.text for span in self.spans())

    def is_contiguous(self) -> bool:
        """True when the spans tile the source with no gap or overlap."""
        position = 0
        for span in self.spans():
            if span.start != position:
                return False
            position = span.end
        return position == len(self.source)

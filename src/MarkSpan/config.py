from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Literal, Mapping

CODE_FENCE = "```"
HEADING_MARKER = "#"
BULLET_PREFIX = "- "
ORDERED_SEPARATOR = ". "
TASK_INCOMPLETE_PREFIX = "- [ ] "
TASK_COMPLETED_PREFIX = "- [x] "
FOOTNOTE_OPEN = "[^"
FOOTNOTE_CONTINUATION = "  "
TEXT_STOP_CHARS = "`["

FRONTMATTER_DELIMITER = "---"
FRONTMATTER_INDENT = "  "

MetadataBackend = Literal["builtin", "yaml"]
METADATA_BACKENDS = ("builtin", "yaml")


@dataclass(frozen=True)
class ParseOptions:
    """Switches that change what the parser accepts.

    The defaults give the strict dialect: unbounded heading levels, no inline
    code spans, frontmatter read with the builtin token builder.
    """

    max_heading_level: int | None = None
    inline_code: bool = False
    frontmatter: bool = True
    metadata_backend: MetadataBackend = "builtin"

    def __post_init__(self) -> None:
        if self.max_heading_level is not None and self.max_heading_level < 1:
            raise ValueError("max_heading_level must be a positive integer.")
        if self.metadata_backend not in METADATA_BACKENDS:
            raise ValueError(f"Unknown metadata backend: {self.metadata_backend!r}")

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "ParseOptions":
        """Build options from a mapping, ignoring keys that are not options."""
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in values.items() if key in known and value is not None})


DEFAULT_OPTIONS = ParseOptions()

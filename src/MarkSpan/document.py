from __future__ import annotations

import logging

from .config import DEFAULT_OPTIONS, ParseOptions
from .frontmatter import load_metadata, parse_frontmatter
from .markdown_parser import parse_blocks
from .model import Document

logger = logging.getLogger(__name__)


def parse_document(text: str, options: ParseOptions | None = None) -> Document:
    """Parse an optional frontmatter header followed by the Markdown body.

    The header and the body blocks together cover ``text`` exactly.
    """
    options = options or DEFAULT_OPTIONS
    frontmatter = parse_frontmatter(text) if options.frontmatter else None
    body_start = frontmatter.span.end if frontmatter is not None else 0
    blocks = parse_blocks(text, body_start, options=options)
    metadata = None
    if frontmatter is not None:
        metadata = load_metadata(frontmatter, options.metadata_backend)
        logger.debug("metadata keys: %s", list(metadata))
    return Document(source=text, blocks=blocks, frontmatter=frontmatter, metadata=metadata)

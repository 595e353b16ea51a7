from __future__ import annotations

import argparse
import logging
from pathlib import Path

from .config import METADATA_BACKENDS, ParseOptions
from .document import parse_document
from .errors import ParseError
from .model import Block, CodeBlock, Footnote, Heading, Image, Link, ListBlock, TaskList, TextBlock
from .utils import configure_logging, read_markdown


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="markspan",
        description="Parse a Markdown document and print an outline of its blocks.",
    )
    parser.add_argument("input", type=str, help="Path to Markdown file")
    parser.add_argument("--no-frontmatter", dest="frontmatter", action="store_false", help="Treat a leading --- header as body text")
    parser.add_argument("--metadata-backend", choices=METADATA_BACKENDS, default="builtin", help="How to read the frontmatter header")
    parser.add_argument("--max-heading-level", type=int, help="Reject headings deeper than this level")
    parser.add_argument("--inline-code", action="store_true", help="Accept `code` spans inside paragraphs")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def describe(block: Block) -> str:
    if isinstance(block, Heading):
        return f"h{block.level} {block.text}"
    if isinstance(block, CodeBlock):
        lines = block.contents.text.count("\n") + 1 if block.contents else 0
        return f"{block.language or '-'} ({lines} lines)"
    if isinstance(block, Link):
        return f"{block.text} -> {block.url}"
    if isinstance(block, Image):
        return f"{block.alt} -> {block.source}"
    if isinstance(block, ListBlock):
        return f"{len(block)} items"
    if isinstance(block, TaskList):
        done = sum(1 for task in block if task.completed)
        return f"{done}/{len(block)} done"
    if isinstance(block, Footnote):
        return f"[^{block.name}] ({len(block.text)} lines)"
    if isinstance(block, TextBlock):
        return f"{len(block)} inline items"
    return ""


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(verbose=args.verbose)
    input_path = Path(args.input).expanduser()
    if not input_path.exists():
        raise FileNotFoundError(f"Input file not found: {input_path}")
    options = ParseOptions.from_mapping(vars(args))

    logging.info("Reading %s", input_path)
    text = read_markdown(input_path)
    logging.debug("Markdown length: %d chars", len(text))

    try:
        document = parse_document(text, options)
    except ParseError as exc:
        line, column = exc.locate(text)
        expected = ", ".join(exc.expected) or "-"
        logging.error("%s:%d:%d: %s (tried: %s)", input_path, line, column, exc.message, expected)
        return 1

    if document.metadata:
        print(f"metadata: {', '.join(str(key) for key in document.metadata)}")
    for block in document.blocks:
        print(f"{block.kind} {block.span.start}-{block.span.end} {describe(block)}".rstrip())
    logging.info("Done. %d blocks", len(document.blocks))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

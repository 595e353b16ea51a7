import textwrap

import pytest
import yaml

from MarkSpan import frontmatter
from MarkSpan.config import ParseOptions
from MarkSpan.document import parse_document
from MarkSpan.errors import FrontmatterError, IncompleteConstruct, UnparseableRegion
from MarkSpan.frontmatter import Indent, Key, LineBreak, ListItem, ListValue, MapValue, Text
from MarkSpan.model import Heading, Newline, TextBlock


def kinds(tokens):
    return [type(token).__name__ for token in tokens]


def test_tokenize_key():
    tokens = frontmatter.tokenize("key: value")
    assert kinds(tokens) == ["Key", "Text"]
    assert isinstance(tokens[0], Key) and tokens[0].name == "key"
    assert isinstance(tokens[1], Text) and tokens[1].content == "value"


def test_tokenize_list_item():
    tokens = frontmatter.tokenize("- list item\n")
    assert kinds(tokens) == ["ListItem", "Text", "LineBreak"]
    assert isinstance(tokens[0], ListItem)
    assert isinstance(tokens[2], LineBreak)


def test_tokenize_keeps_colons_in_values():
    tokens = frontmatter.tokenize("link: https://example.com/a: b\n")
    assert kinds(tokens) == ["Key", "Text", "LineBreak"]
    assert tokens[1].content == "https://example.com/a: b"


HEADER = textwrap.dedent(
    """\
    title: the title
    keywords:
      - item 1
      - item 2
    """
)


def test_tokenize_header():
    tokens = frontmatter.tokenize(HEADER)
    assert kinds(tokens) == [
        "Key", "Text", "LineBreak",
        "Key", "LineBreak",
        "Indent", "ListItem", "Text", "LineBreak",
        "Indent", "ListItem", "Text", "LineBreak",
    ]
    assert isinstance(tokens[5], Indent)


def test_build_matches_yaml():
    value = frontmatter.build(frontmatter.tokenize(HEADER))
    assert isinstance(value, MapValue)
    assert isinstance(value.get("keywords"), ListValue)
    assert value.to_python() == {"title": "the title", "keywords": ["item 1", "item 2"]}
    assert value.to_python() == yaml.safe_load(HEADER)


def test_build_maps_inside_lists():
    header = textwrap.dedent(
        """\
        author:
          - name: Author one
            affiliation: University X
          - name: Author two
            affiliation: University Y
        draft:
        """
    )
    value = frontmatter.build(frontmatter.tokenize(header))
    assert value.to_python() == {
        "author": [
            {"name": "Author one", "affiliation": "University X"},
            {"name": "Author two", "affiliation": "University Y"},
        ],
        "draft": None,
    }
    assert value.to_python() == yaml.safe_load(header)


def test_build_rejects_stray_indentation():
    with pytest.raises(FrontmatterError) as excinfo:
        frontmatter.build(frontmatter.tokenize("a: b\n  c: d\n"))
    assert excinfo.value.offset == 7


def test_split_frontmatter():
    source = "---\ntitle: Hello\n---\n# Heading\n"
    header, content = frontmatter.split_frontmatter(source)
    assert header == "---\ntitle: Hello\n---\n"
    assert content == "title: Hello\n"

    assert frontmatter.split_frontmatter("# no header\n") == (None, None)

    with pytest.raises(IncompleteConstruct):
        frontmatter.split_frontmatter("---\ntitle: x\n")


DOCUMENT = textwrap.dedent(
    """\
    ---
    title: Hello
    tags:
      - a
      - b
    ---
    # Heading

    Body text.

    """
)


@pytest.mark.parametrize("backend", ["builtin", "yaml"])
def test_parse_document(backend):
    document = parse_document(DOCUMENT, ParseOptions(metadata_backend=backend))
    assert document.metadata == {"title": "Hello", "tags": ["a", "b"]}
    assert [type(block) for block in document.blocks] == [Heading, Newline, TextBlock]
    assert document.covered_text() == DOCUMENT
    assert document.is_contiguous()
    assert document.frontmatter.span.end == document.blocks[0].span.start


def test_frontmatter_can_be_disabled():
    text = "---\ntitle: x\n---\n\n"
    document = parse_document(text, ParseOptions(frontmatter=False))
    assert document.frontmatter is None
    assert document.metadata is None
    assert [type(block) for block in document.blocks] == [TextBlock]

    with pytest.raises(UnparseableRegion):
        parse_document("---\ntitle: x\n---\n", ParseOptions(frontmatter=False))


@pytest.mark.parametrize("backend", ["builtin", "yaml"])
def test_metadata_root_must_be_a_mapping(backend):
    with pytest.raises(FrontmatterError):
        parse_document("---\n- a\n- b\n---\n", ParseOptions(metadata_backend=backend))


def test_parse_options():
    with pytest.raises(ValueError):
        ParseOptions(metadata_backend="toml")
    with pytest.raises(ValueError):
        ParseOptions(max_heading_level=0)

    options = ParseOptions.from_mapping({"inline_code": True, "input": "doc.md", "max_heading_level": None})
    assert options == ParseOptions(inline_code=True)


def test_comment_lines_are_skipped():
    header = "# leading comment\ntitle: x\n  # indented comment\ntags:\n  - a\n"
    tokens = frontmatter.tokenize(header)
    assert kinds(tokens) == [
        "LineBreak",
        "Key", "Text", "LineBreak",
        "Indent", "LineBreak",
        "Key", "LineBreak",
        "Indent", "ListItem", "Text", "LineBreak",
    ]
    value = frontmatter.build(tokens)
    assert value.to_python() == {"title": "x", "tags": ["a"]}
    assert value.to_python() == yaml.safe_load(header)

    document = parse_document("---\n# a comment\ntitle: x\n---\n# H\n")
    assert document.metadata == {"title": "x"}


YAML_ONLY = textwrap.dedent(
    """\
    ---
    # a comment
    title: x
    desc: |
      line one
      line two
    tags: [a, b]
    ---
    # H
    """
)


def test_yaml_backend_reads_headers_the_builtin_builder_cannot():
    document = parse_document(YAML_ONLY, ParseOptions(metadata_backend="yaml"))
    assert document.metadata == yaml.safe_load(document.frontmatter.content.text)
    assert document.metadata["desc"] == "line one\nline two\n"
    assert document.metadata["tags"] == ["a", "b"]
    assert [type(block) for block in document.blocks] == [Heading]
    assert document.covered_text() == YAML_ONLY

    with pytest.raises(FrontmatterError):
        parse_document(YAML_ONLY)

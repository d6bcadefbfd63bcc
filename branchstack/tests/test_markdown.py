"""Tests for the block-level markdown parser and printer."""

import pytest

from branchstack.exceptions import DocumentParseError
from branchstack.markdown import (
    BlockQuote, CodeBlock, Document, Heading, HtmlBlock, ListBlock, Paragraph, ThematicBreak, parse,
)


class TestParse:
    """Tests for splitting a document into blocks."""

    def test_block_types(self) -> None:
        content = "\n\n".join([
            "# Title",
            "Some text\nover two lines",
            "<!-- note -->",
            "```\n- not a list\n```",
            "---",
            "> quoted",
            "- item",
        ])
        blocks = parse(content).blocks
        assert [type(b) for b in blocks] == [
            Heading, Paragraph, HtmlBlock, CodeBlock, ThematicBreak, BlockQuote, ListBlock,
        ]

    def test_setext_heading(self) -> None:
        blocks = parse("Title\n=====\n\ntext").blocks
        assert isinstance(blocks[0], Heading)
        assert isinstance(blocks[1], Paragraph)

    def test_list_interrupts_paragraph(self) -> None:
        blocks = parse("Stack:\n- one\n- two").blocks
        assert isinstance(blocks[0], Paragraph)
        assert isinstance(blocks[1], ListBlock)
        assert len(blocks[1].items) == 2

    def test_nested_list(self) -> None:
        block = parse("- a\n  - b\n    - c").blocks[0]
        assert isinstance(block, ListBlock)
        assert [p.text for p in block.items[0].paragraphs()] == ['a', 'b', 'c']

    def test_different_bullets_are_different_lists(self) -> None:
        blocks = parse("- a\n* b").blocks
        assert len(blocks) == 2

    def test_loose_list(self) -> None:
        block = parse("- a\n\n- b").blocks[0]
        assert isinstance(block, ListBlock)
        assert block.loose
        assert len(block.items) == 2

    def test_multiline_html_comment(self) -> None:
        blocks = parse("<!--\nhidden\n\nstill hidden\n-->\ntext").blocks
        assert isinstance(blocks[0], HtmlBlock)
        assert blocks[0].lines[-1] == '-->'

    def test_paragraph_text_unescapes(self) -> None:
        paragraph = parse("\\#12 👈").blocks[0]
        assert isinstance(paragraph, Paragraph)
        assert paragraph.text == '#12 👈'

    def test_none_is_empty(self) -> None:
        assert Document.parse(None).blocks == []

    def test_bytes(self) -> None:
        assert isinstance(Document.parse("# hi".encode('utf-8')).blocks[0], Heading)

    def test_invalid_bytes(self) -> None:
        with pytest.raises(DocumentParseError):
            Document.parse(b'\xff\xfe\xfa')

    def test_not_text(self) -> None:
        with pytest.raises(DocumentParseError):
            Document.parse(42)  # type: ignore[arg-type]


class TestRender:
    """Tests for printing blocks back."""

    @pytest.mark.parametrize("content", [
        "# Title\n",
        "Text with *emphasis* and `code`\n",
        "<!-- comment -->\n",
        "```python\nx = 1\n\n\ny = 2\n```\n",
        "- [ ] task one\n- [x] task two\n",
        "1. first\n2. second\n",
        "- a\n  - b\n    - c\n",
        "Intro\n\n---\n\n> quote\n> more\n",
    ])
    def test_unchanged(self, content: str) -> None:
        assert parse(content).render() == content

    def test_empty(self) -> None:
        assert parse('').render() == ''

    def test_blank_lines_normalized(self) -> None:
        assert parse("a\n\n\n\nb").render() == "a\n\nb\n"

    def test_crlf(self) -> None:
        assert parse("a\r\n\r\nb\r\n").render() == "a\n\nb\n"

    def test_adjacent_lists_switch_bullet(self) -> None:
        """Two consecutive lists with the same bullet would merge, so the second switches."""
        document = Document(parse("- a").blocks + parse("- b").blocks)
        assert document.render() == "- a\n\n* b\n"

    def test_adjacent_ordered_lists_switch_delimiter(self) -> None:
        document = Document(parse("1. a").blocks + parse("1. b").blocks)
        assert document.render() == "1. a\n\n1) b\n"

    def test_splice(self) -> None:
        document = parse("a\n\nb\n\nc")
        document.splice(1, 1, parse("x\n\ny").blocks)
        assert document.render() == "a\n\nx\n\ny\n\nc\n"
        assert document.find_index(lambda b: isinstance(b, Paragraph) and b.text == 'y') == 2

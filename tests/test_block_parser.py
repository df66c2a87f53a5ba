"""
Block structurer tests: line classification, lists, blockquotes and
paragraph grouping.
"""

import pytest

from block_parser import BlockParser, LineKind, tokenize_lines
from config import NodeType


@pytest.fixture
def parser() -> BlockParser:
    return BlockParser()


def types(blocks) -> list[NodeType]:
    return [b.type for b in blocks]


# =============================================================================
# LINE TOKENS
# =============================================================================


class TestTokenizeLines:
    def test_classifies_by_prefix(self) -> None:
        tokens = tokenize_lines("> q\n* a\n~ b\n\ntext")

        assert [t.kind for t in tokens] == [
            LineKind.QUOTE,
            LineKind.BULLET,
            LineKind.NUMBERED,
            LineKind.BLANK,
            LineKind.TEXT,
        ]
        assert [t.content for t in tokens[:3]] == ["q", "a", "b"]

    def test_normalizes_line_endings(self) -> None:
        tokens = tokenize_lines("a\r\nb\rc")

        assert [t.content for t in tokens] == ["a", "b", "c"]

    @pytest.mark.parametrize(
        "line", ["*bold*", "* ", "  * indented", "~tilde", ">", "> "]
    )
    def test_non_item_lines_are_text(self, line: str) -> None:
        assert tokenize_lines(line)[0].kind == LineKind.TEXT

    def test_whitespace_line_is_blank(self) -> None:
        assert tokenize_lines("   \t")[0].kind == LineKind.BLANK


# =============================================================================
# LISTS
# =============================================================================


class TestLists:
    def test_consecutive_items_form_one_list(self, parser: BlockParser) -> None:
        blocks = parser.parse_text("* a\n* b")

        assert types(blocks) == [NodeType.UNORDERED_LIST]
        assert len(blocks[0].children) == 2

    def test_blank_lines_between_items_merge(self, parser: BlockParser) -> None:
        blocks = parser.parse_text("* a\n\n\n* b")

        assert types(blocks) == [NodeType.UNORDERED_LIST]
        assert len(blocks[0].children) == 2

    def test_marker_change_starts_new_list(self, parser: BlockParser) -> None:
        blocks = parser.parse_text("~ a\n~ b\n* c")

        assert types(blocks) == [NodeType.ORDERED_LIST, NodeType.UNORDERED_LIST]
        assert [len(b.children) for b in blocks] == [2, 1]

    def test_ordered_after_blank_is_not_swallowed(self, parser: BlockParser) -> None:
        blocks = parser.parse_text("* a\n\n~ b\n\n* c")

        assert types(blocks) == [
            NodeType.UNORDERED_LIST,
            NodeType.ORDERED_LIST,
            NodeType.UNORDERED_LIST,
        ]

    def test_text_line_ends_list(self, parser: BlockParser) -> None:
        blocks = parser.parse_text("* a\ntext")

        assert types(blocks) == [NodeType.UNORDERED_LIST, NodeType.PARAGRAPH]

    def test_item_line_ends_paragraph(self, parser: BlockParser) -> None:
        blocks = parser.parse_text("text\n* a")

        assert types(blocks) == [NodeType.PARAGRAPH, NodeType.UNORDERED_LIST]

    def test_item_content_is_inline_parsed(self, parser: BlockParser) -> None:
        item = parser.parse_text("* **a**")[0].children[0]

        assert item.to_html() == "<li><b>a</b></li>"


# =============================================================================
# BLOCKQUOTES
# =============================================================================


class TestBlockquotes:
    def test_quote_lines_grouped(self, parser: BlockParser) -> None:
        blocks = parser.parse_text("> one\n> two")

        assert types(blocks) == [NodeType.BLOCKQUOTE]
        paragraph = blocks[0].children[0]
        assert paragraph.type == NodeType.PARAGRAPH
        assert len(paragraph.children) == 2

    def test_quote_may_hold_list(self, parser: BlockParser) -> None:
        blocks = parser.parse_text("> a\n> * b\n\nafter")

        assert types(blocks) == [NodeType.BLOCKQUOTE, NodeType.PARAGRAPH]
        assert types(blocks[0].children) == [
            NodeType.PARAGRAPH,
            NodeType.UNORDERED_LIST,
        ]

    def test_nested_quote_marker_is_text(self, parser: BlockParser) -> None:
        blocks = parser.parse_text("> > x")

        assert blocks[0].to_html() == "<blockquote><p>> x</p></blockquote>"

    def test_bare_quote_marker_is_text(self, parser: BlockParser) -> None:
        blocks = parser.parse_text(">\n> ")

        assert types(blocks) == [NodeType.PARAGRAPH]
        assert [line.to_html() for line in blocks[0].children] == [">", "> "]


# =============================================================================
# PARAGRAPHS
# =============================================================================


class TestParagraphs:
    def test_lines_grouped_until_blank(self, parser: BlockParser) -> None:
        blocks = parser.parse_text("one\ntwo\n\nthree")

        assert types(blocks) == [NodeType.PARAGRAPH, NodeType.PARAGRAPH]
        assert len(blocks[0].children) == 2

    def test_empty_text(self, parser: BlockParser) -> None:
        assert parser.parse_text("") == []

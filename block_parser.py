"""
Block structurer for the Ashes markup engine.

Classifies each line of escaped text by its prefix (``tokenize_lines``),
then groups the line tokens into paragraphs, blockquotes, unordered lists
(``* item``) and ordered lists (``~ item``).

Bullet and numbered items are two separate rules chosen by the line's
prefix, so one list type can never swallow the other.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum

from config import DEFAULT_CONFIG, MarkupConfig, NodeType
from inline_parser import InlineParser
from models import Node

logger = logging.getLogger(__name__)


# ── regex patterns for line prefixes ──────────────────────────────────────

RE_NEWLINE = re.compile(r"\r\n|\r")

# "> quoted text" (the space is optional; a bare ">" is plain text)
RE_QUOTE_LINE = re.compile(r"^>[ \t]*(\S.*)$")

# "* item" — at least one space and some content after the star
RE_BULLET_LINE = re.compile(r"^\*[ ]+(\S.*)$")

# "~ item"
RE_NUMBERED_LINE = re.compile(r"^~[ ]+(\S.*)$")


class LineKind(str, Enum):
    BLANK = "blank"
    QUOTE = "quote"
    BULLET = "bullet"
    NUMBERED = "numbered"
    TEXT = "text"


_LIST_TYPE_FOR: dict[LineKind, NodeType] = {
    LineKind.BULLET: NodeType.UNORDERED_LIST,
    LineKind.NUMBERED: NodeType.ORDERED_LIST,
}


@dataclass(frozen=True)
class LineToken:
    """One input line: its kind, the content after the marker, the raw line."""

    kind: LineKind
    content: str
    raw: str


def tokenize_lines(text: str) -> list[LineToken]:
    """Split *text* into classified line tokens."""
    tokens: list[LineToken] = []
    for line in RE_NEWLINE.sub("\n", text).split("\n"):
        if not line.strip():
            tokens.append(LineToken(LineKind.BLANK, "", line))
            continue

        m = RE_QUOTE_LINE.match(line)
        if m:
            tokens.append(LineToken(LineKind.QUOTE, m.group(1), line))
            continue

        m = RE_BULLET_LINE.match(line)
        if m:
            tokens.append(LineToken(LineKind.BULLET, m.group(1), line))
            continue

        m = RE_NUMBERED_LINE.match(line)
        if m:
            tokens.append(LineToken(LineKind.NUMBERED, m.group(1), line))
            continue

        tokens.append(LineToken(LineKind.TEXT, line, line))
    return tokens


# ══════════════════════════════════════════════════════════════════════════
# BlockParser
# ══════════════════════════════════════════════════════════════════════════


class BlockParser:
    """Build the block-level node tree from line tokens."""

    def __init__(
        self,
        config: MarkupConfig = DEFAULT_CONFIG,
        *,
        is_legacy: bool = False,
    ) -> None:
        self._inline = InlineParser(config, is_legacy=is_legacy)

    def parse_text(self, text: str) -> list[Node]:
        """Tokenize and parse escaped *text* in one go."""
        return self.parse(tokenize_lines(text))

    def parse(
        self,
        tokens: list[LineToken],
        *,
        allow_quotes: bool = True,
    ) -> list[Node]:
        """Walk the token stream and return the top-level blocks.

        Nested blockquotes are not supported: inside a quote, a line that
        starts with ``>`` again is ordinary paragraph text.
        """
        blocks: list[Node] = []
        paragraph_lines: list[Node] = []

        def flush_paragraph():
            nonlocal paragraph_lines
            if paragraph_lines:
                blocks.append(
                    Node(type=NodeType.PARAGRAPH, children=paragraph_lines)
                )
                paragraph_lines = []

        i = 0
        while i < len(tokens):
            token = tokens[i]

            if token.kind == LineKind.BLANK:
                flush_paragraph()
                i += 1
                continue

            if token.kind == LineKind.QUOTE and allow_quotes:
                flush_paragraph()
                i = self._parse_blockquote(tokens, i, blocks)
                continue

            if token.kind in _LIST_TYPE_FOR:
                flush_paragraph()
                i = self._parse_list(tokens, i, blocks)
                continue

            # Plain text (or a nested quote marker) continues the paragraph
            paragraph_lines.append(self._line(token.raw))
            i += 1

        flush_paragraph()
        return blocks

    # ── block rules ───────────────────────────────────────────────────────

    def _parse_blockquote(
        self,
        tokens: list[LineToken],
        start_idx: int,
        blocks: list[Node],
    ) -> int:
        """Group consecutive quote lines into a ``BLOCKQUOTE``.

        Returns the index of the next token to process.
        """
        contents: list[str] = []
        i = start_idx
        while i < len(tokens) and tokens[i].kind == LineKind.QUOTE:
            contents.append(tokens[i].content)
            i += 1

        children = self.parse(
            tokenize_lines("\n".join(contents)), allow_quotes=False,
        )
        blocks.append(Node(type=NodeType.BLOCKQUOTE, children=children))
        return i

    def _parse_list(
        self,
        tokens: list[LineToken],
        start_idx: int,
        blocks: list[Node],
    ) -> int:
        """Group items of one marker kind into a single list.

        Blank lines between two items of the same kind are skipped, so
        same-kind runs separated by whitespace merge into one list.
        Returns the index of the next token to process.
        """
        kind = tokens[start_idx].kind
        items: list[Node] = []

        i = start_idx
        while i < len(tokens):
            token = tokens[i]
            if token.kind == kind:
                items.append(
                    Node(
                        type=NodeType.LIST_ITEM,
                        children=self._inline.parse(token.content),
                    )
                )
                i += 1
                continue
            if token.kind == LineKind.BLANK:
                j = i + 1
                while j < len(tokens) and tokens[j].kind == LineKind.BLANK:
                    j += 1
                if j < len(tokens) and tokens[j].kind == kind:
                    i = j
                    continue
            break

        logger.debug("Grouped %d %s item(s) into one list", len(items), kind.value)
        blocks.append(Node(type=_LIST_TYPE_FOR[kind], children=items))
        return i

    def _line(self, text: str) -> Node:
        return Node(type=NodeType.LINE, children=self._inline.parse(text))

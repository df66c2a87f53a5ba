"""
Abstract base formatter for the Ashes markup engine.

Concrete subclasses (``PostFormatter``, ``EffectTextFormatter``) decide how
the parsed block tree is augmented before rendering, while inheriting the
common escape → parse → compose pipeline.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from block_parser import BlockParser
from config import BLOCK_CONTAINER_TYPES, DEFAULT_CONFIG, MarkupConfig, NodeType
from inline_parser import escape_html
from models import Node

logger = logging.getLogger(__name__)


class BaseFormatter(ABC):
    """Base class for all markup formatters.

    Formatting is pure: an instance holds only its configuration and can be
    shared between threads. Formatting a formatter's own output is not
    supported (entities get escaped a second time).
    """

    def __init__(self, config: MarkupConfig = DEFAULT_CONFIG) -> None:
        self._config = config

    # ── public entry points ──

    def format(
        self,
        text: str | None,
        ensure_paragraphs: bool = False,
        is_legacy: bool = False,
    ) -> str:
        """Format *text* and return an HTML fragment."""
        blocks = self.parse(text, is_legacy=is_legacy)
        return compose_html(blocks, ensure_paragraphs=ensure_paragraphs)

    def parse(self, text: str | None, is_legacy: bool = False) -> list[Node]:
        """Return the augmented block tree for *text*.

        Escaping runs here, exactly once, before any markup is interpreted.
        """
        escaped = escape_html(text or "")
        parser = BlockParser(self._config, is_legacy=is_legacy)
        blocks = self._augment_tree(parser.parse_text(escaped))
        logger.debug(
            "%s parsed %d chars into %d blocks",
            type(self).__name__, len(escaped), len(blocks),
        )
        return blocks

    # ── abstract methods ── (to be implemented by subclasses)

    @abstractmethod
    def _augment_tree(self, blocks: list[Node]) -> list[Node]:
        """Post-process the parsed block tree before it is rendered."""
        ...


# ── paragraph composition ─────────────────────────────────────────────────


def compose_html(blocks: list[Node], ensure_paragraphs: bool = False) -> str:
    """Render top-level *blocks* as an HTML fragment.

    A lone paragraph is returned bare (its lines joined by newlines) unless
    *ensure_paragraphs* is set. Anything else renders every block on its
    own, joined by blank lines; paragraph lines get ``<br>`` breaks and
    block containers are never wrapped in ``<p>``.
    """
    if not blocks:
        return "<p></p>" if ensure_paragraphs else ""

    if len(blocks) == 1 and blocks[0].type not in BLOCK_CONTAINER_TYPES:
        paragraph = blocks[0]
        body = "\n".join(line.to_html() for line in paragraph.children)
        if not ensure_paragraphs:
            return body
        return f"{paragraph.opening_tag()}{body}</p>"

    return "\n\n".join(block.to_html() for block in blocks)


def iter_paragraphs(blocks: list[Node]):
    """Yield every ``PARAGRAPH`` in *blocks*, descending into containers."""
    for block in blocks:
        if block.type == NodeType.PARAGRAPH:
            yield block
        else:
            yield from iter_paragraphs(block.children)

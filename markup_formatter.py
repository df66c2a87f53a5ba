"""
Public entry points of the Ashes markup engine.

``format_text`` formats forum posts and other user text;
``format_effect_text`` formats card rules text, turning lists into effect
boxes and bolding ability names.
"""

from __future__ import annotations

import logging
import re

from base_formatter import BaseFormatter, iter_paragraphs
from config import DEFAULT_CONFIG, EffectKind, MarkupConfig, NodeType
from models import Node, text_node

logger = logging.getLogger(__name__)


# Paragraph-leading ability name: "Ability name:" ("&#39;" is an apostrophe)
RE_ABILITY_NAME = re.compile(r"^((?:[a-z 0-9]|&#39;)+:)", re.IGNORECASE)

# What must follow the colon for the run to count as an ability name
RE_ABILITY_FOLLOWER = re.compile(r"^ \w")

_EFFECT_KIND_FOR: dict[NodeType, EffectKind] = {
    NodeType.UNORDERED_LIST: EffectKind.INEXHAUSTIBLE,
    NodeType.ORDERED_LIST: EffectKind.REACTION,
}


class PostFormatter(BaseFormatter):
    """General formatter: links, images, lists, quotes, emphasis, card codes."""

    def _augment_tree(self, blocks: list[Node]) -> list[Node]:
        return blocks


class EffectTextFormatter(BaseFormatter):
    """Formatter for card effect text.

    Always wraps output in paragraphs, renders lists as effect boxes and
    bolds ability names. Works on the parsed tree only; card codes are not
    resolved a second time.
    """

    def format(
        self,
        text: str | None,
        ensure_paragraphs: bool = True,
        is_legacy: bool = False,
    ) -> str:
        return super().format(text, ensure_paragraphs=True, is_legacy=is_legacy)

    def _augment_tree(self, blocks: list[Node]) -> list[Node]:
        blocks = augment_effect_blocks(blocks)
        for paragraph in iter_paragraphs(blocks):
            bold_ability_name(paragraph)
        return blocks


# ── effect augmentation ───────────────────────────────────────────────────


def augment_effect_blocks(blocks: list[Node]) -> list[Node]:
    """Replace lists with effect boxes whose items are paragraphs."""
    result: list[Node] = []
    for block in blocks:
        kind = _EFFECT_KIND_FOR.get(block.type)
        if kind is not None:
            result.append(
                Node(
                    type=NodeType.EFFECT_BOX,
                    effect=kind,
                    children=[
                        Node(
                            type=NodeType.PARAGRAPH,
                            children=[
                                Node(type=NodeType.LINE, children=item.children)
                            ],
                        )
                        for item in block.children
                    ],
                )
            )
        elif block.type == NodeType.BLOCKQUOTE:
            block.children = augment_effect_blocks(block.children)
            result.append(block)
        else:
            result.append(block)
    return result


def bold_ability_name(paragraph: Node) -> None:
    """Wrap a paragraph-leading ``Name:`` run in an ``ABILITY_NAME`` node.

    The run counts when it is followed by a space and a word character, or
    by a space and an icon.
    """
    if not paragraph.children:
        return
    line = paragraph.children[0]
    if not line.children or line.children[0].type != NodeType.TEXT:
        return

    head = line.children[0]
    m = RE_ABILITY_NAME.match(head.text or "")
    if not m:
        return
    rest = head.text[m.end():]
    if not RE_ABILITY_FOLLOWER.match(rest):
        followed_by_icon = (
            rest == " "
            and len(line.children) > 1
            and line.children[1].type == NodeType.CARD_ICON
        )
        if not followed_by_icon:
            return

    logger.debug("Bolding ability name %r", m.group(1))
    line.children[0:1] = [
        Node(type=NodeType.ABILITY_NAME, children=[text_node(m.group(1))]),
        text_node(rest),
    ]


# ── module-level entry points ─────────────────────────────────────────────

_post_formatter = PostFormatter()
_effect_formatter = EffectTextFormatter()


def format_text(
    text: str | None,
    ensure_paragraphs: bool = False,
    is_legacy: bool = False,
    config: MarkupConfig = DEFAULT_CONFIG,
) -> str:
    """Format user-authored markup into an HTML fragment.

    Set *ensure_paragraphs* to wrap single-paragraph output in ``<p>``;
    *is_legacy* marks card references as belonging to the legacy card pool.

    Dice codes are looked up in ``config.dice``: with the default config
    ``[[fire]]`` is a card reference, and it becomes a ``phg-fire-power``
    icon only when ``fire`` is in the configured dice list.
    """
    formatter = _post_formatter if config is DEFAULT_CONFIG else PostFormatter(config)
    return formatter.format(
        text, ensure_paragraphs=ensure_paragraphs, is_legacy=is_legacy,
    )


def format_effect_text(
    text: str | None,
    is_legacy: bool = False,
    config: MarkupConfig = DEFAULT_CONFIG,
) -> str:
    """Format card effect text into an HTML fragment."""
    formatter = (
        _effect_formatter if config is DEFAULT_CONFIG else EffectTextFormatter(config)
    )
    return formatter.format(text, is_legacy=is_legacy)

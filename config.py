"""
Configuration for the Ashes markup engine.

Contains the NodeType enum, the card-code table (dice names, aliases,
forced secondary keys), the output vocabulary, and the site settings used
to classify links as internal.
"""

import re
from dataclasses import dataclass
from enum import Enum


class NodeType(str, Enum):
    """All possible types of nodes in a formatted document tree."""

    # --- Block level ---
    PARAGRAPH = "paragraph"
    LINE = "line"
    UNORDERED_LIST = "unordered_list"
    ORDERED_LIST = "ordered_list"
    LIST_ITEM = "list_item"
    BLOCKQUOTE = "blockquote"
    EFFECT_BOX = "effect_box"

    # --- Inline ---
    TEXT = "text"
    LINK = "link"
    IMAGE = "image"
    CARD_ICON = "card_icon"
    CARD_REFERENCE = "card_reference"
    DIVIDER = "divider"
    EMPHASIS = "emphasis"
    STRONG = "strong"
    STRONG_EMPHASIS = "strong_emphasis"
    ABILITY_NAME = "ability_name"


class EffectKind(str, Enum):
    """Kinds of effect boxes produced from lists in card effect text."""

    INEXHAUSTIBLE = "inexhaustible"
    REACTION = "reaction"


# Types that never get wrapped in a paragraph tag
BLOCK_CONTAINER_TYPES: set[str] = {
    NodeType.UNORDERED_LIST,
    NodeType.ORDERED_LIST,
    NodeType.BLOCKQUOTE,
    NodeType.EFFECT_BOX,
}


# ---------------------------------------------------------------------------
# Card-code table
# ---------------------------------------------------------------------------

# Dice types in the current ruleset, in display order
DICE_LIST: tuple[str, ...] = (
    "ceremonial",
    "charm",
    "illusion",
    "natural",
    "divine",
    "sympathy",
    "time",
)

# Secondary key given to a die when none is supplied ([[charm]])
DEFAULT_DICE_SECONDARY = "power"

# Icons that render without any secondary key ([[discard]], [[exhaust]])
STANDALONE_ICONS: frozenset[str] = frozenset({"discard", "exhaust"})

# Common misspellings rewritten before lookup
KEYWORD_ALIASES: dict[str, str] = {
    "nature": "natural",
}

# Keywords whose secondary key is fixed regardless of input
FORCED_SECONDARY: dict[str, str] = {
    "basic": "magic",
    "main": "action",
    "side": "action",
}


# ---------------------------------------------------------------------------
# Output vocabulary
# ---------------------------------------------------------------------------

ICON_CLASS_PREFIX = "phg-"
ALT_TEXT_CLASS = "alt-text"
DIVIDER_CLASS = "divider"
INLINE_IMAGE_CLASS = "inline-image"
IMAGE_CLASS = "object-contain"
CARD_REFERENCE_TAG = "card-link"
CENTERED_STYLE = "text-align:center;"

EFFECT_BOX_CLASSES: dict[str, str] = {
    EffectKind.INEXHAUSTIBLE: "inexhaustible-effects",
    EffectKind.REACTION: "reaction-effects",
}

# Tags and attributes a rendered fragment may contain
ALLOWED_TAGS: dict[str, frozenset[str]] = {
    "p": frozenset({"style"}),
    "br": frozenset(),
    "blockquote": frozenset(),
    "ul": frozenset(),
    "ol": frozenset(),
    "li": frozenset(),
    "a": frozenset({"href", "rel", "target", "class"}),
    "img": frozenset({"src", "alt", "class"}),
    "i": frozenset({"class", "title"}),
    "b": frozenset(),
    "strong": frozenset(),
    "span": frozenset({"class"}),
    "div": frozenset({"class"}),
    CARD_REFERENCE_TAG: frozenset({"name", "stub", "is_legacy"}),
}

# Attributes holding URLs; their values must use one of ALLOWED_SCHEMES
URL_ATTRIBUTES: frozenset[str] = frozenset({"href", "src"})
ALLOWED_SCHEMES: tuple[str, ...] = ("http://", "https://")


# ---------------------------------------------------------------------------
# Site settings
# ---------------------------------------------------------------------------

SITE_DOMAIN = "ashes.live"


@dataclass(frozen=True)
class MarkupConfig:
    """External collaborators consumed by the formatter.

    ``dice`` is the ordered list of dice keywords; ``site_domain`` is the
    host used to tell internal links from external ones.
    """

    dice: tuple[str, ...] = DICE_LIST
    site_domain: str = SITE_DOMAIN

    def internal_url_pattern(self) -> re.Pattern:
        """Return the pattern matching a scheme-less URL on the site domain."""
        return re.compile(
            rf"^{re.escape(self.site_domain)}(?:/.*)?$", re.IGNORECASE
        )


DEFAULT_CONFIG = MarkupConfig()

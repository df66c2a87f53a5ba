"""
Inline resolver for the Ashes markup engine.

Turns one line of already-escaped text into a list of inline ``Node``s:

1. ``tokenize_inline`` splits the line into plain text and directives
   (links, images, card codes, dividers).
2. Directives are resolved into atomic nodes and lifted out of the text.
3. ``resolve_emphasis`` applies the asterisk rules to what is left.
4. The atoms are put back in place.

Lifting directives out first means emphasis can wrap an icon or a link
(``**[[charm]]**``) but asterisks inside a directive never open emphasis.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from config import (
    DEFAULT_CONFIG,
    DEFAULT_DICE_SECONDARY,
    FORCED_SECONDARY,
    KEYWORD_ALIASES,
    STANDALONE_ICONS,
    MarkupConfig,
    NodeType,
)
from models import Node, text_node

logger = logging.getLogger(__name__)


# ── escaping ──────────────────────────────────────────────────────────────

# ">" is left alone: it is the blockquote marker
_ESCAPE_TABLE = str.maketrans({
    "&": "&amp;",
    "<": "&lt;",
    '"': "&quot;",
    "'": "&#39;",
})

APOSTROPHE_ENTITY = "&#39;"


def escape_html(text: str) -> str:
    """Replace ``& < " '`` with their HTML entities, and nothing else."""
    return text.translate(_ESCAPE_TABLE)


# ── regex patterns ────────────────────────────────────────────────────────

# [[label url]] / [[*url]] with a labelled or bare URL inside brackets,
# or a bare http(s) URL in running text
_LINK_DIRECTIVE = (
    r"\[\[(?P<image>\*?)(?P<label>[^\]]*?)"
    r"(?P<url>(?:https?://|\b)[^\s/$.?#]+\.[^\s*]+?)\]\]"
    r"|(?P<bare>https?://[^\s/$.?#]+\.[^\s*]+?(?=[.?)][^a-z]|!|\s|$))"
)

# [[keyword]] / [[keyword:secondary]]; the leading "*" is accepted but unused
_CARD_CODE_DIRECTIVE = (
    r"\[\[(?P<icon_flag>\*?)(?P<primary>(?:[a-z -]|&#39;)+)"
    r"(?::(?P<secondary>[a-z]+))?\]\]"
)

_DIVIDER_DIRECTIVE = r"(?P<divider> - )"

# Alternatives are tried in this order at every position
RE_INLINE_DIRECTIVE = re.compile(
    "|".join((_LINK_DIRECTIVE, _CARD_CODE_DIRECTIVE, _DIVIDER_DIRECTIVE)),
    re.IGNORECASE,
)

# Optional scheme + the rest of a URL
RE_URL_SCHEME = re.compile(r"^(https?://)?(.+)$", re.IGNORECASE)

RE_WHITESPACE_RUN = re.compile(r"\s+")

# A "*" standing on its own between spaces or line boundaries
RE_LONE_STAR = re.compile(r"(^| )\*(?= |$)")

# Emphasis rules, most specific first. Order matters: the triple-asterisk
# forms would otherwise be split by the double and single rules.
RE_BOLD_ITALIC = re.compile(r"\*{3}(.+?)\*(.*?)\*{2}")
RE_ITALIC_BOLD = re.compile(r"\*{3}(.+?)\*{2}(.*?)\*")
RE_BOLD = re.compile(r"\*{2}(.+?)\*{2}")
RE_ITALIC = re.compile(r"\*([^*\n\r]+)\*")


# ── tokens ────────────────────────────────────────────────────────────────


class TokenKind(str, Enum):
    TEXT = "text"
    LINK = "link"
    CARD_CODE = "card_code"
    DIVIDER = "divider"


@dataclass(frozen=True)
class InlineToken:
    """A run of plain text or one directive, exactly as it appears."""

    kind: TokenKind
    text: str
    groups: dict[str, str | None] = field(default_factory=dict)


def tokenize_inline(line: str) -> list[InlineToken]:
    """Split *line* into a flat stream of text and directive tokens.

    An unterminated ``[[`` matches no directive and stays plain text.
    """
    tokens: list[InlineToken] = []
    pos = 0
    for m in RE_INLINE_DIRECTIVE.finditer(line):
        if m.start() > pos:
            tokens.append(InlineToken(TokenKind.TEXT, line[pos:m.start()]))
        if m.group("divider"):
            kind = TokenKind.DIVIDER
        elif m.group("url") or m.group("bare"):
            kind = TokenKind.LINK
        else:
            kind = TokenKind.CARD_CODE
        tokens.append(InlineToken(kind, m.group(0), m.groupdict()))
        pos = m.end()
    if pos < len(line):
        tokens.append(InlineToken(TokenKind.TEXT, line[pos:]))
    return tokens


# ── directive resolution ──────────────────────────────────────────────────


def resolve_link(
    url: str,
    *,
    label: str | None = None,
    is_image: bool = False,
    internal_pattern: re.Pattern | None = None,
) -> Node:
    """Build a ``LINK`` or ``IMAGE`` node for *url*.

    Internal URLs (on the site domain) are forced to ``https://``; external
    URLs typed without a scheme get ``http://``; external URLs with a scheme
    are kept untouched.
    """
    if internal_pattern is None:
        internal_pattern = DEFAULT_CONFIG.internal_url_pattern()

    m = RE_URL_SCHEME.match(url)
    prefix, rest = m.group(1), m.group(2)
    is_internal = bool(internal_pattern.match(rest))
    if is_internal:
        href = "https://" + rest
    elif not prefix:
        href = "http://" + rest
    else:
        href = url

    if is_image:
        return Node(type=NodeType.IMAGE, href=href, is_internal=is_internal)

    label = (label or "").strip()
    children = resolve_emphasis([text_node(label)]) if label else []
    return Node(
        type=NodeType.LINK,
        href=href,
        text=url,
        is_internal=is_internal,
        children=children,
    )


def resolve_card_code(
    primary: str,
    secondary: str | None = None,
    *,
    raw: str | None = None,
    is_legacy: bool = False,
    dice: frozenset[str] | tuple[str, ...] = DEFAULT_CONFIG.dice,
) -> Node:
    """Resolve a ``[[primary:secondary]]`` card code into a node.

    Precedence: standalone icons, the ``nature`` alias, dice (secondary
    defaults to ``power``), forced secondaries (``basic``, ``main``,
    ``side``), an italic two-word phrase when some other keyword has a
    secondary, and finally a card reference.
    """
    name = primary.strip()
    keyword = primary.lower().replace(APOSTROPHE_ENTITY, "").strip()
    secondary = secondary.lower() if secondary else None
    if raw is None:
        raw = f"[[{primary}:{secondary}]]" if secondary else f"[[{primary}]]"

    if keyword in STANDALONE_ICONS:
        return Node(type=NodeType.CARD_ICON, key=keyword, title=name, text=raw)

    keyword = KEYWORD_ALIASES.get(keyword, keyword)
    if keyword in dice:
        secondary = secondary or DEFAULT_DICE_SECONDARY
    elif keyword in FORCED_SECONDARY:
        secondary = FORCED_SECONDARY[keyword]
    elif secondary:
        logger.debug("Unknown card code %r, rendering as phrase", raw)
        return Node(
            type=NodeType.EMPHASIS,
            children=[text_node(f"{keyword} {secondary}")],
        )
    else:
        return Node(
            type=NodeType.CARD_REFERENCE,
            text=name,
            key=RE_WHITESPACE_RUN.sub("-", keyword),
            is_legacy=is_legacy,
        )

    return Node(
        type=NodeType.CARD_ICON,
        key=keyword,
        secondary=secondary,
        title=f"{name} {secondary}",
        text=raw,
    )


# ── emphasis ──────────────────────────────────────────────────────────────


def _bold_italic(m: re.Match) -> Node:
    head, tail = m.group(1), m.group(2)
    if not tail:
        return Node(type=NodeType.STRONG_EMPHASIS, children=[text_node(head)])
    return Node(
        type=NodeType.STRONG,
        children=[
            Node(type=NodeType.EMPHASIS, children=[text_node(head)]),
            text_node(tail),
        ],
    )


def _italic_bold(m: re.Match) -> Node:
    head, tail = m.group(1), m.group(2)
    children = [Node(type=NodeType.STRONG, children=[text_node(head)])]
    if tail:
        children.append(text_node(tail))
    return Node(type=NodeType.EMPHASIS, children=children)


def _wrap(node_type: NodeType) -> Callable[[re.Match], Node]:
    def build(m: re.Match) -> Node:
        return Node(type=node_type, children=[text_node(m.group(1))])
    return build


_EMPHASIS_RULES: list[tuple[re.Pattern, Callable[[re.Match], Node]]] = [
    (RE_BOLD_ITALIC, _bold_italic),
    (RE_ITALIC_BOLD, _italic_bold),
    (RE_BOLD, _wrap(NodeType.STRONG)),
    (RE_ITALIC, _wrap(NodeType.EMPHASIS)),
]


def _split_text(
    text: str,
    pattern: re.Pattern,
    build: Callable[[re.Match], Node],
) -> list[Node]:
    nodes: list[Node] = []
    pos = 0
    for m in pattern.finditer(text):
        if m.start() > pos:
            nodes.append(text_node(text[pos:m.start()]))
        nodes.append(build(m))
        pos = m.end()
    if pos < len(text):
        nodes.append(text_node(text[pos:]))
    return nodes


def _apply_rule(
    nodes: list[Node],
    pattern: re.Pattern,
    build: Callable[[re.Match], Node],
) -> list[Node]:
    result: list[Node] = []
    for node in nodes:
        if node.type == NodeType.TEXT:
            result.extend(_split_text(node.text or "", pattern, build))
        else:
            node.children = _apply_rule(node.children, pattern, build)
            result.append(node)
    return result


def resolve_emphasis(nodes: list[Node]) -> list[Node]:
    """Apply lone-star escaping and the emphasis rules to *nodes*.

    Each rule is one pass over every text node of the tree, including text
    inside emphasis produced by an earlier pass. Mixed nesting deeper than
    ``***a*b**`` / ``***a**b*`` is not supported.
    """
    for node in nodes:
        if node.type == NodeType.TEXT and node.text:
            node.text = RE_LONE_STAR.sub(r"\1&#42;", node.text)
    for pattern, build in _EMPHASIS_RULES:
        nodes = _apply_rule(nodes, pattern, build)
    return nodes


# ── atom placeholders ─────────────────────────────────────────────────────


def _pick_marker(line: str) -> str:
    """Return a private-use character that does not occur in *line*."""
    return next(
        chr(cp) for cp in range(0xE000, 0xF900) if chr(cp) not in line
    )


def _expand_atoms(
    nodes: list[Node],
    marker_re: re.Pattern,
    atoms: list[Node],
) -> list[Node]:
    result: list[Node] = []
    for node in nodes:
        if node.type != NodeType.TEXT:
            node.children = _expand_atoms(node.children, marker_re, atoms)
            result.append(node)
            continue
        text = node.text or ""
        pos = 0
        for m in marker_re.finditer(text):
            if m.start() > pos:
                result.append(text_node(text[pos:m.start()]))
            result.append(atoms[int(m.group(1))])
            pos = m.end()
        if pos < len(text):
            result.append(text_node(text[pos:]))
    return result


# ══════════════════════════════════════════════════════════════════════════
# InlineParser
# ══════════════════════════════════════════════════════════════════════════


class InlineParser:
    """Parse single lines of escaped text into inline nodes."""

    def __init__(
        self,
        config: MarkupConfig = DEFAULT_CONFIG,
        *,
        is_legacy: bool = False,
    ) -> None:
        self._dice = frozenset(config.dice)
        self._internal_pattern = config.internal_url_pattern()
        self._is_legacy = is_legacy

    def parse(self, line: str) -> list[Node]:
        """Return the inline nodes for one line of escaped text."""
        marker = _pick_marker(line)
        atoms: list[Node] = []
        parts: list[str] = []

        for token in tokenize_inline(line):
            node = self._resolve(token)
            if node is None:
                parts.append(token.text)
                continue
            parts.append(f"{marker}{len(atoms)}{marker}")
            atoms.append(node)

        flat = "".join(parts)
        if not flat:
            return []
        nodes = resolve_emphasis([text_node(flat)])
        marker_re = re.compile(rf"{re.escape(marker)}(\d+){re.escape(marker)}")
        return _expand_atoms(nodes, marker_re, atoms)

    def _resolve(self, token: InlineToken) -> Node | None:
        g = token.groups

        if token.kind == TokenKind.DIVIDER:
            return Node(type=NodeType.DIVIDER, text=token.text)

        if token.kind == TokenKind.LINK:
            if g.get("bare"):
                return resolve_link(
                    g["bare"], internal_pattern=self._internal_pattern,
                )
            return resolve_link(
                g["url"],
                label=g.get("label"),
                is_image=bool(g.get("image")),
                internal_pattern=self._internal_pattern,
            )

        if token.kind == TokenKind.CARD_CODE:
            primary = g.get("primary") or ""
            if not primary.replace(APOSTROPHE_ENTITY, "").strip(" -"):
                # [[ ]] or [[-]]: nothing to look up
                return None
            return resolve_card_code(
                primary,
                g.get("secondary"),
                raw=token.text,
                is_legacy=self._is_legacy,
                dice=self._dice,
            )

        return None

"""
Data models for the Ashes markup engine.

Contains the Node dataclass: one tagged node type for both block and inline
elements of a formatted document, with HTML rendering and JSON
serialisation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from config import (
    ALT_TEXT_CLASS,
    CARD_REFERENCE_TAG,
    CENTERED_STYLE,
    DIVIDER_CLASS,
    EFFECT_BOX_CLASSES,
    ICON_CLASS_PREFIX,
    IMAGE_CLASS,
    INLINE_IMAGE_CLASS,
    EffectKind,
    NodeType,
)


# ── Node ──────────────────────────────────────────────────────────────────


@dataclass
class Node:
    """A single element in the formatted document tree.

    Which fields are meaningful depends on ``type``:

    * ``TEXT`` — ``text`` (already HTML-escaped)
    * ``LINK`` / ``IMAGE`` — ``href``, ``is_internal``; a link's label is in
      ``children``, falling back to ``text`` (the URL as typed)
    * ``CARD_ICON`` — ``key`` / ``secondary`` (CSS class parts), ``title``,
      ``text`` (the directive as typed, kept as alt text)
    * ``CARD_REFERENCE`` — ``text`` (card name), ``key`` (stub), ``is_legacy``
    * ``EFFECT_BOX`` — ``effect``
    * everything else — ``children``
    """

    type: NodeType
    text: str | None = None
    href: str | None = None
    key: str | None = None
    secondary: str | None = None
    title: str | None = None
    is_internal: bool = False
    is_legacy: bool = False
    effect: EffectKind | None = None
    children: list[Node] = field(default_factory=list)

    # ── rendering ──

    def inner_html(self) -> str:
        return "".join(child.to_html() for child in self.children)

    def to_html(self) -> str:
        """Render this node (and its subtree) as an HTML fragment.

        Text is emitted as-is: escaping happened once, before parsing.
        """
        t = self.type

        if t == NodeType.TEXT:
            return self.text or ""
        if t == NodeType.LINE:
            return self.inner_html()
        if t == NodeType.LIST_ITEM:
            return f"<li>{self.inner_html()}</li>"
        if t == NodeType.PARAGRAPH:
            body = "<br>\n".join(line.to_html() for line in self.children)
            return f"{self.opening_tag()}{body}</p>"
        if t == NodeType.UNORDERED_LIST:
            return f"<ul>{self.inner_html()}</ul>"
        if t == NodeType.ORDERED_LIST:
            return f"<ol>{self.inner_html()}</ol>"
        if t == NodeType.BLOCKQUOTE:
            return f"<blockquote>{self.inner_html()}</blockquote>"
        if t == NodeType.EFFECT_BOX:
            css = EFFECT_BOX_CLASSES[self.effect]
            return f'<div class="{css}">{self.inner_html()}</div>'

        if t == NodeType.LINK:
            rel = "" if self.is_internal else ' rel="nofollow"'
            label = self.inner_html() or self.text or self.href
            return f'<a href="{self.href}"{rel}>{label}</a>'
        if t == NodeType.IMAGE:
            rel = "" if self.is_internal else ' rel="nofollow external"'
            return (
                f'<a class="{INLINE_IMAGE_CLASS}" href="{self.href}"{rel} target="_blank">'
                f'<img class="{IMAGE_CLASS}" src="{self.href}" alt=""></a>'
            )
        if t == NodeType.CARD_ICON:
            css = ICON_CLASS_PREFIX + self.key
            if self.secondary:
                css += f"-{self.secondary}"
            return (
                f'<i class="{css}" title="{self.title}">'
                f'<span class="{ALT_TEXT_CLASS}">{self.text}</span></i>'
            )
        if t == NodeType.CARD_REFERENCE:
            legacy = "true" if self.is_legacy else "false"
            return (
                f'<{CARD_REFERENCE_TAG} name="{self.text}" stub="{self.key}" '
                f'is_legacy="{legacy}"></{CARD_REFERENCE_TAG}>'
            )
        if t == NodeType.DIVIDER:
            return (
                f' <i class="{DIVIDER_CLASS}">'
                f'<span class="{ALT_TEXT_CLASS}">-</span></i> '
            )
        if t == NodeType.EMPHASIS:
            return f"<i>{self.inner_html()}</i>"
        if t == NodeType.STRONG:
            return f"<b>{self.inner_html()}</b>"
        if t == NodeType.STRONG_EMPHASIS:
            return f"<b><i>{self.inner_html()}</i></b>"
        if t == NodeType.ABILITY_NAME:
            return f"<strong>{self.inner_html()}</strong>"

        raise ValueError(f"Cannot render node of type {t!r}")

    def opening_tag(self) -> str:
        """Return the ``<p>`` tag for a paragraph, centered for lone images."""
        if self.is_lone_image_paragraph():
            return f'<p style="{CENTERED_STYLE}">'
        return "<p>"

    def is_lone_image_paragraph(self) -> bool:
        """True when the paragraph's first line holds nothing but an image."""
        if self.type != NodeType.PARAGRAPH or not self.children:
            return False
        content = [
            c for c in self.children[0].children
            if not (c.type == NodeType.TEXT and not (c.text or "").strip())
        ]
        return len(content) == 1 and content[0].type == NodeType.IMAGE

    # ── serialisation ──

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready dictionary.

        Fields that are ``None`` or ``False`` are omitted, as are empty
        ``children``.
        """
        d: dict[str, Any] = {"type": _ensure_str_value(self.type)}

        for name in ("text", "href", "key", "secondary", "title"):
            value = getattr(self, name)
            if value is not None:
                d[name] = value
        if self.is_internal:
            d["is_internal"] = True
        if self.is_legacy:
            d["is_legacy"] = True
        if self.effect is not None:
            d["effect"] = _ensure_str_value(self.effect)
        if self.children:
            d["children"] = [c.to_dict() for c in self.children]

        return d


def _ensure_str_value(val: str) -> str:
    """Ensure enum members are converted to their string value."""
    if hasattr(val, "value"):
        return str(val.value)
    return str(val)


def text_node(text: str) -> Node:
    return Node(type=NodeType.TEXT, text=text)

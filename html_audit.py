"""
Audit helpers for rendered markup fragments.

Parses a fragment with BeautifulSoup and checks it against the fixed
output vocabulary of the formatter: only known tags, only known attributes
per tag, and only http(s) URLs. Also extracts readable plain text, e.g.
for previews.
"""

from __future__ import annotations

import logging
import re
import warnings

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning, Tag

from config import ALLOWED_SCHEMES, ALLOWED_TAGS, URL_ATTRIBUTES

logger = logging.getLogger(__name__)


def _parse(html: str) -> BeautifulSoup:
    # Plain-text fragments such as a bare URL are still markup here
    with warnings.catch_warnings():
        warnings.filterwarnings("ignore", category=MarkupResemblesLocatorWarning)
        return BeautifulSoup(html, "html.parser")


def _check_tag(el: Tag) -> list[str]:
    """Return the problems found on a single element."""
    allowed_attrs = ALLOWED_TAGS.get(el.name)
    if allowed_attrs is None:
        return [f"unexpected tag <{el.name}>"]

    problems: list[str] = []
    for attr, value in el.attrs.items():
        if attr not in allowed_attrs:
            problems.append(f"unexpected attribute {attr!r} on <{el.name}>")
            continue
        if attr in URL_ATTRIBUTES:
            url = value if isinstance(value, str) else " ".join(value)
            if not url.lower().startswith(ALLOWED_SCHEMES):
                problems.append(f"unsafe URL {url!r} in {attr!r} on <{el.name}>")
    return problems


def audit_fragment(html: str) -> list[str]:
    """Return a list of problems in *html*; an empty list means it is clean.

    Examples
    --------
    >>> audit_fragment('<p><b>ok</b></p>')
    []
    >>> audit_fragment('<script>x</script>')
    ['unexpected tag <script>']
    """
    problems: list[str] = []
    for el in _parse(html).find_all(True):
        problems.extend(_check_tag(el))
    if problems:
        logger.warning("Fragment audit found %d problem(s)", len(problems))
    return problems


def fragment_text(html: str) -> str:
    """Extract cleaned text from a fragment (strip, collapse whitespace).

    Icon alt text is dropped so ``[[charm]]`` does not leak into previews;
    card references contribute their name.
    """
    soup = _parse(html)
    for span in soup.find_all("span", class_="alt-text"):
        span.decompose()
    for ref in soup.find_all("card-link"):
        ref.replace_with(ref.get("name", ""))
    text = soup.get_text(separator=" ", strip=True)
    return re.sub(r"\s+", " ", text).strip()

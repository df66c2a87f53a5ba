#!/usr/bin/env python3
"""
CLI entry point for the Ashes markup engine.

Usage
-----
    # Format a forum post (reads stdin when no file is given)
    python convert.py post.txt

    # Format card effect text, legacy card pool
    python convert.py effect.txt --effect --legacy

    # Dump the parsed document tree instead of HTML
    python convert.py post.txt --json

    # Fail (exit 1) if the rendered HTML leaves the allowed vocabulary
    python convert.py post.txt --check
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from html_audit import audit_fragment, fragment_text
from markup_formatter import EffectTextFormatter, PostFormatter

logger = logging.getLogger(__name__)


def read_source(file_arg: str | None) -> str:
    """Return the markup from *file_arg*, or stdin for ``None``/``-``."""
    if file_arg in (None, "-"):
        return sys.stdin.read()

    path = Path(file_arg)
    if not path.exists():
        print(f"Error: file not found: {path}", file=sys.stderr)
        sys.exit(1)
    return path.read_text(encoding="utf-8")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Convert Ashes post or card effect markup to HTML."
    )
    ap.add_argument(
        "file",
        nargs="?",
        default=None,
        help="Path to the markup file (default: stdin).",
    )
    ap.add_argument("-o", "--output", help="Output file (default: stdout).")
    ap.add_argument(
        "--effect",
        action="store_true",
        help="Format as card effect text (effect boxes, bold ability names).",
    )
    ap.add_argument(
        "--ensure-paragraphs",
        action="store_true",
        help="Wrap single-paragraph output in <p> (always on with --effect).",
    )
    ap.add_argument(
        "--legacy",
        action="store_true",
        help="Mark card references as belonging to the legacy card pool.",
    )
    mode = ap.add_mutually_exclusive_group()
    mode.add_argument(
        "--json",
        action="store_true",
        help="Print the parsed document tree as JSON instead of HTML.",
    )
    mode.add_argument(
        "--text",
        action="store_true",
        help="Print the plain text of the rendered HTML.",
    )
    ap.add_argument(
        "--check",
        action="store_true",
        help="Audit the rendered HTML and exit with status 1 on problems.",
    )
    ap.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging.",
    )
    return ap


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    source = read_source(args.file)
    formatter = EffectTextFormatter() if args.effect else PostFormatter()
    html = formatter.format(
        source,
        ensure_paragraphs=args.ensure_paragraphs,
        is_legacy=args.legacy,
    )

    if args.check:
        problems = audit_fragment(html)
        for problem in problems:
            print(f"Error: {problem}", file=sys.stderr)
        if problems:
            sys.exit(1)

    if args.json:
        tree = formatter.parse(source, is_legacy=args.legacy)
        out = json.dumps(
            [node.to_dict() for node in tree], ensure_ascii=False, indent=2,
        )
    elif args.text:
        out = fragment_text(html)
    else:
        out = html

    if args.output:
        Path(args.output).write_text(out + "\n", encoding="utf-8")
        print(f"→ {args.output}", file=sys.stderr)
    else:
        print(out)


if __name__ == "__main__":
    main()

"""Render raw model output into Markdown or print-ready HTML from the command line."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from maispec.config import settings
from maispec.intake import ingest_raw_output
from maispec.observability import configure_logging
from maispec.render import render_html, render_markdown, render_opaque_html, render_opaque_markdown


def _read_source(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def render_source(raw: str, output_format: str) -> str:
    result = ingest_raw_output(raw)
    if result.document is not None:
        return render_html(result.document) if output_format == "html" else render_markdown(result.document)
    if output_format == "html":
        return render_opaque_html(result.opaque_text)
    return render_opaque_markdown(result.opaque_text)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Render a generated requirements document.")
    parser.add_argument("input", help="File holding the raw model output, or '-' for stdin.")
    parser.add_argument(
        "--format",
        choices=("markdown", "html"),
        default="markdown",
        help="Output representation (default: markdown).",
    )
    parser.add_argument("--output", help="Write to this path instead of stdout.")
    args = parser.parse_args(argv)

    configure_logging(settings.log_level)
    try:
        raw = _read_source(args.input)
    except OSError as exc:
        print(f"Cannot read {args.input}: {exc}", file=sys.stderr)
        return 2

    rendered = render_source(raw, args.format)
    if args.output:
        Path(args.output).write_text(rendered, encoding="utf-8")
    else:
        sys.stdout.write(rendered)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

from __future__ import annotations

import html
import re

_SENTENCE_BOUNDARY_PATTERN = re.compile(r"(?<=[.!?])\s+")


def split_sentences(text: str) -> list[str]:
    collapsed = " ".join((text or "").split())
    return [sentence for sentence in _SENTENCE_BOUNDARY_PATTERN.split(collapsed) if sentence]


def take_sentences(text: str, count: int) -> str:
    return " ".join(split_sentences(text)[: max(0, count)])


def escape_markup(value: object) -> str:
    """Escape ``& < > " '`` so free text can be embedded in hypertext."""
    return html.escape("" if value is None else str(value), quote=True)

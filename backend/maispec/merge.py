from __future__ import annotations

import logging
from typing import Iterable

from maispec.classify import bucket_non_functional
from maispec.derive import group_functional
from maispec.models import DocumentModel, FunctionalItem, PlainStatement
from maispec.selection import select_highlights
from maispec.taxonomy import CATEGORIES, Category, TaxonomyTable, get_taxonomy

logger = logging.getLogger("maispec.merge")


class UnknownCategoryError(ValueError):
    def __init__(self, category: str) -> None:
        self.category = category
        super().__init__(f"Unknown non-functional category '{category}' (expected one of: {', '.join(CATEGORIES)}).")


def clean_lines(lines: Iterable[object] | None) -> list[str]:
    cleaned: list[str] = []
    for line in lines or []:
        text = str(line).strip()
        if text:
            cleaned.append(text)
    return cleaned


def merge_functional_edit(
    model: DocumentModel,
    lines: Iterable[object],
    *,
    highlight_limit: int | None = None,
) -> DocumentModel:
    """Replace the non-highlighted functional tail with edited flat lines.

    Highlights are recomputed from ``model`` and carried over verbatim.
    """
    highlights = select_highlights(group_functional(model.functional), limit=highlight_limit)
    edited: list[FunctionalItem] = [PlainStatement(text=text) for text in clean_lines(lines)]
    logger.info(
        "functional_edit_merged",
        extra={
            "event": "functional_edit_merged",
            "kept_highlights": len(highlights),
            "edited_lines": len(edited),
            "previous_count": len(model.functional),
        },
    )
    return model.model_copy(update={"functional": [*highlights, *edited]})


def merge_nfr_edit(
    model: DocumentModel,
    category: str,
    lines: Iterable[object],
    *,
    taxonomy: TaxonomyTable | None = None,
) -> DocumentModel:
    """Swap the stored statements of one category for edited flat lines.

    Only statements that currently classify into ``category`` are removed;
    placeholders from the derived view are never written back.
    """
    if category not in CATEGORIES:
        raise UnknownCategoryError(category)
    target: Category = category  # type: ignore[assignment]

    table = taxonomy or get_taxonomy()
    buckets = bucket_non_functional(model.non_functional, taxonomy=table, with_defaults=False)
    existing = set(buckets[target].flatten())
    kept = [statement for statement in model.non_functional if statement not in existing]
    placeholder = table.rule_for(target).default_statement
    # An editor seeded from the derived view hands the placeholder back unchanged.
    added = [text for text in clean_lines(lines) if text != placeholder]
    logger.info(
        "nfr_edit_merged",
        extra={
            "event": "nfr_edit_merged",
            "category": target,
            "removed": len(model.non_functional) - len(kept),
            "added": len(added),
        },
    )
    return model.model_copy(update={"non_functional": [*kept, *added]})

from __future__ import annotations

from dataclasses import dataclass
import re

from maispec.classify import LevelGroups, bucket_non_functional
from maispec.config import settings
from maispec.models import DocumentModel, FunctionalItem, item_level, item_text
from maispec.taxonomy import CATEGORIES, Category, TaxonomyTable

_SYSTEM_PREFIX_PATTERN = re.compile(r"^The system\s+(?:MUST|SHOULD|COULD)\s+", flags=re.IGNORECASE)


@dataclass(frozen=True)
class DerivedSections:
    title: str
    summary: str
    functionality: LevelGroups[FunctionalItem]
    reliability: LevelGroups[str]
    performance: LevelGroups[str]
    maintainability: LevelGroups[str]
    compliance: LevelGroups[str]
    verification: LevelGroups[str]
    use_cases: tuple[str, ...]

    def category(self, name: Category) -> LevelGroups[str]:
        return getattr(self, name)

    def non_functional(self) -> list[tuple[Category, LevelGroups[str]]]:
        return [(name, self.category(name)) for name in CATEGORIES]


def strip_system_prefix(statement: str) -> str:
    return _SYSTEM_PREFIX_PATTERN.sub("", statement, count=1)


def derive_use_cases(model: DocumentModel, *, limit: int | None = None) -> tuple[str, ...]:
    if model.use_cases:
        return tuple(model.use_cases)
    fallback_count = settings.use_case_fallback_count if limit is None else limit
    synthesized: list[str] = []
    for item in model.functional[:fallback_count]:
        statement = item_text(item)
        text = strip_system_prefix(statement) or statement
        if text:
            synthesized.append(text)
    return tuple(synthesized)


def group_functional(items: list[FunctionalItem]) -> LevelGroups[FunctionalItem]:
    return LevelGroups.partition(items, item_level)


def derive_sections(
    model: DocumentModel,
    *,
    taxonomy: TaxonomyTable | None = None,
    use_case_limit: int | None = None,
) -> DerivedSections:
    """Project a document into its render-ready sections.

    Pure and deterministic; call it on every read instead of caching the result.
    """
    buckets = bucket_non_functional(model.non_functional, taxonomy=taxonomy)
    return DerivedSections(
        title=model.title or "",
        summary=model.summary or "",
        functionality=group_functional(model.functional),
        reliability=buckets["reliability"],
        performance=buckets["performance"],
        maintainability=buckets["maintainability"],
        compliance=buckets["compliance"],
        verification=buckets["verification"],
        use_cases=derive_use_cases(model, limit=use_case_limit),
    )

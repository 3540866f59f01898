from __future__ import annotations

from dataclasses import dataclass

from maispec.classify import LevelGroups
from maispec.config import settings
from maispec.derive import DerivedSections, derive_sections
from maispec.models import DocumentModel, FunctionalItem
from maispec.render.text import take_sentences
from maispec.selection import remove_selected, select_highlights
from maispec.taxonomy import CATEGORIES, TaxonomyTable

FUNCTIONAL_SECTION_KEY = "functional"
SECTION_TITLES: dict[str, str] = {
    FUNCTIONAL_SECTION_KEY: "Functional",
    "reliability": "Reliability",
    "performance": "Performance",
    "maintainability": "Maintainability",
    "compliance": "Compliance",
    "verification": "Verification",
}
SECTION_ORDER: tuple[str, ...] = (FUNCTIONAL_SECTION_KEY, *CATEGORIES)


@dataclass(frozen=True)
class RenderSection:
    key: str
    title: str
    groups: LevelGroups

    @property
    def visible(self) -> bool:
        return self.groups.has_primary_items


@dataclass(frozen=True)
class RenderContext:
    """Inputs shared by every renderer so their outputs stay structurally parallel."""

    sections: DerivedSections
    highlights: tuple[FunctionalItem, ...]
    remaining_functional: LevelGroups[FunctionalItem]
    highlight_limit: int
    title: str
    intro: str
    closing_summary: str

    @property
    def highlights_heading(self) -> str:
        return f"Key MUST/SHOULD (Top {self.highlight_limit})"

    def all_sections(self) -> list[RenderSection]:
        rendered: list[RenderSection] = []
        for key in SECTION_ORDER:
            groups = self.remaining_functional if key == FUNCTIONAL_SECTION_KEY else self.sections.category(key)
            rendered.append(RenderSection(key=key, title=SECTION_TITLES[key], groups=groups))
        return rendered

    def visible_sections(self) -> list[RenderSection]:
        return [section for section in self.all_sections() if section.visible]


def build_render_context(
    model: DocumentModel,
    *,
    taxonomy: TaxonomyTable | None = None,
    highlight_limit: int | None = None,
) -> RenderContext:
    limit = settings.highlight_limit if highlight_limit is None else highlight_limit
    sections = derive_sections(model, taxonomy=taxonomy)
    highlights = select_highlights(sections.functionality, limit=limit)
    return RenderContext(
        sections=sections,
        highlights=tuple(highlights),
        remaining_functional=remove_selected(sections.functionality, highlights),
        highlight_limit=limit,
        title=sections.title or settings.default_title,
        intro=take_sentences(sections.summary, settings.intro_sentences),
        closing_summary=take_sentences(sections.summary, settings.summary_sentences),
    )

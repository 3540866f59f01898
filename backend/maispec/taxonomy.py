"""Keyword tables for the non-functional requirement taxonomy.

The tables are plain data so they can be tuned, or replaced wholesale with a
JSON file named by ``MAISPEC_TAXONOMY_PATH``, without touching the bucketing
logic in :mod:`maispec.classify`.
"""

from __future__ import annotations

from functools import lru_cache
import logging
from pathlib import Path
import re
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from maispec.config import settings

logger = logging.getLogger("maispec.taxonomy")

Category = Literal["reliability", "performance", "maintainability", "compliance", "verification"]

# Render order of the categories. Matching order lives in the table itself.
CATEGORIES: tuple[Category, ...] = (
    "reliability",
    "performance",
    "maintainability",
    "compliance",
    "verification",
)


@lru_cache(maxsize=64)
def _compile_keywords(keywords: tuple[str, ...]) -> re.Pattern[str]:
    return re.compile("|".join(f"(?:{keyword})" for keyword in keywords), flags=re.IGNORECASE)


class CategoryRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: Category
    keywords: list[str] = Field(..., min_length=1)
    default_level: Literal["MUST", "SHOULD"] = "SHOULD"
    default_statement: str = Field(..., min_length=1)

    @property
    def pattern(self) -> re.Pattern[str]:
        return _compile_keywords(tuple(self.keywords))

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


class TaxonomyTable(BaseModel):
    model_config = ConfigDict(frozen=True)

    # First matching rule wins.
    rules: list[CategoryRule]

    @model_validator(mode="after")
    def require_every_category_once(self) -> "TaxonomyTable":
        names = [rule.category for rule in self.rules]
        if sorted(names) != sorted(CATEGORIES):
            raise ValueError(f"taxonomy must define each category exactly once, got {names}")
        for rule in self.rules:
            # Surface bad regex fragments at load time rather than on first use.
            try:
                rule.pattern
            except re.error as exc:
                raise ValueError(f"invalid keyword pattern for {rule.category}: {exc}") from exc
        return self

    def rule_for(self, category: str) -> CategoryRule:
        for rule in self.rules:
            if rule.category == category:
                return rule
        raise KeyError(category)

    def categorize(self, text: str) -> Category | None:
        for rule in self.rules:
            if rule.matches(text):
                return rule.category
        return None


DEFAULT_TAXONOMY = TaxonomyTable(
    rules=[
        CategoryRule(
            category="compliance",
            keywords=[
                "gdpr",
                "ccpa",
                "hipaa",
                "pci",
                r"soc\s*2",
                r"iso/?iec",
                r"iso\s*2700",
                "wcag",
                "accessibil",
                "compliance",
                "regulat",
            ],
            default_statement="Compliance: Core flows align with WCAG 2.1 AA accessibility guidelines.",
        ),
        CategoryRule(
            category="verification",
            keywords=[
                "test",
                r"\bqa\b",
                r"\buat\b",
                r"\bunit\b",
                "integration",
                "e2e",
                "acceptance",
                "verification",
                "validation",
                r"ci/?cd",
                "pipeline",
            ],
            default_statement="Verification: Automated unit tests for critical logic and smoke tests in CI.",
        ),
        CategoryRule(
            category="performance",
            keywords=[
                "performance",
                "latency",
                "throughput",
                "response",
                r"load\s*time",
                "scalab",
                "concurren",
                "benchmark",
            ],
            default_statement="Performance: p95 page load ≤ 3s for typical users under normal load.",
        ),
        CategoryRule(
            category="reliability",
            keywords=[
                "reliab",
                "uptime",
                "availability",
                "failover",
                "redundan",
                "recover",
                "backup",
                r"disaster\s*recovery",
                "fault[- ]toler",
                "resilien",
            ],
            default_level="MUST",
            default_statement=(
                "Reliability: Maintain 99.9% monthly uptime and daily automated backups with restore tests."
            ),
        ),
        CategoryRule(
            category="maintainability",
            keywords=[
                "maintain",
                "refactor",
                "modular",
                "document",
                "readab",
                "extensib",
                "configurab",
                "observab",
                "monitorab",
                "logging",
            ],
            default_statement="Maintainability: Modular code with basic docs and lint/tests enforced in CI.",
        ),
    ]
)


def load_taxonomy(path: str | Path) -> TaxonomyTable:
    source = Path(path)
    table = TaxonomyTable.model_validate_json(source.read_text(encoding="utf-8"))
    logger.info(
        "taxonomy_loaded",
        extra={"event": "taxonomy_loaded", "path": str(source), "rule_order": [rule.category for rule in table.rules]},
    )
    return table


@lru_cache(maxsize=1)
def get_taxonomy() -> TaxonomyTable:
    if settings.taxonomy_path:
        return load_taxonomy(settings.taxonomy_path)
    return DEFAULT_TAXONOMY

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, Generic, Iterable, Iterator, Literal, TypeVar

from maispec.taxonomy import CATEGORIES, Category, TaxonomyTable, get_taxonomy

Level = Literal["MUST", "SHOULD", "COULD"]
LEVELS: tuple[Level, ...] = ("MUST", "SHOULD", "COULD")
DEFAULT_LEVEL: Level = "SHOULD"

T = TypeVar("T")


def classify_level(text: str) -> Level:
    """Return the first of MUST, SHOULD, COULD found in ``text``; SHOULD otherwise."""
    upper = (text or "").upper()
    for level in LEVELS:
        if level in upper:
            return level
    return DEFAULT_LEVEL


@dataclass(frozen=True)
class LevelGroups(Generic[T]):
    must: tuple[T, ...] = ()
    should: tuple[T, ...] = ()
    could: tuple[T, ...] = ()

    @classmethod
    def partition(cls, items: Iterable[T], level_of: Callable[[T], Level]) -> "LevelGroups[T]":
        buckets: dict[Level, list[T]] = {level: [] for level in LEVELS}
        for item in items:
            buckets[level_of(item)].append(item)
        return cls(
            must=tuple(buckets["MUST"]),
            should=tuple(buckets["SHOULD"]),
            could=tuple(buckets["COULD"]),
        )

    def __getitem__(self, level: Level) -> tuple[T, ...]:
        if level == "MUST":
            return self.must
        if level == "SHOULD":
            return self.should
        if level == "COULD":
            return self.could
        raise KeyError(level)

    def items(self) -> Iterator[tuple[Level, tuple[T, ...]]]:
        for level in LEVELS:
            yield level, self[level]

    def flatten(self) -> tuple[T, ...]:
        return self.must + self.should + self.could

    @property
    def has_primary_items(self) -> bool:
        return bool(self.must or self.should)

    def appended(self, level: Level, item: T) -> "LevelGroups[T]":
        return replace(self, **{level.lower(): self[level] + (item,)})

    def filtered(self, keep: Callable[[T], bool]) -> "LevelGroups[T]":
        return LevelGroups(
            must=tuple(item for item in self.must if keep(item)),
            should=tuple(item for item in self.should if keep(item)),
            could=tuple(item for item in self.could if keep(item)),
        )


NfrBuckets = dict[Category, LevelGroups[str]]


def categorize_statement(text: str, taxonomy: TaxonomyTable | None = None) -> Category | None:
    return (taxonomy or get_taxonomy()).categorize(text)


def bucket_non_functional(
    statements: Iterable[str],
    *,
    taxonomy: TaxonomyTable | None = None,
    with_defaults: bool = True,
) -> NfrBuckets:
    """Partition non-functional statements into the five categories, each split by level.

    Statements matching no category are left out of the result. With
    ``with_defaults`` every category lacking MUST and SHOULD entries receives its
    placeholder statement; placeholders only ever exist in this view.
    """
    table = taxonomy or get_taxonomy()
    grouped: dict[Category, list[str]] = {category: [] for category in CATEGORIES}
    for statement in statements:
        category = table.categorize(statement)
        if category is not None:
            grouped[category].append(statement)

    buckets: NfrBuckets = {
        category: LevelGroups.partition(grouped[category], classify_level) for category in CATEGORIES
    }
    if not with_defaults:
        return buckets

    for category in CATEGORIES:
        if buckets[category].has_primary_items:
            continue
        rule = table.rule_for(category)
        buckets[category] = buckets[category].appended(rule.default_level, rule.default_statement)
    return buckets

from __future__ import annotations

from maispec.classify import LevelGroups
from maispec.config import settings
from maispec.models import FunctionalItem, StructuredRequirement, item_text

ItemIdentity = tuple[str, str]


def normalize_statement(text: str) -> str:
    return " ".join((text or "").split()).lower()


def item_identity(item: FunctionalItem) -> ItemIdentity:
    if isinstance(item, StructuredRequirement) and item.id:
        return ("id", item.id)
    return ("statement", normalize_statement(item_text(item)))


def select_highlights(
    functionality: LevelGroups[FunctionalItem],
    *,
    limit: int | None = None,
) -> list[FunctionalItem]:
    """MUST items then SHOULD items, in authoring order, capped at ``limit``."""
    bound = settings.highlight_limit if limit is None else limit
    return [*functionality.must, *functionality.should][: max(0, bound)]


def remove_selected(
    groups: LevelGroups[FunctionalItem],
    selected: list[FunctionalItem],
) -> LevelGroups[FunctionalItem]:
    selected_keys = {item_identity(item) for item in selected}
    return groups.filtered(lambda item: item_identity(item) not in selected_keys)

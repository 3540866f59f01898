from __future__ import annotations

from maispec.derive import derive_sections, strip_system_prefix
from maispec.models import DocumentModel, PlainStatement, StructuredRequirement
from maispec.selection import item_identity, remove_selected, select_highlights


def _document(**overrides: object) -> DocumentModel:
    payload: dict[str, object] = {
        "title": "Event Booking",
        "summary": "Book venues. Manage guests. Send reminders. Track payments. Export reports.",
        "functional": [
            {"id": "FR001", "level": "MUST", "statement": "The system MUST let users book a venue"},
            {"id": "FR002", "statement": "The system SHOULD send reminder emails"},
            {"id": "FR003", "level": "COULD", "statement": "The system COULD suggest caterers"},
            {"id": "FR004", "level": "MUST", "statement": "The system MUST take deposits"},
            {"id": "FR005", "level": "SHOULD", "statement": "The system SHOULD export guest lists"},
            {"id": "FR006", "level": "MUST", "statement": "The system MUST support cancellations"},
        ],
        "nonFunctional": ["Must support 99.9% uptime", "Pages load in under 2s for p95 response"],
    }
    payload.update(overrides)
    return DocumentModel.model_validate(payload)


def test_derivation_is_idempotent() -> None:
    document = _document()
    assert derive_sections(document) == derive_sections(document)
    assert repr(derive_sections(document)) == repr(derive_sections(document))


def test_functional_is_partitioned_by_level_in_authoring_order() -> None:
    sections = derive_sections(_document())

    assert [item.id for item in sections.functionality.must] == ["FR001", "FR004", "FR006"]
    assert [item.id for item in sections.functionality.should] == ["FR002", "FR005"]
    assert [item.id for item in sections.functionality.could] == ["FR003"]


def test_plain_functional_items_are_classified_from_text() -> None:
    document = _document(functional=["The system MUST log in users", "Offer a tour"])

    sections = derive_sections(document)

    assert sections.functionality.must == (PlainStatement(text="The system MUST log in users"),)
    assert sections.functionality.should == (PlainStatement(text="Offer a tour"),)


def test_use_cases_fall_back_to_first_five_functional_statements() -> None:
    sections = derive_sections(_document())

    assert sections.use_cases == (
        "let users book a venue",
        "send reminder emails",
        "suggest caterers",
        "take deposits",
        "export guest lists",
    )


def test_explicit_use_cases_win() -> None:
    sections = derive_sections(_document(useCases=["Planner books a hall"]))
    assert sections.use_cases == ("Planner books a hall",)


def test_title_and_summary_default_to_empty() -> None:
    sections = derive_sections(DocumentModel.model_validate({"functional": []}))

    assert sections.title == ""
    assert sections.summary == ""
    assert sections.use_cases == ()


def test_strip_system_prefix_only_touches_leading_phrase() -> None:
    assert strip_system_prefix("the system should  notify admins") == "notify admins"
    assert strip_system_prefix("Admins MUST approve") == "Admins MUST approve"


def test_highlights_take_must_then_should_up_to_four() -> None:
    sections = derive_sections(_document())

    highlights = select_highlights(sections.functionality)

    assert [item.id for item in highlights] == ["FR001", "FR004", "FR006", "FR002"]


def test_highlight_limit_is_configurable() -> None:
    sections = derive_sections(_document())
    assert len(select_highlights(sections.functionality, limit=2)) == 2
    assert select_highlights(sections.functionality, limit=0) == []


def test_removed_highlights_never_reappear() -> None:
    sections = derive_sections(_document())
    highlights = select_highlights(sections.functionality)

    remaining = remove_selected(sections.functionality, highlights)

    highlight_keys = {item_identity(item) for item in highlights}
    remaining_keys = {item_identity(item) for item in remaining.flatten()}
    assert highlight_keys.isdisjoint(remaining_keys)
    assert [item.id for item in remaining.flatten()] == ["FR005", "FR003"]


def test_identity_matches_plain_and_unidentified_items_by_normalized_text() -> None:
    structured = StructuredRequirement.model_validate({"statement": "The system MUST  Log in users"})
    plain = PlainStatement(text="the system must log in users")

    assert item_identity(structured) == item_identity(plain)

    document = _document(
        functional=[
            {"statement": "The system MUST log in users"},
            "the system  MUST log in users",
            "The system SHOULD log out users",
        ]
    )
    sections = derive_sections(document)
    highlights = select_highlights(sections.functionality, limit=1)

    remaining = remove_selected(sections.functionality, highlights)

    assert remaining.must == ()
    assert remaining.should == (PlainStatement(text="The system SHOULD log out users"),)


def test_dedup_is_independent_of_storage_order() -> None:
    document = _document()
    reversed_document = document.model_copy(update={"functional": list(reversed(document.functional))})

    for candidate in (document, reversed_document):
        sections = derive_sections(candidate)
        highlights = select_highlights(sections.functionality)
        remaining = remove_selected(sections.functionality, highlights)
        keys = {item_identity(item) for item in highlights}
        assert all(item_identity(item) not in keys for item in remaining.flatten())

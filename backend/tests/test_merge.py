from __future__ import annotations

from collections import Counter

import pytest

from maispec.classify import bucket_non_functional, categorize_statement
from maispec.intake import ingest_raw_output
from maispec.merge import UnknownCategoryError, merge_functional_edit, merge_nfr_edit
from maispec.models import DocumentModel, PlainStatement
from maispec.store import DocumentStore, NoDocumentError
from maispec.taxonomy import DEFAULT_TAXONOMY


def _document() -> DocumentModel:
    return DocumentModel.model_validate(
        {
            "title": "Fitness Coach",
            "functional": [
                {"id": "FR001", "level": "MUST", "statement": "Track workouts"},
                {"id": "FR002", "level": "COULD", "statement": "Share badges"},
                {"id": "FR003", "level": "SHOULD", "statement": "Remind users"},
                {"id": "FR004", "level": "MUST", "statement": "Log meals"},
                {"id": "FR005", "level": "SHOULD", "statement": "Chart progress"},
                {"id": "FR006", "level": "SHOULD", "statement": "Export CSV"},
            ],
            "nonFunctional": [
                "Must support 99.9% uptime",
                "API latency SHOULD stay under 200ms",
                "Throughput could reach 500 rps",
                "Comply with GDPR",
                "The UI should feel friendly",
                "Unit tests in CI",
            ],
        }
    )


def test_functional_edit_keeps_highlights_and_replaces_tail() -> None:
    document = _document()

    edited = merge_functional_edit(document, ["  Sync wearables ", "", "Export CSV"])

    assert [getattr(item, "id", None) for item in edited.functional[:4]] == ["FR001", "FR004", "FR003", "FR005"]
    assert edited.functional[4:] == [PlainStatement(text="Sync wearables"), PlainStatement(text="Export CSV")]
    assert [getattr(item, "id", None) for item in document.functional] == [
        "FR001",
        "FR002",
        "FR003",
        "FR004",
        "FR005",
        "FR006",
    ]


def test_nfr_edit_replaces_only_the_edited_category() -> None:
    document = _document()

    edited = merge_nfr_edit(document, "performance", ["p95 response under 150ms", "   "])

    before = [text for text in document.non_functional if categorize_statement(text) != "performance"]
    after = [text for text in edited.non_functional if categorize_statement(text) != "performance"]
    assert Counter(before) == Counter(after)
    assert "API latency SHOULD stay under 200ms" not in edited.non_functional
    assert "Throughput could reach 500 rps" not in edited.non_functional
    assert edited.non_functional[-1] == "p95 response under 150ms"
    assert "The UI should feel friendly" in edited.non_functional


def test_clearing_a_category_brings_the_default_back() -> None:
    edited = merge_nfr_edit(_document(), "reliability", [])

    assert "Must support 99.9% uptime" not in edited.non_functional
    reliability = bucket_non_functional(edited.non_functional)["reliability"]
    placeholder = DEFAULT_TAXONOMY.rule_for("reliability").default_statement
    assert reliability.must == (placeholder,)
    assert placeholder not in edited.non_functional


def test_placeholder_submitted_back_is_not_persisted() -> None:
    document = DocumentModel.model_validate({"functional": [], "nonFunctional": []})
    placeholder = DEFAULT_TAXONOMY.rule_for("compliance").default_statement

    edited = merge_nfr_edit(document, "compliance", [placeholder, "HIPAA audit trail"])

    assert edited.non_functional == ["HIPAA audit trail"]


def test_unknown_category_is_rejected() -> None:
    with pytest.raises(UnknownCategoryError):
        merge_nfr_edit(_document(), "security", ["Encrypt at rest"])


def test_store_transitions_replace_the_whole_model() -> None:
    store = DocumentStore()
    store.load(ingest_raw_output(_document().to_payload()))
    original = store.current

    updated = store.apply_nfr_edit("verification", ["E2E tests on release"])

    assert store.current is updated
    assert updated is not original
    assert "Unit tests in CI" in original.non_functional
    assert "Unit tests in CI" not in updated.non_functional


def test_failed_edit_leaves_store_intact() -> None:
    store = DocumentStore()
    store.load(ingest_raw_output(_document().to_payload()))
    original = store.current

    with pytest.raises(UnknownCategoryError):
        store.apply_nfr_edit("usability", ["Be nice"])

    assert store.current is original


def test_edit_without_document_raises() -> None:
    store = DocumentStore()
    store.load(ingest_raw_output("just prose"))

    assert store.snapshot.mode == "opaque"
    with pytest.raises(NoDocumentError):
        store.apply_functional_edit(["x"])

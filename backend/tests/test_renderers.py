from __future__ import annotations

import re

from maispec.models import DocumentModel
from maispec.render import (
    build_render_context,
    escape_markup,
    render_html,
    render_markdown,
    render_opaque_html,
    render_opaque_markdown,
    take_sentences,
)

SECTION_NAMES = ("Functional", "Reliability", "Performance", "Maintainability", "Compliance", "Verification")


def _document(**overrides: object) -> DocumentModel:
    payload: dict[str, object] = {
        "title": "Recipe <Planner>",
        "summary": "Plan meals for the week.  Share lists! Track pantry? Suggest recipes. Rate dishes.",
        "functional": [
            {
                "id": "FR001",
                "level": "MUST",
                "statement": "The system MUST store recipes",
                "bullets": ["Title & ingredients", "Steps"],
            },
            {"id": "FR002", "level": "SHOULD", "statement": "The system SHOULD import from URLs"},
            {"id": "FR003", "level": "MUST", "statement": "The system MUST build shopping lists"},
            {
                "id": "FR004",
                "level": "SHOULD",
                "statement": "The system SHOULD scale servings",
                "bullets": ["Half & double portions"],
            },
            {
                "id": "FR005",
                "level": "MUST",
                "statement": "The system MUST sync across devices",
                "bullets": ["Offline edits merge on reconnect"],
            },
            {"id": "FR006", "level": "COULD", "statement": "The system COULD suggest wine pairings"},
        ],
        "nonFunctional": ["Must support 99.9% uptime", "Search response under 300ms"],
    }
    payload.update(overrides)
    return DocumentModel.model_validate(payload)


def _markdown_sections(markdown: str) -> set[str]:
    return {line[3:] for line in markdown.splitlines() if line.startswith("## ")} & set(SECTION_NAMES)


def _html_sections(document: str) -> set[str]:
    return set(re.findall(r"<h2>([^<]+)</h2>", document)) & set(SECTION_NAMES)


def test_take_sentences_collapses_whitespace_and_truncates() -> None:
    text = "One.  Two!\nThree? Four. Five."
    assert take_sentences(text, 3) == "One. Two! Three?"
    assert take_sentences(text, 4) == "One. Two! Three? Four."
    assert take_sentences("", 3) == ""
    assert take_sentences("No terminal punctuation", 3) == "No terminal punctuation"


def test_escape_markup_covers_five_metacharacters() -> None:
    assert escape_markup("""<a href="x">'&'</a>""") == "&lt;a href=&quot;x&quot;&gt;&#x27;&amp;&#x27;&lt;/a&gt;"


def test_markdown_structure() -> None:
    markdown = render_markdown(_document())

    assert markdown.startswith("# Recipe <Planner>\n\nPlan meals for the week. Share lists! Track pantry?\n")
    assert "## Key MUST/SHOULD (Top 4)" in markdown
    assert "- **MUST** — The system MUST store recipes" in markdown
    assert "- **SHOULD** — The system SHOULD import from URLs" in markdown
    assert "- **MUST** — The system MUST sync across devices" in markdown
    assert "## Functional\n### SHOULD\n- **The system SHOULD scale servings**\n  - Half & double portions" in markdown
    assert "- **The system MUST store recipes**" not in markdown
    assert "The system COULD suggest wine pairings" not in markdown.split("## Use Cases")[0]
    assert "## Reliability\n### MUST\n- Must support 99.9% uptime" in markdown
    assert "## Use Cases\n- store recipes" in markdown
    assert markdown.rstrip().endswith(
        "## Summary\nPlan meals for the week. Share lists! Track pantry? Suggest recipes."
    )


def test_html_escapes_and_mirrors_structure() -> None:
    document = render_html(_document())

    assert document.startswith("<!doctype html>")
    assert "<title>Recipe &lt;Planner&gt;</title>" in document
    assert "<h1>Recipe &lt;Planner&gt;</h1>" in document
    assert "<li><strong>MUST</strong> — The system MUST store recipes</li>" in document
    assert "<li>Title &amp; ingredients</li>" not in document
    assert (
        "<h2>Functional</h2><h3>SHOULD</h3><ul><li><strong>The system SHOULD scale servings</strong>"
        "<ul><li>Half &amp; double portions</li></ul></li></ul>"
    ) in document
    assert "<h2>Summary</h2><p>Plan meals for the week. Share lists! Track pantry? Suggest recipes.</p>" in document


def test_renderers_agree_on_present_sections() -> None:
    for document in (
        _document(),
        _document(functional=[{"statement": "Only one", "level": "MUST"}]),
        _document(functional=[], nonFunctional=[]),
    ):
        context = build_render_context(document)
        expected = {section.title for section in context.visible_sections()}
        assert _markdown_sections(render_markdown(document)) == expected
        assert _html_sections(render_html(document)) == expected


def test_functional_section_omitted_when_highlights_consume_everything() -> None:
    document = _document(functional=[{"id": "A", "statement": "The system MUST do A"}])

    markdown = render_markdown(document)

    assert "## Functional" not in markdown
    assert "## Reliability" in markdown


def test_could_only_functional_section_is_omitted() -> None:
    document = _document(
        functional=[{"id": str(index), "level": "MUST", "statement": f"Req {index}"} for index in range(4)]
        + [{"id": "c", "level": "COULD", "statement": "Nice to have"}]
    )

    assert "## Functional" not in render_markdown(document)
    assert "<h2>Functional</h2>" not in render_html(document)


def test_plain_functional_items_render_without_bold() -> None:
    document = _document(
        functional=[{"id": str(index), "level": "MUST", "statement": f"Req {index}"} for index in range(4)]
        + ["Edited <line> MUST stay"]
    )

    assert "- Edited <line> MUST stay" in render_markdown(document)
    assert "<li>Edited &lt;line&gt; MUST stay</li>" in render_html(document)


def test_empty_title_and_summary() -> None:
    document = DocumentModel.model_validate({"functional": []})

    markdown = render_markdown(document)

    assert markdown.startswith("# Requirements\n\n## Reliability")
    assert "## Summary" not in markdown
    assert "Key MUST/SHOULD" not in markdown
    assert "<p>" not in render_html(document)


def test_opaque_fallbacks() -> None:
    assert render_opaque_markdown("") == "# Requirements\n\n(No data)\n"
    assert render_opaque_markdown("free text") == "free text"
    assert "<pre" in render_opaque_html("a < b")
    assert "a &lt; b" in render_opaque_html("a < b")

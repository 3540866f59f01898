from __future__ import annotations

from maispec.models import DocumentModel, StructuredRequirement, item_level, item_text
from maispec.render.context import RenderContext, RenderSection, build_render_context

EMPTY_MARKDOWN = "# Requirements\n\n(No data)\n"


def render_markdown(model: DocumentModel, *, context: RenderContext | None = None) -> str:
    ctx = context or build_render_context(model)
    lines: list[str] = [f"# {ctx.title}", ""]
    if ctx.intro:
        lines.extend([ctx.intro, ""])

    if ctx.highlights:
        lines.append(f"## {ctx.highlights_heading}")
        for item in ctx.highlights:
            lines.append(f"- **{item_level(item)}** — {item_text(item)}")
        lines.append("")

    for section in ctx.visible_sections():
        lines.extend(_section_lines(section))

    if ctx.sections.use_cases:
        lines.append("## Use Cases")
        lines.extend(f"- {use_case}" for use_case in ctx.sections.use_cases)
        lines.append("")

    if ctx.closing_summary:
        lines.extend(["## Summary", ctx.closing_summary])

    return "\n".join(lines).strip() + "\n"


def _section_lines(section: RenderSection) -> list[str]:
    lines = [f"## {section.title}"]
    for level in ("MUST", "SHOULD"):
        items = section.groups[level]
        if not items:
            continue
        lines.append(f"### {level}")
        for item in items:
            if isinstance(item, StructuredRequirement):
                lines.append(f"- **{item.statement}**")
                lines.extend(f"  - {bullet}" for bullet in item.bullets)
            else:
                lines.append(f"- {item if isinstance(item, str) else item_text(item)}")
        lines.append("")
    return lines


def render_opaque_markdown(text: str) -> str:
    if not text or not text.strip():
        return EMPTY_MARKDOWN
    return text

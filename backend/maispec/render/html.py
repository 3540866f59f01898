from __future__ import annotations

from maispec.models import DocumentModel, StructuredRequirement, item_level, item_text
from maispec.render.context import RenderContext, RenderSection, build_render_context
from maispec.render.text import escape_markup

PRINT_STYLESHEET = """
    @page { margin: 28pt; }
    body { font-family: -apple-system, Segoe UI, Roboto, Arial, sans-serif; font-size: 11pt; color: #0f172a; line-height: 1.45; }
    h1 { font-size: 20pt; margin: 0 0 8pt; padding-bottom: 6pt; border-bottom: 1px solid #e5e7eb; }
    h2 { font-size: 14pt; margin: 14pt 0 6pt; }
    h3 { font-size: 11.5pt; margin: 8pt 0 4pt; color: #0b225b; }
    p  { margin: 6pt 0; }
    ul { margin: 0 0 6pt 16pt; padding: 0; }
    li { margin: 3pt 0; }
    strong { font-weight: 700; }
"""


def _heading(level: int, text: str) -> str:
    return f"<h{level}>{escape_markup(text)}</h{level}>"


def _list(entries: list[str]) -> str:
    return "<ul>" + "".join(entries) + "</ul>"


def _item_entry(item: object) -> str:
    if isinstance(item, StructuredRequirement):
        nested = _list([f"<li>{escape_markup(bullet)}</li>" for bullet in item.bullets]) if item.bullets else ""
        return f"<li><strong>{escape_markup(item.statement)}</strong>{nested}</li>"
    text = item if isinstance(item, str) else item_text(item)
    return f"<li>{escape_markup(text)}</li>"


def _section_html(section: RenderSection) -> str:
    parts = [_heading(2, section.title)]
    for level in ("MUST", "SHOULD"):
        items = section.groups[level]
        if items:
            parts.append(_heading(3, level) + _list([_item_entry(item) for item in items]))
    return "".join(parts)


def render_html(model: DocumentModel, *, context: RenderContext | None = None) -> str:
    """Render a complete, print-ready hypertext document for remote PDF conversion."""
    ctx = context or build_render_context(model)
    body: list[str] = [_heading(1, ctx.title)]
    if ctx.intro:
        body.append(f"<p>{escape_markup(ctx.intro)}</p>")

    if ctx.highlights:
        entries = [
            f"<li><strong>{escape_markup(item_level(item))}</strong> — {escape_markup(item_text(item))}</li>"
            for item in ctx.highlights
        ]
        body.append(_heading(2, ctx.highlights_heading) + _list(entries))

    body.extend(_section_html(section) for section in ctx.visible_sections())

    if ctx.sections.use_cases:
        body.append(
            _heading(2, "Use Cases") + _list([f"<li>{escape_markup(use_case)}</li>" for use_case in ctx.sections.use_cases])
        )

    if ctx.closing_summary:
        body.append(_heading(2, "Summary") + f"<p>{escape_markup(ctx.closing_summary)}</p>")

    return (
        "<!doctype html>\n"
        f'<html><head><meta charset="utf-8"/><title>{escape_markup(ctx.title)}</title>'
        f"<style>{PRINT_STYLESHEET}</style></head>\n"
        "<body>\n  " + "\n  ".join(body) + "\n</body></html>"
    )


def render_opaque_html(text: str) -> str:
    return (
        '<html><body><pre style="white-space:pre-wrap;font-family:ui-monospace,Consolas,monospace">'
        f"{escape_markup(text or '')}</pre></body></html>"
    )

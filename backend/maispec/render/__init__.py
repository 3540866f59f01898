from maispec.render.context import RenderContext, RenderSection, build_render_context
from maispec.render.html import render_html, render_opaque_html
from maispec.render.markdown import render_markdown, render_opaque_markdown
from maispec.render.text import escape_markup, split_sentences, take_sentences

__all__ = [
    "RenderContext",
    "RenderSection",
    "build_render_context",
    "escape_markup",
    "render_html",
    "render_markdown",
    "render_opaque_html",
    "render_opaque_markdown",
    "split_sentences",
    "take_sentences",
]

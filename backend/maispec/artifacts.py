from __future__ import annotations

from dataclasses import dataclass
import re

from maispec.config import settings
from maispec.render import render_html, render_markdown, render_opaque_html, render_opaque_markdown
from maispec.store import StoreSnapshot

_UNSAFE_FILENAME_PATTERN = re.compile(r"[^\w-]+", flags=re.ASCII)

MEDIA_TYPES: dict[str, str] = {
    "pdf": "application/pdf",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "md": "text/markdown; charset=utf-8",
    "txt": "text/plain; charset=utf-8",
    "html": "text/html; charset=utf-8",
}


@dataclass(frozen=True)
class Artifact:
    filename: str
    media_type: str
    content: bytes


def artifact_filename(title: str | None, extension: str) -> str:
    base = (title or "").strip() or settings.fallback_artifact_name
    return f"{_UNSAFE_FILENAME_PATTERN.sub('_', base)}.{extension.lstrip('.')}"


def snapshot_title(snapshot: StoreSnapshot) -> str | None:
    return snapshot.document.title if snapshot.document is not None else None


def build_artifact(snapshot: StoreSnapshot, extension: str, content: bytes | str) -> Artifact:
    body = content.encode("utf-8") if isinstance(content, str) else content
    return Artifact(
        filename=artifact_filename(snapshot_title(snapshot), extension),
        media_type=MEDIA_TYPES[extension],
        content=body,
    )


def export_markdown(snapshot: StoreSnapshot) -> str:
    if snapshot.document is not None:
        return render_markdown(snapshot.document)
    return render_opaque_markdown(snapshot.opaque_text)


def export_html(snapshot: StoreSnapshot) -> str:
    if snapshot.document is not None:
        return render_html(snapshot.document)
    return render_opaque_html(snapshot.opaque_text)


def docx_export_payload(snapshot: StoreSnapshot) -> dict[str, object]:
    if snapshot.document is not None:
        return {"json": snapshot.document.to_payload()}
    return {"markdown": snapshot.opaque_text or "", "title": settings.default_title}


def markdown_artifact(snapshot: StoreSnapshot) -> Artifact:
    return build_artifact(snapshot, "md", export_markdown(snapshot))


def html_artifact(snapshot: StoreSnapshot) -> Artifact:
    return build_artifact(snapshot, "html", export_html(snapshot))


def text_artifact(snapshot: StoreSnapshot) -> Artifact | None:
    """Plain-text download of opaque output; structured documents use Markdown instead."""
    if snapshot.mode != "opaque":
        return None
    return build_artifact(snapshot, "txt", snapshot.opaque_text)

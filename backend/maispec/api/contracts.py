from __future__ import annotations

from typing import Any, Callable

from pydantic import BaseModel, Field

from maispec.collaborators import ExportClient, GenerationClient
from maispec.store import DocumentStore

DocumentStoreGetter = Callable[[], DocumentStore]
GenerationClientGetter = Callable[[], GenerationClient]
ExportClientGetter = Callable[[], ExportClient]


class IngestRequest(BaseModel):
    requirements: Any = None


class EditLinesRequest(BaseModel):
    lines: list[str] = Field(default_factory=list, max_length=500)

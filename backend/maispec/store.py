from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Iterable, Literal

from maispec.intake import IntakeResult
from maispec.merge import merge_functional_edit, merge_nfr_edit
from maispec.models import DocumentModel

logger = logging.getLogger("maispec.store")

StoreMode = Literal["structured", "opaque", "empty"]


class NoDocumentError(RuntimeError):
    """Raised when an edit needs a structured document but none is stored."""


@dataclass(frozen=True)
class StoreSnapshot:
    document: DocumentModel | None = None
    opaque_text: str = ""

    @property
    def mode(self) -> StoreMode:
        if self.document is not None:
            return "structured"
        if self.opaque_text:
            return "opaque"
        return "empty"


class DocumentStore:
    """Holds the single current document; every transition swaps the whole snapshot.

    New state is computed before it is assigned, so a transition that raises
    leaves the previous snapshot untouched.
    """

    def __init__(self) -> None:
        self._snapshot = StoreSnapshot()

    @property
    def snapshot(self) -> StoreSnapshot:
        return self._snapshot

    @property
    def current(self) -> DocumentModel | None:
        return self._snapshot.document

    def require_document(self) -> DocumentModel:
        document = self._snapshot.document
        if document is None:
            raise NoDocumentError("No structured requirements document is loaded.")
        return document

    def load(self, result: IntakeResult) -> StoreSnapshot:
        if result.document is not None:
            self._snapshot = StoreSnapshot(document=result.document)
        else:
            self._snapshot = StoreSnapshot(opaque_text=result.opaque_text)
        logger.info("document_store_loaded", extra={"event": "document_store_loaded", "mode": self._snapshot.mode})
        return self._snapshot

    def replace(self, document: DocumentModel) -> DocumentModel:
        self._snapshot = StoreSnapshot(document=document)
        return document

    def apply_functional_edit(self, lines: Iterable[object]) -> DocumentModel:
        return self.replace(merge_functional_edit(self.require_document(), lines))

    def apply_nfr_edit(self, category: str, lines: Iterable[object]) -> DocumentModel:
        return self.replace(merge_nfr_edit(self.require_document(), category, lines))

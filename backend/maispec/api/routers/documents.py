from __future__ import annotations

import logging

from fastapi import APIRouter, File, Form, HTTPException, UploadFile
from fastapi.responses import Response

from maispec.api.contracts import (
    DocumentStoreGetter,
    EditLinesRequest,
    ExportClientGetter,
    GenerationClientGetter,
    IngestRequest,
)
from maispec.artifacts import (
    Artifact,
    build_artifact,
    docx_export_payload,
    export_html,
    html_artifact,
    markdown_artifact,
    text_artifact,
)
from maispec.classify import LevelGroups
from maispec.collaborators import CollaboratorError, UploadedFile
from maispec.config import settings
from maispec.generation import PROJECT_TYPES, GenerationRequest, RequirementsGenerator
from maispec.intake import ingest_raw_output
from maispec.merge import UnknownCategoryError
from maispec.models import FunctionalItem
from maispec.render import build_render_context
from maispec.store import DocumentStore, NoDocumentError

logger = logging.getLogger("maispec.api")


def serialize_item(item: FunctionalItem | str) -> object:
    if isinstance(item, str):
        return item
    return item.model_dump(mode="json", exclude_none=True)


def serialize_groups(groups: LevelGroups) -> dict[str, list[object]]:
    return {level: [serialize_item(item) for item in items] for level, items in groups.items()}


def serialize_state(store: DocumentStore) -> dict[str, object]:
    snapshot = store.snapshot
    return {
        "mode": snapshot.mode,
        "document": snapshot.document.to_payload() if snapshot.document is not None else None,
        "text": snapshot.opaque_text,
    }


def attachment_response(artifact: Artifact) -> Response:
    return Response(
        content=artifact.content,
        media_type=artifact.media_type,
        headers={"Content-Disposition": f'attachment; filename="{artifact.filename}"'},
    )


def _collaborator_http_error(exc: CollaboratorError) -> HTTPException:
    return HTTPException(status_code=502, detail={"message": str(exc), "operation": exc.operation})


def build_documents_router(
    *,
    get_store: DocumentStoreGetter,
    get_generation_client: GenerationClientGetter,
    get_export_client: ExportClientGetter,
) -> APIRouter:
    router = APIRouter()

    def require_document(store: DocumentStore):
        try:
            return store.require_document()
        except NoDocumentError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc

    @router.post("/generate")
    async def generate_requirements(
        idea: str = Form(default=""),
        project_type: str = Form(default=PROJECT_TYPES[0]),
        description: str = Form(default=""),
        model_choice: str | None = Form(default=None),
        file: UploadFile | None = File(default=None),
    ) -> dict[str, object]:
        upload = None
        if file is not None and file.filename:
            content = await file.read(settings.max_upload_file_bytes + 1)
            if len(content) > settings.max_upload_file_bytes:
                raise HTTPException(
                    status_code=413,
                    detail=f"Uploaded file exceeds {settings.max_upload_file_bytes} bytes.",
                )
            upload = UploadedFile(
                filename=file.filename,
                content=content,
                content_type=file.content_type or "application/octet-stream",
            )

        store = get_store()
        generator = RequirementsGenerator(get_generation_client(), store)
        try:
            outcome = await generator.generate(
                GenerationRequest(
                    idea=idea,
                    project_type=project_type,
                    description=description,
                    upload=upload,
                    model_choice=model_choice,
                )
            )
        except CollaboratorError as exc:
            raise _collaborator_http_error(exc) from exc

        return {"status": outcome.status, "message": outcome.message, **serialize_state(store)}

    @router.post("/document")
    def ingest_document(payload: IngestRequest) -> dict[str, object]:
        store = get_store()
        result = ingest_raw_output(payload.requirements)
        store.load(result)
        return {"failure": result.failure, **serialize_state(store)}

    @router.get("/document")
    def get_document() -> dict[str, object]:
        return serialize_state(get_store())

    @router.get("/document/sections")
    def get_sections() -> dict[str, object]:
        document = require_document(get_store())
        context = build_render_context(document)
        return {
            "title": context.title,
            "summary": context.sections.summary,
            "intro": context.intro,
            "highlights": [serialize_item(item) for item in context.highlights],
            "functional": serialize_groups(context.remaining_functional),
            "categories": {name: serialize_groups(groups) for name, groups in context.sections.non_functional()},
            "use_cases": list(context.sections.use_cases),
            "visible_sections": [section.key for section in context.visible_sections()],
        }

    @router.put("/document/functional")
    def edit_functional(payload: EditLinesRequest) -> dict[str, object]:
        store = get_store()
        require_document(store)
        store.apply_functional_edit(payload.lines)
        return serialize_state(store)

    @router.put("/document/non-functional/{category}")
    def edit_non_functional(category: str, payload: EditLinesRequest) -> dict[str, object]:
        store = get_store()
        require_document(store)
        try:
            store.apply_nfr_edit(category, payload.lines)
        except UnknownCategoryError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return serialize_state(store)

    @router.get("/document/export/markdown")
    def download_markdown() -> Response:
        return attachment_response(markdown_artifact(get_store().snapshot))

    @router.get("/document/export/html")
    def download_html() -> Response:
        return attachment_response(html_artifact(get_store().snapshot))

    @router.get("/document/export/text")
    def download_text() -> Response:
        artifact = text_artifact(get_store().snapshot)
        if artifact is None:
            raise HTTPException(status_code=404, detail="Plain-text download is only available for unstructured output.")
        return attachment_response(artifact)

    @router.post("/document/export/pdf")
    async def export_pdf() -> Response:
        snapshot = get_store().snapshot
        try:
            content = await get_export_client().export_pdf(export_html(snapshot))
        except CollaboratorError as exc:
            raise _collaborator_http_error(exc) from exc
        return attachment_response(build_artifact(snapshot, "pdf", content))

    @router.post("/document/export/docx")
    async def export_docx() -> Response:
        snapshot = get_store().snapshot
        try:
            content = await get_export_client().export_docx(docx_export_payload(snapshot))
        except CollaboratorError as exc:
            raise _collaborator_http_error(exc) from exc
        return attachment_response(build_artifact(snapshot, "docx", content))

    return router

from __future__ import annotations

from dataclasses import dataclass
import logging
import time
from typing import Any, Literal

import httpx

from maispec.config import Settings

logger = logging.getLogger("maispec.collaborators")

Operation = Literal["generate", "export-pdf", "export-docx"]

_OPERATION_LABELS: dict[str, str] = {
    "generate": "Generation failed",
    "export-pdf": "PDF export failed",
    "export-docx": "DOCX export failed",
}


class CollaboratorError(RuntimeError):
    """Raised when a remote collaborator is unreachable or answers with a non-success status."""

    def __init__(self, operation: Operation, detail: str, status_code: int | None = None) -> None:
        self.operation = operation
        self.detail = detail
        self.status_code = status_code
        super().__init__(f"{_OPERATION_LABELS[operation]}: {detail}")


@dataclass(frozen=True)
class UploadedFile:
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


class _CollaboratorClient:
    def __init__(
        self,
        settings: Settings,
        *,
        base_url: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._base_url = base_url.rstrip("/")
        self._transport = transport

    async def _post(self, operation: Operation, path: str, **kwargs: Any) -> httpx.Response:
        started = time.perf_counter()
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._settings.collaborator_timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.post(path, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning(
                "collaborator_unreachable",
                extra={
                    "event": "collaborator_unreachable",
                    "operation": operation,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                    "error": str(exc),
                },
            )
            raise CollaboratorError(operation, f"could not reach {self._base_url} ({exc.__class__.__name__})") from exc

        duration_ms = round((time.perf_counter() - started) * 1000, 2)
        if not response.is_success:
            logger.warning(
                "collaborator_failed",
                extra={
                    "event": "collaborator_failed",
                    "operation": operation,
                    "status_code": response.status_code,
                    "duration_ms": duration_ms,
                },
            )
            raise CollaboratorError(operation, f"HTTP {response.status_code}", status_code=response.status_code)

        logger.info(
            "collaborator_completed",
            extra={
                "event": "collaborator_completed",
                "operation": operation,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
                "response_bytes": len(response.content),
            },
        )
        return response


class GenerationClient(_CollaboratorClient):
    def __init__(self, settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        super().__init__(settings, base_url=settings.generation_base_url, transport=transport)

    async def generate(
        self,
        *,
        project_idea: str,
        model_choice: str | None = None,
        sections: str | None = None,
        upload: UploadedFile | None = None,
    ) -> Any:
        """Request a draft and return its ``requirements`` value (raw model output)."""
        form = {
            "project_idea": project_idea,
            "model_choice": model_choice or self._settings.default_model_choice,
            "sections": sections or self._settings.requested_sections,
        }
        files = None
        if upload is not None:
            files = {"file": (upload.filename, upload.content, upload.content_type)}
        response = await self._post("generate", "/generate-requirements/", data=form, files=files)
        try:
            payload = response.json()
        except ValueError as exc:
            raise CollaboratorError("generate", "response was not valid JSON", status_code=response.status_code) from exc
        if not isinstance(payload, dict):
            return ""
        requirements = payload.get("requirements")
        return "" if requirements is None else requirements


class ExportClient(_CollaboratorClient):
    def __init__(self, settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        super().__init__(settings, base_url=settings.export_base_url, transport=transport)

    async def export_pdf(self, html_document: str) -> bytes:
        response = await self._post(
            "export-pdf",
            "/export/pdf",
            content=html_document.encode("utf-8"),
            headers={"Content-Type": "text/plain;charset=utf-8"},
        )
        return response.content

    async def export_docx(self, payload: dict[str, object]) -> bytes:
        response = await self._post("export-docx", "/export/docx", json=payload)
        return response.content

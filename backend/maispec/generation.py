from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Literal

from maispec.collaborators import GenerationClient, UploadedFile
from maispec.intake import IntakeResult, ingest_raw_output
from maispec.observability import sanitize_for_logging
from maispec.store import DocumentStore

logger = logging.getLogger("maispec.generation")

PROJECT_TYPES = ("Mechanical", "Electrical", "Civil", "Software", "Other")
GREETINGS = frozenset(
    {
        "hi",
        "hello",
        "hey",
        "hola",
        "greetings",
        "good morning",
        "good afternoon",
        "good evening",
    }
)
EMPTY_INPUT_MESSAGE = "Tell me a bit about the project first 🙂"
GREETING_MESSAGE = "👋 Add a short description and I’ll draft a structured requirements doc."

JSON_GUIDE = """
You are producing a requirements document as pure JSON.
Do NOT include Markdown, code fences, or any explanatory text.
Return ONLY a single JSON object with this schema:

{
  "title": string,
  "summary": string,
  "functional": [
    {
      "id": "FR001",
      "level": "MUST" | "SHOULD" | "COULD",
      "statement": string,
      "bullets": [string],
      "rationale": string,
      "standards": [string]
    }
  ],
  "nonFunctional": [string],
  "constraints": [string],
  "outOfScope": [string],
  "risks": [ { "risk": string, "mitigation": string } ],
  "openQuestions": [string],
  "useCases": [string]
}

Rules:
- Keep sentences concise.
- Prefer MUST/SHOULD appropriately.
- Ensure valid JSON (no trailing commas, no comments).
"""


@dataclass(frozen=True)
class GenerationRequest:
    idea: str = ""
    project_type: str = PROJECT_TYPES[0]
    description: str = ""
    upload: UploadedFile | None = None
    model_choice: str | None = None


@dataclass(frozen=True)
class GenerationOutcome:
    status: Literal["needs_input", "greeting", "generated"]
    message: str = ""
    intake: IntakeResult | None = None


def is_greeting(idea: str) -> bool:
    return idea.strip().lower() in GREETINGS


def build_prompt(request: GenerationRequest) -> str:
    lines: list[str] = []
    if request.idea.strip():
        lines.append(f"Idea: {request.idea.strip()}")
    if request.project_type.strip():
        lines.append(f"Project Type: {request.project_type.strip()}")
    if request.description.strip():
        lines.append(f"Description: {request.description.strip()}")
    lines.append(JSON_GUIDE)
    return "\n\n".join(lines)


class RequirementsGenerator:
    """Validates the user's input, calls the generation backend and stores the result."""

    def __init__(self, client: GenerationClient, store: DocumentStore) -> None:
        self._client = client
        self._store = store

    async def generate(self, request: GenerationRequest) -> GenerationOutcome:
        if not request.idea.strip() and not request.description.strip():
            return GenerationOutcome(status="needs_input", message=EMPTY_INPUT_MESSAGE)
        if is_greeting(request.idea):
            return GenerationOutcome(status="greeting", message=GREETING_MESSAGE)

        logger.info(
            "generation_requested",
            extra={
                "event": "generation_requested",
                "project_type": request.project_type,
                "idea_preview": sanitize_for_logging(request.idea, max_string_length=80),
                "has_upload": request.upload is not None,
            },
        )
        # A CollaboratorError propagates here and the stored document stays as it was.
        raw = await self._client.generate(
            project_idea=build_prompt(request),
            model_choice=request.model_choice,
            upload=request.upload,
        )
        result = ingest_raw_output(raw)
        self._store.load(result)
        return GenerationOutcome(status="generated", intake=result)
